"""'disk resize' CLI handler."""

import asyncio
import logging
import sys

from vmdisk.commands.disk import add_client_arguments, make_client
from vmdisk.disks.resize import DiskResizeError, resize_disk

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 600


def handle_resize(args):
    """CLI handler for 'disk resize'."""
    if args.size <= 0:
        logger.error(f"Error: --size must be a positive integer, got {args.size}")
        sys.exit(1)
    if args.dry_run:
        _log_plan(args)
        return
    asyncio.run(_handle_resize(args))


def _log_plan(args):
    inst = args.instance_id
    logger.info(f"[dry-run] resize disk {args.disk_id} on instance {inst} to {args.size} MB (timeout {args.timeout}s per wait)")
    logger.info(f"[dry-run] 1. read booted config of instance {inst}")
    logger.info(f"[dry-run] 2. if running: shut down instance {inst}, wait for linode_shutdown")
    logger.info(f"[dry-run] 3. read disk {args.disk_id}")
    logger.info(f"[dry-run] 4. resize disk {args.disk_id} to {args.size}, wait for disk_resize")
    logger.info(f"[dry-run] 5. wait for disk {args.disk_id} status 'ready', verify size == {args.size}")
    logger.info(f"[dry-run] 6. if it was running: boot instance {inst} into its previous config, wait for linode_boot")


async def _handle_resize(args):
    async with make_client(args) as client:
        try:
            await resize_disk(client, args.instance_id, args.disk_id, args.size, args.timeout)
        except DiskResizeError as e:
            logger.error(f"Error ({e.phase}): {e}")
            sys.exit(1)

    logger.info(f"Disk {args.disk_id} resized to {args.size} MB.")


def register_resize_action(subparsers):
    parser = subparsers.add_parser("resize", help="Resize an instance disk, shutting down and rebooting if needed")
    add_client_arguments(parser)
    parser.add_argument("--size", type=int, required=True, help="New disk size in MB")
    parser.add_argument(
        "--timeout", type=int, default=DEFAULT_TIMEOUT, help=f"Seconds to wait for each step (default: {DEFAULT_TIMEOUT})"
    )
    parser.add_argument("--dry-run", action="store_true", help="Print the planned steps without executing")
    parser.set_defaults(func=handle_resize)
