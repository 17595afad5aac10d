"""'disk show' CLI handler."""

import asyncio
import logging
import sys

from vmdisk.commands.disk import add_client_arguments, make_client
from vmdisk.compute.errors import ComputeError

logger = logging.getLogger(__name__)


def handle_show(args):
    """CLI handler for 'disk show'."""
    asyncio.run(_handle_show(args))


async def _handle_show(args):
    async with make_client(args) as client:
        try:
            disk = await client.get_instance_disk(args.instance_id, args.disk_id)
        except ComputeError as e:
            logger.error(f"Error: {e}")
            sys.exit(1)

    logger.info(f"Disk:     {disk.id} ({disk.label or 'unlabeled'})")
    logger.info(f"Size:     {disk.size} MB")
    logger.info(f"Status:   {disk.status}")
    if disk.filesystem:
        logger.info(f"FS:       {disk.filesystem}")


def register_show_action(subparsers):
    parser = subparsers.add_parser("show", help="Show an instance disk")
    add_client_arguments(parser)
    parser.set_defaults(func=handle_show)
