"""Disk commands: show and resize instance disks."""

import logging
import sys

from vmdisk.compute.client import ComputeClient
from vmdisk.config import DEFAULT_CONFIG_PATH, DEFAULT_PROFILE, resolve_client_config
from vmdisk.redact import register_secret

logger = logging.getLogger(__name__)


def add_client_arguments(parser):
    """Add the API connection flags shared by every disk action."""
    parser.add_argument("--instance-id", type=int, required=True, help="Instance ID")
    parser.add_argument("--disk-id", type=int, required=True, help="Disk ID")
    parser.add_argument("--token", default=None, help="API token (fallback: LINODE_TOKEN env var, then config file)")
    parser.add_argument("--api-url", default=None, help="API base URL (fallback: LINODE_URL env var, then config file)")
    parser.add_argument(
        "--api-version", default=None, help="API version, e.g. v4beta (fallback: LINODE_API_VERSION env var, then config file)"
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"YAML config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--profile", default=DEFAULT_PROFILE, help=f"Config file profile (default: {DEFAULT_PROFILE})")


def make_client(args):
    """Build a ComputeClient from parsed CLI args.

    Exits with status 1 if no API token is configured.
    """
    try:
        config = resolve_client_config(
            token=args.token,
            api_url=args.api_url,
            api_version=args.api_version,
            config_path=args.config,
            profile=args.profile,
        )
    except ValueError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    register_secret(config.token)
    return ComputeClient(config)


def register_disk_command(subparsers):
    """Register the 'disk' command with show/resize action subparsers."""
    from vmdisk.commands.disk.resize import register_resize_action
    from vmdisk.commands.disk.show import register_show_action

    disk_parser = subparsers.add_parser("disk", help="Manage instance disks")
    action_subparsers = disk_parser.add_subparsers(dest="action", required=True)

    register_show_action(action_subparsers)
    register_resize_action(action_subparsers)
