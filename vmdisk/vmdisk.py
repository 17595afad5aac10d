#!/usr/bin/env python3
"""Instance disk tools: CLI entrypoint."""

import argparse

from vmdisk.commands.disk import register_disk_command
from vmdisk.logging_setup import setup_cli_logging


def main():
    parser = argparse.ArgumentParser(description="Instance disk tools")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    register_disk_command(subparsers)

    args = parser.parse_args()
    setup_cli_logging(verbose=args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
