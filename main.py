#!/usr/bin/env python3
"""Instance disk tools: CLI entrypoint."""

from vmdisk.vmdisk import main

if __name__ == "__main__":
    main()
