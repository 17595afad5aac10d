"""Disk operations that span several remote steps."""

from vmdisk.disks.resize import (
    DiskLookupError,
    DiskResizeError,
    DiskSizeMismatchError,
    RequestRejectedError,
    ResizeTimeoutError,
    resize_disk,
)

__all__ = [
    "resize_disk",
    "DiskResizeError",
    "DiskLookupError",
    "RequestRejectedError",
    "ResizeTimeoutError",
    "DiskSizeMismatchError",
]
