"""Compute API: client, event poller, status waiter, types."""

from vmdisk.compute.booted import get_current_booted_config
from vmdisk.compute.client import ComputeClient
from vmdisk.compute.errors import (
    ComputeAPIError,
    ComputeError,
    ComputeNotFoundError,
    ComputeTimeoutError,
    EventFailedError,
    WaitTimeoutError,
)
from vmdisk.compute.events import EventPoller
from vmdisk.compute.types import Event, Instance, InstanceConfig, InstanceDisk
from vmdisk.compute.waiters import wait_for_instance_disk_status

__all__ = [
    "ComputeClient",
    "EventPoller",
    "wait_for_instance_disk_status",
    "get_current_booted_config",
    "Event",
    "Instance",
    "InstanceConfig",
    "InstanceDisk",
    "ComputeError",
    "ComputeAPIError",
    "ComputeNotFoundError",
    "ComputeTimeoutError",
    "EventFailedError",
    "WaitTimeoutError",
]
