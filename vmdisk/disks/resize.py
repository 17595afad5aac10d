"""Disk resize: shut the instance down if needed, resize, verify, reboot.

Every remote step is accepted synchronously and confirmed through an event
or status poll. Steps run strictly in order and the first failure aborts
the rest; nothing is rolled back, so an instance shut down before a failed
resize stays powered off.
"""

import logging

from vmdisk.compute.errors import ComputeError, WaitTimeoutError
from vmdisk.compute.types import ACTION_DISK_RESIZE, ACTION_LINODE_BOOT, ACTION_LINODE_SHUTDOWN, DISK_READY

logger = logging.getLogger(__name__)


# ── Errors ─────────────────────────────────────────────────────────


class DiskResizeError(Exception):
    """A disk resize step failed.

    ``phase`` is one of "lookup", "shutdown", "resize", "status-wait", "boot".
    The collaborator error, if any, is chained as ``__cause__``.
    """

    def __init__(self, phase, message):
        self.phase = phase
        super().__init__(message)


class DiskLookupError(DiskResizeError):
    """Booted config or disk state could not be read."""


class RequestRejectedError(DiskResizeError):
    """Watch registration or a shutdown/resize/boot request was refused."""


class ResizeTimeoutError(DiskResizeError):
    """An event watch or status wait exceeded its timeout."""


class DiskSizeMismatchError(DiskResizeError):
    """Every step reported success but the disk does not have the requested size."""

    def __init__(self, disk_id, previous_size, expected, actual):
        self.disk_id = disk_id
        self.previous_size = previous_size
        self.expected = expected
        self.actual = actual
        super().__init__(
            "resize",
            f"failed to resize disk {disk_id} from {previous_size} to {expected}: disk size is {actual}",
        )


# ── Helpers ────────────────────────────────────────────────────────


async def _await_completion(awaitable, phase, what):
    """Await a poller/waiter, translating its failures into DiskResizeError."""
    try:
        return await awaitable
    except WaitTimeoutError as e:
        raise ResizeTimeoutError(phase, f"failed to wait for {what}: {e}") from e
    except ComputeError as e:
        raise DiskResizeError(phase, f"failed to wait for {what}: {e}") from e


async def _tracked_action(client, instance_id, action, request, timeout, phase, what):
    """Register an event watch, send *request*, then wait for the event.

    The watch always exists before the request goes out, so a fast
    completion event cannot be missed.
    """
    try:
        poller = await client.new_event_poller(instance_id, action)
    except ComputeError as e:
        raise RequestRejectedError(phase, f"failed to poll for events: {e}") from e

    try:
        await request()
    except ComputeError as e:
        raise RequestRejectedError(phase, f"{what} request for instance {instance_id} rejected: {e}") from e

    return await _await_completion(poller.wait_for_finished(timeout), phase, what)


# ── Core logic ─────────────────────────────────────────────────────


async def resize_disk(client, instance_id, disk_id, new_size, timeout):
    """Resize an instance disk to *new_size*, restoring the instance's power state.

    A running instance is shut down first and booted back into the config
    it was running before the resize. An instance that was already off is
    left off. *timeout* (seconds) applies to each wait on its own.

    No short-circuit is made when *new_size* equals the current size.

    Raises:
        ValueError: if *new_size* is not a positive integer.
        DiskResizeError: (or a subclass) on the first failing step.
    """
    if isinstance(new_size, bool) or not isinstance(new_size, int) or new_size <= 0:
        raise ValueError(f"new_size must be a positive integer, got {new_size!r}")

    try:
        config_id = await client.get_current_booted_config(instance_id)
    except ComputeError as e:
        raise DiskLookupError("lookup", f"failed to get booted config for instance {instance_id}: {e}") from e

    should_shutdown = config_id is not None

    if should_shutdown:
        logger.info(f"Shutting down instance {instance_id} for disk resize")
        await _tracked_action(
            client,
            instance_id,
            ACTION_LINODE_SHUTDOWN,
            lambda: client.shutdown_instance(instance_id),
            timeout,
            "shutdown",
            "instance shutdown",
        )
        logger.debug(f"Instance {instance_id} finished shutting down")

    try:
        disk = await client.get_instance_disk(instance_id, disk_id)
    except ComputeError as e:
        raise DiskLookupError("lookup", f"failed to get instance disk {disk_id}: {e}") from e

    logger.info(f"Resizing disk {disk.id} on instance {instance_id}: {disk.size} -> {new_size}")

    # Disk resize events are scoped to the instance, not the disk.
    await _tracked_action(
        client,
        instance_id,
        ACTION_DISK_RESIZE,
        lambda: client.resize_instance_disk(instance_id, disk.id, new_size),
        timeout,
        "resize",
        "disk resize",
    )

    updated = await _await_completion(
        client.wait_for_instance_disk_status(instance_id, disk.id, DISK_READY, timeout),
        "status-wait",
        "disk ready",
    )
    if updated.size != new_size:
        raise DiskSizeMismatchError(disk.id, disk.size, new_size, updated.size)

    logger.debug("Resize operation complete")

    if should_shutdown:
        logger.info(f"Booting instance {instance_id} into previously booted config {config_id}")
        await _tracked_action(
            client,
            instance_id,
            ACTION_LINODE_BOOT,
            lambda: client.boot_instance(instance_id, config_id),
            timeout,
            "boot",
            f"instance boot (config {config_id})",
        )
        logger.debug(f"Instance {instance_id} booted")
