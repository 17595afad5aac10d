"""Status polling for instance sub-resources."""

import asyncio
import logging

from vmdisk.compute.errors import ComputeNotFoundError, WaitTimeoutError

logger = logging.getLogger(__name__)


async def wait_for_instance_disk_status(client, instance_id, disk_id, status, timeout):
    """Poll a disk until its status matches *status* or timeout.

    Returns:
        The InstanceDisk as last observed (with the target status).

    Raises:
        WaitTimeoutError: on timeout, carrying the last observed status.
    """
    interval = client.config.event_poll_interval
    last_status = None

    async def _poll():
        nonlocal last_status
        while True:
            try:
                disk = await client.get_instance_disk(instance_id, disk_id)
            except ComputeNotFoundError:
                logger.warning(f"Warning: disk {disk_id} on instance {instance_id} not found, retrying.")
            else:
                last_status = disk.status
                if disk.status == status:
                    return disk
            await asyncio.sleep(interval)

    try:
        return await asyncio.wait_for(_poll(), timeout)
    except asyncio.TimeoutError as e:
        raise WaitTimeoutError(
            f"Timeout after {timeout}s waiting for disk {disk_id} status '{status}' (last: '{last_status}')",
            timeout,
            last_status,
        ) from e
