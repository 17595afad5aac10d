"""Determine which configuration profile an instance is currently booted into."""

import logging

from vmdisk.compute.types import ACTION_LINODE_BOOT, ACTION_LINODE_REBOOT, ENTITY_LINODE, INSTANCE_RUNNING

logger = logging.getLogger(__name__)


async def get_current_booted_config(client, instance_id):
    """Return the ID of the config the instance is booted into, or None if it is not running.

    The most recent boot/reboot event names the config it used. An instance
    with no such event was booted into its first config.
    """
    instance = await client.get_instance(instance_id)
    if instance.status != INSTANCE_RUNNING:
        return None

    events = await client.list_events(
        {
            "entity.id": instance_id,
            "entity.type": ENTITY_LINODE,
            "+or": [{"action": ACTION_LINODE_BOOT}, {"action": ACTION_LINODE_REBOOT}],
            "+order_by": "created",
            "+order": "desc",
        },
        max_pages=1,
    )
    for event in events:
        if event.secondary_entity is not None and event.secondary_entity.id:
            return event.secondary_entity.id

    configs = await client.list_instance_configs(instance_id)
    if not configs:
        logger.debug(f"Instance {instance_id} is running but has no configs")
        return None
    return configs[0].id
