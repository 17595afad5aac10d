"""Unit tests for EventPoller and wait_for_instance_disk_status."""

import asyncio

import pytest

from vmdisk.compute.errors import ComputeAPIError, ComputeNotFoundError, EventFailedError, WaitTimeoutError
from vmdisk.compute.events import EventPoller
from vmdisk.compute.types import DISK_NOT_READY, DISK_READY, Event, EventEntity, InstanceDisk
from vmdisk.compute.waiters import wait_for_instance_disk_status
from vmdisk.config import ClientConfig


def _event(event_id, action="disk_resize", status="finished", entity_id=123, entity_type="linode"):
    return Event(id=event_id, action=action, status=status, entity=EventEntity(id=entity_id, type=entity_type))


class ScriptedEventsClient:
    """Serves list_events from a script of event lists; the last list repeats."""

    def __init__(self, *listings, event_updates=None):
        self.config = ClientConfig(token="test-token-abcdef", event_poll_ms=1)
        self.listings = list(listings)
        self.event_updates = event_updates or {}
        self.filters = []
        self.max_pages = []

    async def list_events(self, filter=None, max_pages=None):
        self.filters.append(filter)
        self.max_pages.append(max_pages)
        if len(self.listings) > 1:
            return self.listings.pop(0)
        return self.listings[0]

    async def get_event(self, event_id):
        updates = self.event_updates[event_id]
        return updates.pop(0) if len(updates) > 1 else updates[0]


# ── EventPoller ───────────────────────────────────────────────────


async def test_prime_ignores_existing_events():
    client = ScriptedEventsClient([_event(1)], [_event(2), _event(1)])
    poller = EventPoller(client, 123, "linode", "disk_resize")

    await poller.prime()
    event = await poller.wait_for_finished(1)

    assert event.id == 2


async def test_prime_uses_entity_and_action_filter():
    client = ScriptedEventsClient([])
    poller = EventPoller(client, 123, "linode", "linode_shutdown")

    await poller.prime()

    flt = client.filters[0]
    assert flt["entity.id"] == 123
    assert flt["entity.type"] == "linode"
    assert flt["action"] == "linode_shutdown"


async def test_polls_read_only_the_newest_page():
    client = ScriptedEventsClient([], [_event(5)])
    poller = EventPoller(client, 123, "linode", "disk_resize")

    await poller.prime()
    await poller.wait_for_finished(1)

    assert client.max_pages == [1, 1]
    assert client.filters[0]["+order"] == "desc"


async def test_waits_for_new_event_to_appear():
    client = ScriptedEventsClient([], [], [], [_event(5)])
    poller = EventPoller(client, 123, "linode", "disk_resize")

    await poller.prime()
    event = await poller.wait_for_finished(1)

    assert event.id == 5


async def test_follows_started_event_until_finished():
    client = ScriptedEventsClient(
        [],
        [_event(5, status="started")],
        event_updates={5: [_event(5, status="started"), _event(5, status="finished")]},
    )
    poller = EventPoller(client, 123, "linode", "disk_resize")

    await poller.prime()
    event = await poller.wait_for_finished(1)

    assert event.status == "finished"


async def test_failed_event_raises():
    client = ScriptedEventsClient([], [_event(5, status="failed")])
    poller = EventPoller(client, 123, "linode", "disk_resize")

    await poller.prime()
    with pytest.raises(EventFailedError) as exc_info:
        await poller.wait_for_finished(1)

    assert exc_info.value.event.id == 5


async def test_events_for_other_entities_or_actions_are_ignored():
    client = ScriptedEventsClient([], [_event(6, entity_id=999), _event(7, action="linode_boot")])
    poller = EventPoller(client, 123, "linode", "disk_resize")

    await poller.prime()
    with pytest.raises(WaitTimeoutError):
        await poller.wait_for_finished(0.05)


async def test_timeout_reports_last_status():
    client = ScriptedEventsClient(
        [],
        [_event(5, status="started")],
        event_updates={5: [_event(5, status="started")]},
    )
    poller = EventPoller(client, 123, "linode", "disk_resize")

    await poller.prime()
    with pytest.raises(WaitTimeoutError) as exc_info:
        await poller.wait_for_finished(0.05)

    assert exc_info.value.timeout == 0.05
    assert exc_info.value.last_status == "started"
    assert "disk_resize" in str(exc_info.value)


async def test_wait_without_prime_is_an_error():
    poller = EventPoller(ScriptedEventsClient([]), 123, "linode", "disk_resize")

    with pytest.raises(RuntimeError, match="prime"):
        await poller.wait_for_finished(1)


async def test_cancelled_wait_raises_cancelled_not_timeout():
    client = ScriptedEventsClient([])
    poller = EventPoller(client, 123, "linode", "disk_resize")
    await poller.prime()

    task = asyncio.create_task(poller.wait_for_finished(60))
    await asyncio.sleep(0.01)
    task.cancel()

    with pytest.raises(asyncio.CancelledError):
        await task


# ── wait_for_instance_disk_status ─────────────────────────────────


class ScriptedDiskClient:
    def __init__(self, *results):
        self.config = ClientConfig(token="test-token-abcdef", event_poll_ms=1)
        self.results = list(results)
        self.calls = 0

    async def get_instance_disk(self, instance_id, disk_id):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


async def test_disk_wait_returns_once_ready():
    client = ScriptedDiskClient(
        InstanceDisk(id=100, size=2000, status="resizing"),
        InstanceDisk(id=100, size=4000, status="ready"),
    )

    disk = await wait_for_instance_disk_status(client, 123, 100, "ready", 1)

    assert disk.size == 4000
    assert client.calls == 2


async def test_disk_wait_tolerates_not_found():
    client = ScriptedDiskClient(ComputeNotFoundError(), InstanceDisk(id=100, size=4000, status="ready"))

    disk = await wait_for_instance_disk_status(client, 123, 100, "ready", 1)

    assert disk.status == "ready"


async def test_disk_wait_propagates_other_api_errors():
    client = ScriptedDiskClient(ComputeAPIError(500, "boom"))

    with pytest.raises(ComputeAPIError):
        await wait_for_instance_disk_status(client, 123, 100, "ready", 1)


async def test_disk_wait_timeout_carries_last_status():
    client = ScriptedDiskClient(InstanceDisk(id=100, size=2000, status=DISK_NOT_READY))

    with pytest.raises(WaitTimeoutError) as exc_info:
        await wait_for_instance_disk_status(client, 123, 100, DISK_READY, 0.05)

    assert exc_info.value.last_status == DISK_NOT_READY
