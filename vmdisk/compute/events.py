"""Event polling: wait for the completion event of an asynchronous operation.

A poller is primed before the triggering request is sent, so it knows which
matching events already existed. Waiting then looks only for an event that
appeared after priming and follows it until it finishes or fails.
"""

import asyncio
import logging

from vmdisk.compute.errors import EventFailedError, WaitTimeoutError
from vmdisk.compute.types import EVENT_FAILED, EVENT_FINISHED

logger = logging.getLogger(__name__)


class EventPoller:
    """Watch for one kind of event (*action*) on one entity."""

    def __init__(self, client, entity_id, entity_type, action):
        self.client = client
        self.entity_id = entity_id
        self.entity_type = entity_type
        self.action = action
        self._previous_ids = None
        self._last_status = None

    def _filter(self):
        return {
            "entity.id": self.entity_id,
            "entity.type": self.entity_type,
            "action": self.action,
            "+order_by": "created",
            "+order": "desc",
        }

    def _matches(self, event):
        return (
            event.action == self.action
            and event.entity is not None
            and event.entity.id == self.entity_id
            and event.entity.type == self.entity_type
        )

    async def _latest_events(self):
        # Newest first, so a new event always lands on the first page.
        return await self.client.list_events(self._filter(), max_pages=1)

    async def prime(self):
        """Record the IDs of the most recent matching events."""
        events = await self._latest_events()
        self._previous_ids = {e.id for e in events if self._matches(e)}
        logger.debug(f"Watching for '{self.action}' on {self.entity_type} {self.entity_id} ({len(self._previous_ids)} prior events)")

    async def _find_new_event(self):
        for event in await self._latest_events():
            if self._matches(event) and event.id not in self._previous_ids:
                return event
        return None

    async def _poll_until_finished(self):
        interval = self.client.config.event_poll_interval
        event = None
        while True:
            if event is None:
                event = await self._find_new_event()
            else:
                event = await self.client.get_event(event.id)

            if event is not None:
                self._last_status = event.status
                if event.status == EVENT_FINISHED:
                    return event
                if event.status == EVENT_FAILED:
                    raise EventFailedError(event)

            await asyncio.sleep(interval)

    async def wait_for_finished(self, timeout):
        """Block until the new event finishes.

        Returns:
            The finished Event.

        Raises:
            WaitTimeoutError: if the event has not finished within *timeout* seconds.
            EventFailedError: if the event finished with status 'failed'.
        """
        if self._previous_ids is None:
            raise RuntimeError("EventPoller.prime() must be called before wait_for_finished()")

        try:
            event = await asyncio.wait_for(self._poll_until_finished(), timeout)
        except asyncio.TimeoutError as e:
            raise WaitTimeoutError(
                f"Timeout after {timeout}s waiting for '{self.action}' event on {self.entity_type} {self.entity_id} "
                f"(last status: {self._last_status or 'not seen'})",
                timeout,
                self._last_status,
            ) from e

        logger.debug(f"Event {event.id} ('{self.action}') finished")
        return event
