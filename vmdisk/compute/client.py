"""Async client for the compute control plane REST API."""

import asyncio
import json
import logging

import httpx

from vmdisk.compute.booted import get_current_booted_config
from vmdisk.compute.errors import ComputeAPIError, ComputeNotFoundError, ComputeTimeoutError
from vmdisk.compute.events import EventPoller
from vmdisk.compute.types import ENTITY_LINODE, Event, Instance, InstanceConfig, InstanceDisk
from vmdisk.compute.waiters import wait_for_instance_disk_status
from vmdisk.config import ClientConfig

logger = logging.getLogger(__name__)

USER_AGENT = "vmdisk/0.1.0"

# Status codes eligible for automatic retry
_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class ComputeClient:
    """Issue instance, disk and event requests against the API.

    Requests are acknowledged synchronously by the control plane; completion
    of shutdown/boot/resize is observed separately through event pollers.
    """

    def __init__(self, config: ClientConfig, http_client: httpx.AsyncClient | None = None):
        self.config = config
        self._base_url = config.base_url
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    # ── Transport ─────────────────────────────────────────────────

    def _headers(self, extra=None):
        user_agent = f"{self.config.ua_prefix} {USER_AGENT}" if self.config.ua_prefix else USER_AGENT
        headers = {
            "Authorization": f"Bearer {self.config.token}",
            "Content-Type": "application/json",
            "User-Agent": user_agent,
        }
        if extra:
            headers.update(extra)
        return headers

    def _backoff_delay(self, attempt):
        return min(self.config.min_retry_delay * (2**attempt), self.config.max_retry_delay)

    def _retry_after_delay(self, resp, attempt):
        retry_after = resp.headers.get("retry-after")
        if retry_after:
            try:
                return min(max(float(retry_after), 0.0), self.config.max_retry_delay)
            except ValueError:
                pass
        return self._backoff_delay(attempt)

    async def _request(self, method, path, data=None, headers=None):
        """Send a request, retrying transient failures with exponential backoff.

        Returns:
            Parsed JSON body (``{}`` for empty bodies).

        Raises:
            ComputeNotFoundError: on 404.
            ComputeAPIError: on any other final non-2xx response.
            ComputeTimeoutError: when every attempt timed out.
        """
        url = f"{self._base_url}{path}"
        attempts = self.config.max_retries + 1

        for attempt in range(attempts):
            try:
                resp = await self._client.request(
                    method,
                    url,
                    json=data,
                    headers=self._headers(headers),
                    timeout=self.config.request_timeout,
                )
            except (httpx.TimeoutException, httpx.TransportError) as e:
                if attempt == attempts - 1:
                    if isinstance(e, httpx.TimeoutException):
                        raise ComputeTimeoutError(f"{method} {path} timed out after {attempts} attempts") from e
                    raise ComputeAPIError(0, f"{method} {path} failed: {e}") from e
                delay = self._backoff_delay(attempt)
                logger.warning(f"{method} {path} failed ({e}), attempt {attempt + 1}/{attempts}, retrying in {delay:.1f}s")
                await asyncio.sleep(delay)
                continue

            if resp.status_code in _RETRYABLE_STATUS_CODES and attempt < attempts - 1:
                delay = self._retry_after_delay(resp, attempt)
                logger.warning(
                    f"{method} {path} returned {resp.status_code}, attempt {attempt + 1}/{attempts}, retrying in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
                continue

            self._raise_for_status(resp)
            if not resp.content:
                return {}
            try:
                return resp.json()
            except ValueError as e:
                raise ComputeAPIError(
                    resp.status_code, f"invalid JSON response to {method} {path}", response_body=resp.text
                ) from e

        raise ComputeAPIError(0, "exhausted retries with no response")

    @staticmethod
    def _raise_for_status(resp):
        if resp.status_code < 400:
            return

        body = resp.text
        message = body[:200] if body else f"HTTP {resp.status_code}"
        try:
            payload = resp.json()
            errors = payload.get("errors") if isinstance(payload, dict) else None
            if isinstance(errors, list):
                reasons = [err.get("reason", "") for err in errors if isinstance(err, dict)]
                if reasons:
                    message = "; ".join(reasons)
        except ValueError:
            pass

        if resp.status_code == 404:
            raise ComputeNotFoundError(message, response_body=body)
        raise ComputeAPIError(resp.status_code, message, response_body=body)

    async def _list(self, path, filter=None, max_pages=None):
        """Collect the pages of a paginated list endpoint, all of them unless *max_pages* is set."""
        headers = {"X-Filter": json.dumps(filter)} if filter else None
        results = []
        page = 1
        while True:
            body = await self._request("GET", f"{path}?page={page}", headers=headers)
            results.extend(body.get("data", []))
            if page >= body.get("pages", 1) or (max_pages is not None and page >= max_pages):
                return results
            page += 1

    # ── Instances ─────────────────────────────────────────────────

    async def get_instance(self, instance_id) -> Instance:
        return Instance.from_api(await self._request("GET", f"/linode/instances/{instance_id}"))

    async def list_instance_configs(self, instance_id) -> list[InstanceConfig]:
        return [InstanceConfig.from_api(c) for c in await self._list(f"/linode/instances/{instance_id}/configs")]

    async def shutdown_instance(self, instance_id):
        await self._request("POST", f"/linode/instances/{instance_id}/shutdown")

    async def boot_instance(self, instance_id, config_id):
        data = {"config_id": config_id} if config_id else None
        await self._request("POST", f"/linode/instances/{instance_id}/boot", data)

    async def get_current_booted_config(self, instance_id):
        """Config ID the instance is booted into, or None when powered off."""
        return await get_current_booted_config(self, instance_id)

    # ── Disks ─────────────────────────────────────────────────────

    async def get_instance_disk(self, instance_id, disk_id) -> InstanceDisk:
        return InstanceDisk.from_api(await self._request("GET", f"/linode/instances/{instance_id}/disks/{disk_id}"))

    async def resize_instance_disk(self, instance_id, disk_id, size):
        await self._request("POST", f"/linode/instances/{instance_id}/disks/{disk_id}/resize", {"size": size})

    async def wait_for_instance_disk_status(self, instance_id, disk_id, status, timeout) -> InstanceDisk:
        return await wait_for_instance_disk_status(self, instance_id, disk_id, status, timeout)

    # ── Events ────────────────────────────────────────────────────

    async def list_events(self, filter=None, max_pages=None) -> list[Event]:
        return [Event.from_api(e) for e in await self._list("/account/events", filter, max_pages)]

    async def get_event(self, event_id) -> Event:
        return Event.from_api(await self._request("GET", f"/account/events/{event_id}"))

    async def new_event_poller(self, entity_id, action, entity_type=ENTITY_LINODE):
        """Create and prime an EventPoller for *action* on the given entity.

        Must be called before issuing the request that triggers the event.
        """
        poller = EventPoller(self, entity_id, entity_type, action)
        await poller.prime()
        return poller
