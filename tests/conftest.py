"""Shared pytest fixtures for all test modules."""

import asyncio
import os
import subprocess
import sys

import pytest

from vmdisk.compute.types import InstanceDisk
from vmdisk.config import ClientConfig

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture(scope="session")
def run_cli(project_root):
    """Return a callable that invokes the vmdisk CLI as a subprocess.

    LINODE_* variables are stripped from the environment so tests never
    pick up real credentials.
    """
    env = {k: v for k, v in os.environ.items() if not k.startswith("LINODE_")}

    def _run(*args):
        result = subprocess.run(
            [sys.executable, "-m", "vmdisk.vmdisk", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env=env,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Fake compute client ─────────────────────────────────────────────


class FakePoller:
    def __init__(self, client, entity_id, action):
        self.client = client
        self.entity_id = entity_id
        self.action = action

    async def wait_for_finished(self, timeout):
        key = f"await:{self.action}"
        if key in self.client.hang:
            await asyncio.sleep(3600)
        self.client._record(key, "await", self.action, timeout)


class FakeComputeClient:
    """Records every collaborator call in order, in ``calls``.

    ``failures`` maps a call key to an exception raised when that call is
    made. Keys are method names, plus ``watch:<action>`` and
    ``await:<action>`` for event pollers. ``hang`` holds keys whose await
    never completes.
    """

    def __init__(self, booted_config=None, disk=None, final_size=None):
        self.config = ClientConfig(token="test-token-123456", event_poll_ms=1, min_retry_delay_ms=1)
        self.booted_config = booted_config
        self.disk = disk or InstanceDisk(id=100, size=2000, status="ready", label="boot")
        self.final_size = final_size
        self.calls = []
        self.failures = {}
        self.hang = set()

    def _record(self, key, *call):
        self.calls.append(call)
        exc = self.failures.get(key)
        if exc is not None:
            raise exc

    def names(self):
        """Call names only, e.g. ['get_current_booted_config', 'watch', ...]."""
        return [c[0] for c in self.calls]

    async def get_current_booted_config(self, instance_id):
        self._record("get_current_booted_config", "get_current_booted_config", instance_id)
        return self.booted_config

    async def shutdown_instance(self, instance_id):
        self._record("shutdown_instance", "shutdown_instance", instance_id)
        self.booted_config = None

    async def boot_instance(self, instance_id, config_id):
        self._record("boot_instance", "boot_instance", instance_id, config_id)
        self.booted_config = config_id

    async def get_instance_disk(self, instance_id, disk_id):
        self._record("get_instance_disk", "get_instance_disk", instance_id, disk_id)
        return InstanceDisk(id=disk_id, size=self.disk.size, status=self.disk.status, label=self.disk.label)

    async def resize_instance_disk(self, instance_id, disk_id, size):
        self._record("resize_instance_disk", "resize_instance_disk", instance_id, disk_id, size)
        self.disk = InstanceDisk(id=disk_id, size=size if self.final_size is None else self.final_size, status="ready")

    async def wait_for_instance_disk_status(self, instance_id, disk_id, status, timeout):
        self._record("wait_for_instance_disk_status", "wait_for_instance_disk_status", instance_id, disk_id, status, timeout)
        return InstanceDisk(id=disk_id, size=self.disk.size, status=status)

    async def new_event_poller(self, entity_id, action):
        self._record(f"watch:{action}", "watch", entity_id, action)
        return FakePoller(self, entity_id, action)


@pytest.fixture
def make_fake_client():
    """Return a factory for FakeComputeClient instances."""
    return FakeComputeClient
