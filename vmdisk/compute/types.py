"""Shared data types for the compute API."""

from dataclasses import dataclass

# Instance statuses
INSTANCE_RUNNING = "running"
INSTANCE_OFFLINE = "offline"

# Disk statuses
DISK_READY = "ready"
DISK_NOT_READY = "not ready"

# Event actions
ACTION_LINODE_BOOT = "linode_boot"
ACTION_LINODE_REBOOT = "linode_reboot"
ACTION_LINODE_SHUTDOWN = "linode_shutdown"
ACTION_DISK_RESIZE = "disk_resize"

# Event statuses
EVENT_FINISHED = "finished"
EVENT_FAILED = "failed"

ENTITY_LINODE = "linode"


@dataclass
class Instance:
    id: int
    label: str = ""
    status: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "Instance":
        return cls(id=data["id"], label=data.get("label", ""), status=data.get("status", ""))


@dataclass
class InstanceConfig:
    id: int
    label: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "InstanceConfig":
        return cls(id=data["id"], label=data.get("label", ""))


@dataclass
class InstanceDisk:
    """A disk attached to an instance. ``size`` is in MB."""

    id: int
    size: int
    status: str
    label: str = ""
    filesystem: str = ""

    @classmethod
    def from_api(cls, data: dict) -> "InstanceDisk":
        return cls(
            id=data["id"],
            size=data["size"],
            status=data.get("status", ""),
            label=data.get("label", ""),
            filesystem=data.get("filesystem", ""),
        )


@dataclass
class EventEntity:
    id: int | None
    type: str = ""
    label: str = ""

    @classmethod
    def from_api(cls, data: dict | None) -> "EventEntity | None":
        if not data:
            return None
        return cls(id=data.get("id"), type=data.get("type", ""), label=data.get("label", ""))


@dataclass
class Event:
    """An account event, e.g. the completion record of a shutdown or resize."""

    id: int
    action: str
    status: str
    entity: EventEntity | None = None
    secondary_entity: EventEntity | None = None
    created: str = ""
    percent_complete: int | None = None

    @classmethod
    def from_api(cls, data: dict) -> "Event":
        return cls(
            id=data["id"],
            action=data.get("action", ""),
            status=data.get("status", ""),
            entity=EventEntity.from_api(data.get("entity")),
            secondary_entity=EventEntity.from_api(data.get("secondary_entity")),
            created=data.get("created", ""),
            percent_complete=data.get("percent_complete"),
        )
