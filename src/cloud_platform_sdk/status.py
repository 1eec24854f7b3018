"""Resource status enumerations.

Each resource kind has a closed set of statuses. The ``ERROR`` member, and
the ``DELETED`` member where the kind has one, are what the status poller
treats specially; everything else is just "not there yet".
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ResourceStatus(StrEnum):
    """Base for resource status enumerations.

    Wire values are matched case-insensitively; anything unrecognised maps
    to the ``UNKNOWN`` member so a new server-side status never breaks
    deserialization.
    """

    @classmethod
    def _missing_(cls, value: Any) -> Any:
        if isinstance(value, str):
            upper = value.upper()
            for member in cls:
                if member.value == upper:
                    return member
        return cls.__members__.get("UNKNOWN")

    @property
    def is_error(self) -> bool:
        """Whether this is the designated error status."""
        return self.name == "ERROR"

    @property
    def is_deleted(self) -> bool:
        """Whether this is the designated deleted status."""
        return self.name == "DELETED"


class ServerStatus(ResourceStatus):
    """Compute server status."""

    ACTIVE = "ACTIVE"
    BUILD = "BUILD"
    DELETED = "DELETED"
    ERROR = "ERROR"
    HARD_REBOOT = "HARD_REBOOT"
    MIGRATING = "MIGRATING"
    PASSWORD = "PASSWORD"
    PAUSED = "PAUSED"
    REBOOT = "REBOOT"
    REBUILD = "REBUILD"
    RESCUE = "RESCUE"
    RESIZE = "RESIZE"
    REVERT_RESIZE = "REVERT_RESIZE"
    SHELVED = "SHELVED"
    SHELVED_OFFLOADED = "SHELVED_OFFLOADED"
    SHUTOFF = "SHUTOFF"
    SOFT_DELETED = "SOFT_DELETED"
    SUSPENDED = "SUSPENDED"
    VERIFY_RESIZE = "VERIFY_RESIZE"
    UNKNOWN = "UNKNOWN"


class ImageStatus(ResourceStatus):
    """Compute image status."""

    ACTIVE = "ACTIVE"
    SAVING = "SAVING"
    DELETED = "DELETED"
    ERROR = "ERROR"
    UNKNOWN = "UNKNOWN"


class VolumeStatus(ResourceStatus):
    """Block storage volume status."""

    AVAILABLE = "AVAILABLE"
    ATTACHING = "ATTACHING"
    CREATING = "CREATING"
    DELETING = "DELETING"
    DETACHING = "DETACHING"
    IN_USE = "IN-USE"
    ERROR = "ERROR"
    ERROR_DELETING = "ERROR_DELETING"
    DELETED = "DELETED"
    UNKNOWN = "UNKNOWN"


class SnapshotStatus(ResourceStatus):
    """Block storage snapshot status."""

    AVAILABLE = "AVAILABLE"
    CREATING = "CREATING"
    DELETING = "DELETING"
    ERROR = "ERROR"
    ERROR_DELETING = "ERROR_DELETING"
    DELETED = "DELETED"
    UNKNOWN = "UNKNOWN"
