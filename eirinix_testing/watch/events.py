"""
Watch events as delivered by an extension manager's watch stream.
"""

from dataclasses import dataclass
from typing import Any


class EventType:
    """Event types sent by the Kubernetes watch API."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    BOOKMARK = "BOOKMARK"
    ERROR = "ERROR"


@dataclass(frozen=True)
class WatchEvent:
    """
    One change event. ``object`` is opaque to the harness.

    Attributes:
        type: One of the EventType values
        object: The resource the event refers to
    """

    type: str
    object: Any = None

    @classmethod
    def from_dict(cls, data: dict) -> "WatchEvent":
        """Build an event from a raw watch stream entry ({"type": ..., "object": ...})."""
        return cls(type=data.get("type", ""), object=data.get("object"))
