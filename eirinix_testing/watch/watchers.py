"""
Watchers registered against an extension manager's watch stream.

The manager calls ``handle(manager, event)`` from its own dispatch thread for
every change it observes. Two watchers are provided: SimpleWatch keeps every
event in a list, SimpleWatcherWithChannel forwards every event onto an
EventChannel so the test thread can receive them with a deadline.
"""

import logging
from typing import Any, List

from .channel import EventChannel
from .events import WatchEvent

logger = logging.getLogger(__name__)


class Watcher:
    """Interface shared by the watchers: ``handle(manager, event)``."""

    def handle(self, manager: Any, event: WatchEvent) -> None:
        raise NotImplementedError


class SimpleWatch(Watcher):
    """
    Accumulates events in arrival order. Never blocks, never drops.

    ``handled`` is a plain list and is not guarded: a test reading it while the
    manager is still dispatching must synchronise on its own.
    """

    def __init__(self):
        self.handled: List[WatchEvent] = []

    def handle(self, manager: Any, event: WatchEvent) -> None:
        self.handled.append(event)


class SimpleWatcherWithChannel(Watcher):
    """
    Forwards events onto a channel. handle() blocks while the channel has no
    room, or until a receiver takes the event if the channel is unbuffered.
    """

    def __init__(self, received: EventChannel):
        self.received = received

    def handle(self, manager: Any, event: WatchEvent) -> None:
        logger.debug(f"Relaying {event.type} event")
        self.received.send(event)
