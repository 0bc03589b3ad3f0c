"""
Dummy extensions tests register on a manager.
"""

from typing import Any, List, Tuple


class Extension:
    """Interface shared by extensions: a ``name`` and ``handle(manager, pod, request)``."""

    name = ""

    def handle(self, manager: Any, pod: Any, request: Any) -> Any:
        raise NotImplementedError


class SimpleExtension(Extension):
    """
    Extension that leaves every pod untouched. It records what it was handed,
    so tests can assert the manager dispatched to it.
    """

    def __init__(self, name: str = "test"):
        self.name = name
        self.handled: List[Tuple[Any, Any]] = []

    def handle(self, manager: Any, pod: Any, request: Any) -> None:
        self.handled.append((pod, request))
