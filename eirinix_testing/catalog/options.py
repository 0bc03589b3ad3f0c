"""
Extension manager configuration produced by the catalog.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Dict, Any


class TriState(Enum):
    """A flag that is either left to the framework default or set explicitly."""

    UNSET = "unset"
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def from_optional(cls, value: Optional[bool]) -> "TriState":
        if value is None:
            return cls.UNSET
        return cls.TRUE if value else cls.FALSE

    def resolve(self, default: bool) -> bool:
        """Return the explicit value, or ``default`` when unset."""
        if self is TriState.UNSET:
            return default
        return self is TriState.TRUE

    def to_optional(self) -> Optional[bool]:
        if self is TriState.UNSET:
            return None
        return self is TriState.TRUE


@dataclass(frozen=True)
class ManagerOptions:
    """
    How an extension manager binds its webhook server and what it filters.

    Attributes:
        namespace: Namespace the manager watches
        host: Address the webhook server binds to, and is reached at
        port: Webhook server port, 0 for an ephemeral one
        kubeconfig: Credentials file, None for the default
        service_name: Name of the service fronting the webhook server
        webhook_namespace: Namespace the webhook configuration is created in
        filter_eirini_apps: Only act on Eirini app pods
        register_webhook: Register the mutating webhook on start
    """

    namespace: str
    host: str
    port: int
    kubeconfig: Optional[str] = None
    service_name: Optional[str] = None
    webhook_namespace: Optional[str] = None
    filter_eirini_apps: TriState = TriState.UNSET
    register_webhook: TriState = TriState.UNSET

    def as_dict(self) -> Dict[str, Any]:
        """
        Flatten the options for a manager constructor. Unset flags and unset
        optional strings are left out so the manager applies its own defaults.
        """
        options = {}
        for key, value in asdict(self).items():
            if isinstance(value, TriState):
                value = value.to_optional()
            if value is not None:
                options[key] = value
        return options
