"""
Pod status snapshots as returned by "kubectl get pod -o json".
"""

from dataclasses import dataclass, field
from typing import Dict, Any, List


@dataclass(frozen=True)
class PodStatus:
    """
    Immutable view of a pod at the moment it was fetched.

    Attributes:
        name: Pod name
        namespace: Pod namespace
        phase: Pod phase (Pending, Running, Succeeded, Failed, Unknown)
        conditions: Raw pod conditions
        container_statuses: Raw container statuses
        labels: Pod labels
    """

    name: str
    namespace: str
    phase: str = "Unknown"
    conditions: List[Dict[str, Any]] = field(default_factory=list)
    container_statuses: List[Dict[str, Any]] = field(default_factory=list)
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, pod: Dict[str, Any]) -> "PodStatus":
        """
        Build a PodStatus from a pod resource.

        Args:
            pod: Pod resource data

        Returns:
            PodStatus: Parsed snapshot

        Raises:
            ValueError: If the data is not a pod resource
        """
        if not isinstance(pod, dict) or pod.get("kind", "Pod") != "Pod":
            raise ValueError("not a Pod resource")

        metadata = pod.get("metadata") or {}
        status = pod.get("status") or {}
        return cls(
            name=metadata.get("name") or "",
            namespace=metadata.get("namespace") or "",
            phase=status.get("phase") or "Unknown",
            conditions=list(status.get("conditions") or []),
            container_statuses=list(status.get("containerStatuses") or []),
            labels=dict(metadata.get("labels") or {}),
        )

    def is_running(self) -> bool:
        """
        Tell whether the pod is running: phase Running and every container
        reporting a running state.
        """
        if self.phase != "Running":
            return False
        if not self.container_statuses:
            return False
        return all(
            "running" in (container.get("state") or {})
            for container in self.container_statuses
        )

    def is_ready(self) -> bool:
        """Tell whether the pod's Ready condition is True."""
        for condition in self.conditions:
            if condition.get("type") == "Ready":
                return condition.get("status") == "True"
        return False

    def restarts(self) -> int:
        """Total restart count over all containers."""
        return sum(container.get("restartCount", 0) for container in self.container_statuses)
