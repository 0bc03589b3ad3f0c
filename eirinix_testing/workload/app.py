"""
Lifecycle handle for fake Eirini apps started in the cluster.
"""

import logging
from typing import Optional

from .pod import PodStatus
from ..errors import GatewayError

logger = logging.getLogger(__name__)


class EiriniApp:
    """
    Handle on one fixture pod. The cluster is the only source of truth: the
    handle keeps the name/namespace pair and the last status it observed.

    A handle is owned by one test thread; sync() replaces ``pod`` without locking.
    """

    def __init__(self, name: str, namespace: str, gateway, pod: Optional[PodStatus] = None):
        """
        Initialize a new EiriniApp handle.

        Args:
            name: Pod name, as written in the manifest that created it
            namespace: Pod namespace
            gateway: Object providing get_pod_status(name, namespace) and delete(namespace, name)
            pod: Last observed status, None until the first sync()
        """
        self.name = name
        self.namespace = namespace
        self.gateway = gateway
        self.pod = pod
        self.deleted = False

    @classmethod
    def start(cls, gateway, manifest: bytes, name: str, namespace: Optional[str] = None) -> "EiriniApp":
        """
        Apply a manifest and return a handle on the pod it creates.

        Args:
            gateway: Cluster gateway
            manifest: Manifest describing the pod named ``name``
            name: Pod name in the manifest
            namespace: Namespace to apply into; None applies without a namespace
                flag and the handle points at "default"

        Returns:
            EiriniApp: Handle with no observed status yet

        Raises:
            GatewayError: If the manifest could not be applied
        """
        try:
            if namespace is None:
                gateway.apply(manifest)
                namespace = "default"
            else:
                gateway.apply_in_namespace(manifest, namespace)
        except GatewayError as e:
            target = namespace or "default"
            error = GatewayError(f"Failed to start pod {target}/{name}: {e}", cause=e)
            error.output = e.output
            raise error from e

        logger.info(f"Started Eirini app {namespace}/{name}")
        return cls(name=name, namespace=namespace, gateway=gateway)

    def sync(self) -> PodStatus:
        """
        Fetch the current pod status and store it on the handle.

        If the fetch fails the previous status is kept and the error propagates;
        callers must read that as "state unknown", not "not running".

        Returns:
            PodStatus: The freshly observed status

        Raises:
            NotFoundError: If the pod no longer exists
            GatewayError: On transport failure
        """
        pod = self.gateway.get_pod_status(self.name, self.namespace)
        self.pod = pod
        return pod

    def is_running(self) -> bool:
        """
        Sync, then evaluate the running predicate on the new status.

        Every call hits the cluster; a recent sync() is never reused.

        Raises:
            NotFoundError: If the pod no longer exists
            GatewayError: On transport failure
        """
        return self.sync().is_running()

    def delete(self) -> str:
        """
        Delete the pod once, without retrying.

        Returns:
            str: kubectl output

        Raises:
            NotFoundError: If the pod was already deleted
            GatewayError: On any other failure, carrying kubectl's output
        """
        output = self.gateway.delete(self.namespace, self.name)
        self.deleted = True
        return output

    def __repr__(self) -> str:
        phase = self.pod.phase if self.pod else None
        return f"EiriniApp(name={self.name!r}, namespace={self.namespace!r}, phase={phase!r})"
