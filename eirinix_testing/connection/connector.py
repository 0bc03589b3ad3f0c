"""
Connector module for K8s cluster connections.
Provides the apply/get/delete primitives the fixtures are built on, backed by kubectl.
"""

import json
import logging
from typing import Optional, Dict, Any

from .kubectl import KubectlConnector
from ..errors import GatewayError, NotFoundError
from ..workload.pod import PodStatus

logger = logging.getLogger(__name__)


class ClusterConnector:
    """
    ClusterConnector is the harness' only way into the cluster. It never retries:
    a failing call raises and the caller owns any polling or retry loop.
    """

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
    ):
        """
        Initialize a new ClusterConnector instance.

        There is no default namespace: every call names its own, and apply()
        passes none so the manifest or the kubeconfig context decides.

        Args:
            kubeconfig: Path to kubeconfig file. If None, kubectl uses KUBECONFIG or its default
            context: Kubernetes context to use. If None, uses current context
        """
        self.kubeconfig = kubeconfig
        self.context = context
        self._connector = None
        self.connected = False

    def connect(self) -> bool:
        """
        Connect to the Kubernetes cluster using kubectl.

        Returns:
            bool: True if connection was successful, False otherwise
        """
        self._connector = KubectlConnector(
            kubeconfig=self.kubeconfig,
            context=self.context,
        )

        self.connected = self._connector.connect()
        if not self.connected:
            logger.error("Failed to connect to cluster using kubectl")

        return self.connected

    def apply(self, manifest: bytes) -> None:
        """
        Apply a manifest with "kubectl apply -f -".

        Args:
            manifest: One or more YAML documents

        Raises:
            GatewayError: If kubectl rejects the manifest or cannot be run
        """
        self._apply(manifest, namespace=None)

    def apply_in_namespace(self, manifest: bytes, namespace: str) -> None:
        """
        Apply a manifest into the given namespace.

        Args:
            manifest: One or more YAML documents
            namespace: Target namespace

        Raises:
            GatewayError: If kubectl rejects the manifest or cannot be run
        """
        self._apply(manifest, namespace=namespace)

    def get_pod_status(self, name: str, namespace: str) -> PodStatus:
        """
        Fetch the current status of a pod.

        Args:
            name: Pod name
            namespace: Pod namespace

        Returns:
            PodStatus: Snapshot of the pod as the API server sees it now

        Raises:
            NotFoundError: If the pod does not exist
            GatewayError: On any other kubectl failure
        """
        result = self._kubectl(f"get pod {namespace}/{name}").run_command(
            ["get", "pod", name, "-o", "json"], namespace=namespace
        )
        if KubectlConnector.is_not_found(result):
            raise NotFoundError("pod", name, namespace, output=result["error"])
        if not result["success"]:
            raise GatewayError(
                f"Failed to get status of pod {namespace}/{name}",
                output=result["error"],
                cause=result["exception"],
            )

        try:
            return PodStatus.from_dict(json.loads(result["output"]))
        except ValueError as e:
            raise GatewayError(
                f"Failed to parse status of pod {namespace}/{name}", cause=e
            ) from e

    def delete(self, namespace: str, name: str) -> str:
        """
        Delete a pod. Single shot, no retry and no wait beyond kubectl's own.

        Args:
            namespace: Pod namespace
            name: Pod name

        Returns:
            str: kubectl output

        Raises:
            NotFoundError: If the pod was already gone
            GatewayError: On any other kubectl failure, carrying kubectl's output
        """
        result = self._kubectl(f"delete pod {namespace}/{name}").run_command(
            ["delete", "pod", name], namespace=namespace
        )
        output = self._combined_output(result)
        if KubectlConnector.is_not_found(result):
            raise NotFoundError("pod", name, namespace, output=output)
        if not result["success"]:
            raise GatewayError(
                f"Failed to delete pod {namespace}/{name}",
                output=output,
                cause=result["exception"],
            )

        logger.info(f"Deleted pod {namespace}/{name}")
        return output

    def _apply(self, manifest: bytes, namespace: Optional[str]) -> None:
        """Run "kubectl apply -f -" with the manifest on stdin."""
        target = f" in namespace {namespace}" if namespace else ""
        result = self._kubectl(f"apply manifest{target}").run_command(
            ["apply", "-f", "-"],
            input_data=manifest.decode("utf-8"),
            namespace=namespace,
            use_namespace=namespace is not None,
        )
        if not result["success"]:
            raise GatewayError(
                f"Failed to apply manifest{target}",
                output=self._combined_output(result),
                cause=result["exception"],
            )

        logger.debug(f"Applied manifest: {result['output'].strip()}")

    def _kubectl(self, operation: str) -> KubectlConnector:
        """Return the kubectl connector, connecting on first use."""
        if not self._connector or not self.connected:
            if not self.connect():
                raise GatewayError(
                    f"Cannot {operation}: not connected to Kubernetes cluster using kubectl"
                )
        return self._connector

    @staticmethod
    def _combined_output(result: Dict[str, Any]) -> str:
        return "".join(part for part in (result["output"], result["error"]) if part)
