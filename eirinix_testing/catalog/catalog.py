"""
Catalog of fixtures for EiriniX tests: manager options, manifests, and the
extensions and watchers tests register on a manager.
"""

import os
import logging
from typing import Callable, Optional

from .extensions import SimpleExtension
from .options import ManagerOptions, TriState
from .ports import get_free_port
from ..errors import ConstructionError
from ..watch.channel import EventChannel
from ..watch.watchers import SimpleWatch, SimpleWatcherWithChannel
from ..workload.app import EiriniApp

logger = logging.getLogger(__name__)

# Gateway address of the docker bridge, where a kind cluster reaches the host
DEFAULT_KIND_HOST = "172.17.0.1"

# Label EiriniX uses to recognise Eirini app pods
LABEL_SOURCE_TYPE = "cloudfoundry.org/source_type"

EIRINI_APP_NAME = "eirini-fake-app"
EIRINI_STAGING_APP_NAME = "6ad9f634-b32e-4890-b1ba-55202d95bc3a-xdcp6"
EIRINIX_SERVICE_NAME = "eirinix"


class Catalog:
    """
    Catalog provides the instances test cases are built from.

    The service port is allocated once, when the catalog is created, and every
    integration preset and the service manifest use it.
    """

    def __init__(
        self,
        port_allocator: Callable[[], int] = get_free_port,
        kind_host: str = DEFAULT_KIND_HOST,
        kubeconfig: Optional[str] = None,
    ):
        """
        Initialize a new Catalog.

        Args:
            port_allocator: Returns the port the EiriniX webhook server will listen on
            kind_host: Address at which the cluster reaches the test process
            kubeconfig: Credentials for integration managers. Defaults to KUBECONFIG;
                if that is unset too, managers use their default credentials

        Raises:
            ConstructionError: If no usable port could be allocated
        """
        try:
            port = port_allocator()
        except ConstructionError:
            raise
        except Exception as e:
            raise ConstructionError(f"Cannot allocate free ports: {e}") from e

        if not isinstance(port, int) or not 0 < port < 65536:
            raise ConstructionError(f"Port allocator returned an invalid port: {port!r}")

        self.service_port = port
        self.kind_host = kind_host
        self.kubeconfig = kubeconfig if kubeconfig is not None else os.environ.get("KUBECONFIG")
        logger.debug(f"Catalog using {self.kind_host}:{self.service_port}")

    # Extensions

    def simple_extension(self) -> SimpleExtension:
        """A dummy extension named "test" that mutates nothing."""
        return SimpleExtension(name="test")

    # Manager options

    def simple_manager(self) -> ManagerOptions:
        """Options for a dummy manager that is never started."""
        return ManagerOptions(namespace="namespace", host="127.0.0.1", port=90)

    def integration_manager(self) -> ManagerOptions:
        """Options for the manager used by integration tests."""
        return ManagerOptions(
            namespace="default",
            host=self.kind_host,
            port=self.service_port,
            kubeconfig=self.kubeconfig,
            service_name=EIRINIX_SERVICE_NAME,
            webhook_namespace="default",
        )

    def integration_manager_filtered(self, filter_eirini_apps: bool, namespace: str) -> ManagerOptions:
        """
        Options for an integration manager that does or does not filter Eirini apps.

        Args:
            filter_eirini_apps: Whether the manager only acts on Eirini app pods
            namespace: Namespace watched, also used for the webhook configuration
        """
        return ManagerOptions(
            namespace=namespace,
            host=self.kind_host,
            port=self.service_port,
            kubeconfig=self.kubeconfig,
            service_name=EIRINIX_SERVICE_NAME,
            webhook_namespace=namespace,
            filter_eirini_apps=TriState.from_optional(filter_eirini_apps),
        )

    def integration_manager_no_register(self) -> ManagerOptions:
        """Options for an integration manager that does not register its webhooks again."""
        return ManagerOptions(
            namespace="default",
            host=self.kind_host,
            port=self.service_port,
            kubeconfig=self.kubeconfig,
            service_name=EIRINIX_SERVICE_NAME,
            webhook_namespace="default",
            register_webhook=TriState.FALSE,
        )

    def simple_manager_service(self) -> ManagerOptions:
        """Options for a dummy manager configured to run as an in-cluster service."""
        return ManagerOptions(
            namespace="eirini",
            host="0.0.0.0",
            port=0,
            service_name="extension",
            webhook_namespace="cf",
        )

    # Manifests

    def service_yaml(self) -> bytes:
        """Service and endpoints through which the cluster reaches the integration manager."""
        port = str(self.service_port)
        return f"""
apiVersion: v1
kind: Service
metadata:
  name: {EIRINIX_SERVICE_NAME}
spec:
  ports:
  - protocol: TCP
    port: 443
    targetPort: {port}
---
apiVersion: v1
kind: Endpoints
metadata:
  name: {EIRINIX_SERVICE_NAME}
subsets:
  - addresses:
      - ip: {self.kind_host}
    ports:
      - port: {port}
""".encode("utf-8")

    def eirini_app_yaml(self) -> bytes:
        """A fake Eirini app pod."""
        return f"""
apiVersion: v1
kind: Pod
metadata:
  name: {EIRINI_APP_NAME}
  labels:
    {LABEL_SOURCE_TYPE}: APP
spec:
  containers:
  - image: busybox:1.28.4
    command:
      - sleep
      - "3600"
    name: {EIRINI_APP_NAME}
    env:
    - name: FAKE_APP
      value: "fake content"
  restartPolicy: Always
""".encode("utf-8")

    def eirini_staging_app_yaml(self) -> bytes:
        """A fake Eirini staging pod, without the app label."""
        return f"""
apiVersion: v1
kind: Pod
metadata:
  name: {EIRINI_STAGING_APP_NAME}
spec:
  containers:
  - image: busybox:1.28.4
    command:
      - sleep
      - "3600"
    name: {EIRINI_STAGING_APP_NAME}
  restartPolicy: Always
""".encode("utf-8")

    # Cluster fixtures

    def register_eirinix_service(self, gateway) -> None:
        """Apply service_yaml(). Raises GatewayError on failure."""
        gateway.apply(self.service_yaml())

    def start_eirini_app(self, gateway) -> EiriniApp:
        """Start the fake Eirini app in the default namespace."""
        return EiriniApp.start(gateway, self.eirini_app_yaml(), EIRINI_APP_NAME)

    def start_eirini_staging_app(self, gateway) -> EiriniApp:
        """Start the fake staging pod in the default namespace."""
        return EiriniApp.start(gateway, self.eirini_staging_app_yaml(), EIRINI_STAGING_APP_NAME)

    def start_eirini_app_in_namespace(self, gateway, namespace: str) -> EiriniApp:
        """Start the fake Eirini app in ``namespace``."""
        return EiriniApp.start(gateway, self.eirini_app_yaml(), EIRINI_APP_NAME, namespace)

    def start_eirini_staging_app_in_namespace(self, gateway, namespace: str) -> EiriniApp:
        """Start the fake staging pod in ``namespace``."""
        return EiriniApp.start(
            gateway, self.eirini_staging_app_yaml(), EIRINI_STAGING_APP_NAME, namespace
        )

    # Watchers

    def simple_watcher(self) -> SimpleWatch:
        """A watcher accumulating every event it is handed."""
        return SimpleWatch()

    def simple_watcher_with_channel(self, channel: EventChannel) -> SimpleWatcherWithChannel:
        """A watcher relaying every event onto ``channel``."""
        return SimpleWatcherWithChannel(channel)
