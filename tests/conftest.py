"""
Test configuration and fixtures for eirinix-testing tests.
"""
import os
import pytest
import tempfile
import yaml

from eirinix_testing.catalog.catalog import Catalog
from eirinix_testing.errors import GatewayError, NotFoundError
from eirinix_testing.workload.pod import PodStatus

KIND_HOST = "172.17.0.1"
SERVICE_PORT = 34567


@pytest.fixture(scope="session")
def dummy_kubeconfig():
    """Create a dummy kubeconfig file for testing."""
    temp_dir = tempfile.gettempdir()
    kubeconfig_path = os.path.join(temp_dir, 'eirinix-dummy-kubeconfig')

    if not os.path.exists(kubeconfig_path):
        with open(kubeconfig_path, 'w') as f:
            f.write("""
apiVersion: v1
kind: Config
clusters:
- cluster:
    server: https://dummy-server:6443
  name: dummy-cluster
contexts:
- context:
    cluster: dummy-cluster
    user: dummy-user
  name: dummy-context
current-context: dummy-context
users:
- name: dummy-user
  user:
    token: dummy-token
""")

    assert os.path.exists(kubeconfig_path), f"Kubeconfig file not created at {kubeconfig_path}"
    return kubeconfig_path


@pytest.fixture(autouse=True)
def setup_test_env(dummy_kubeconfig, monkeypatch):
    """Point KUBECONFIG at the dummy kubeconfig."""
    monkeypatch.setenv('KUBECONFIG', dummy_kubeconfig)
    yield


@pytest.fixture
def catalog():
    """A catalog bound to the kind gateway with a fixed service port."""
    return Catalog(port_allocator=lambda: SERVICE_PORT, kind_host=KIND_HOST)


def running_pod(name, namespace="default"):
    return {
        "kind": "Pod",
        "metadata": {"name": name, "namespace": namespace},
        "status": {
            "phase": "Running",
            "conditions": [{"type": "Ready", "status": "True"}],
            "containerStatuses": [
                {"name": name, "state": {"running": {}}, "restartCount": 0}
            ],
        },
    }


class FakeGateway:
    """
    In-memory cluster: apply() creates running pods for every Pod document,
    delete() removes them. Set ``fail_with`` to make the next call raise.
    """

    def __init__(self):
        self.pods = {}
        self.applied = []
        self.calls = []
        self.fail_with = None

    def _maybe_fail(self):
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error

    def apply(self, manifest):
        self.apply_in_namespace(manifest, "default")

    def apply_in_namespace(self, manifest, namespace):
        self.calls.append(("apply", namespace))
        self._maybe_fail()
        self.applied.append((manifest, namespace))
        for doc in yaml.safe_load_all(manifest):
            if doc and doc.get("kind") == "Pod":
                name = doc["metadata"]["name"]
                self.pods[(name, namespace)] = running_pod(name, namespace)

    def get_pod_status(self, name, namespace):
        self.calls.append(("get", name, namespace))
        self._maybe_fail()
        if (name, namespace) not in self.pods:
            raise NotFoundError("pod", name, namespace)
        return PodStatus.from_dict(self.pods[(name, namespace)])

    def delete(self, namespace, name):
        self.calls.append(("delete", name, namespace))
        self._maybe_fail()
        if (name, namespace) not in self.pods:
            raise NotFoundError("pod", name, namespace)
        del self.pods[(name, namespace)]
        return f'pod "{name}" deleted\n'


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def transport_error():
    return GatewayError("Failed to reach the API server", output="connection refused")


@pytest.fixture
def pod_data():
    """Factory for pod resources as returned by kubectl get pod -o json."""
    return running_pod
