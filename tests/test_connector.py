"""
Test cases for the kubectl-backed ClusterConnector
"""
import json
import subprocess
import pytest
from unittest.mock import Mock, patch

from eirinix_testing.connection.connector import ClusterConnector
from eirinix_testing.connection.kubectl import KubectlConnector
from eirinix_testing.errors import GatewayError, NotFoundError


def completed(returncode=0, stdout="", stderr=""):
    return Mock(returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.mark.usefixtures("setup_test_env")
class TestClusterConnector:
    @pytest.fixture(autouse=True)
    def setup(self, dummy_kubeconfig):
        self.connector = ClusterConnector(kubeconfig=dummy_kubeconfig)
        with patch.object(KubectlConnector, 'connect', return_value=True), \
             patch('eirinix_testing.connection.kubectl.subprocess.run') as mock_run:
            self.mock_run = mock_run
            yield

    def last_command(self):
        return self.mock_run.call_args[0][0]

    def test_apply_pipes_manifest_on_stdin(self, dummy_kubeconfig):
        self.mock_run.return_value = completed(stdout="pod/eirini-fake-app created\n")
        self.connector.apply(b"kind: Pod\n")

        cmd = self.last_command()
        assert cmd == ["kubectl", "--kubeconfig", dummy_kubeconfig, "apply", "-f", "-"]
        assert self.mock_run.call_args[1]["input"] == "kind: Pod\n"

    def test_apply_in_namespace(self):
        self.mock_run.return_value = completed()
        self.connector.apply_in_namespace(b"kind: Pod\n", "eirini")

        cmd = self.last_command()
        assert cmd[-5:] == ["--namespace", "eirini", "apply", "-f", "-"]

    def test_apply_failure_raises_gateway_error(self):
        self.mock_run.return_value = completed(returncode=1, stderr="error: invalid manifest")
        with pytest.raises(GatewayError) as excinfo:
            self.connector.apply_in_namespace(b"oops", "eirini")
        assert "namespace eirini" in str(excinfo.value)
        assert "invalid manifest" in excinfo.value.output

    def test_get_pod_status(self, pod_data):
        self.mock_run.return_value = completed(stdout=json.dumps(pod_data("eirini-fake-app", "ns")))
        pod = self.connector.get_pod_status("eirini-fake-app", "ns")

        assert self.last_command()[-7:] == ["--namespace", "ns", "get", "pod", "eirini-fake-app", "-o", "json"]
        assert pod.name == "eirini-fake-app"
        assert pod.is_running()

    def test_get_pod_status_not_found(self):
        self.mock_run.return_value = completed(
            returncode=1,
            stderr='Error from server (NotFound): pods "eirini-fake-app" not found',
        )
        with pytest.raises(NotFoundError) as excinfo:
            self.connector.get_pod_status("eirini-fake-app", "default")
        assert excinfo.value.kind == "pod"
        assert "default/eirini-fake-app" in str(excinfo.value)

    def test_get_pod_status_transport_error(self):
        self.mock_run.return_value = completed(
            returncode=1,
            stderr="The connection to the server localhost:8080 was refused",
        )
        with pytest.raises(GatewayError, match="default/web"):
            self.connector.get_pod_status("web", "default")

    def test_every_call_uses_its_own_namespace(self, pod_data):
        assert not hasattr(self.connector, "namespace")
        self.mock_run.return_value = completed(stdout=json.dumps(pod_data("web", "eirini")))
        self.connector.get_pod_status("web", "eirini")
        assert self.last_command()[-7:-5] == ["--namespace", "eirini"]

        self.mock_run.return_value = completed()
        self.connector.apply(b"kind: Pod\n")
        assert "--namespace" not in self.last_command()

    def test_get_pod_status_with_null_fields(self):
        self.mock_run.return_value = completed(
            stdout=json.dumps({"kind": "Pod", "metadata": {"name": "web"}, "status": None})
        )
        pod = self.connector.get_pod_status("web", "default")
        assert pod.phase == "Unknown"
        assert not pod.is_running()

    def test_get_pod_status_unparseable_output(self):
        self.mock_run.return_value = completed(stdout="not json")
        with pytest.raises(GatewayError, match="parse"):
            self.connector.get_pod_status("web", "default")

    def test_delete(self):
        self.mock_run.return_value = completed(stdout='pod "web" deleted\n')
        output = self.connector.delete("default", "web")

        assert self.last_command()[-5:] == ["--namespace", "default", "delete", "pod", "web"]
        assert output == 'pod "web" deleted\n'

    def test_delete_not_found(self):
        self.mock_run.return_value = completed(
            returncode=1,
            stderr='Error from server (NotFound): pods "web" not found',
        )
        with pytest.raises(NotFoundError):
            self.connector.delete("default", "web")

    def test_delete_failure_wraps_output(self):
        self.mock_run.return_value = completed(returncode=1, stderr="error: forbidden")
        with pytest.raises(GatewayError) as excinfo:
            self.connector.delete("default", "web")
        assert excinfo.value.output == "error: forbidden"
        assert "Failed to delete pod default/web" in str(excinfo.value)

    def test_kubectl_missing(self):
        self.mock_run.side_effect = FileNotFoundError("kubectl")
        with pytest.raises(GatewayError) as excinfo:
            self.connector.delete("default", "web")
        assert isinstance(excinfo.value.cause, FileNotFoundError)


class TestKubectlConnector:
    def test_kubeconfig_left_to_kubectl(self, dummy_kubeconfig):
        """KUBECONFIG may list several files, so it is never turned into a flag"""
        connector = KubectlConnector()
        assert connector.kubeconfig is None
        assert "--kubeconfig" not in connector._build_base_command(namespace=None)

    def test_no_kubeconfig(self, monkeypatch):
        monkeypatch.delenv("KUBECONFIG", raising=False)
        connector = KubectlConnector(context="kind-kind")
        assert connector._build_base_command(namespace=None) == ["kubectl", "--context", "kind-kind"]

    def test_connect(self):
        connector = KubectlConnector()
        with patch('eirinix_testing.connection.kubectl.subprocess.run') as mock_run:
            mock_run.return_value = completed(stdout="{}")
            assert connector.connect()
            assert connector.connected
            assert mock_run.call_count == 2

    def test_connect_failure(self):
        connector = KubectlConnector()
        with patch('eirinix_testing.connection.kubectl.subprocess.run') as mock_run:
            mock_run.side_effect = [completed(stdout="{}"), completed(returncode=1, stderr="refused")]
            assert not connector.connect()
            assert not connector.connected

    def test_connector_raises_when_cluster_unreachable(self):
        connector = ClusterConnector()
        with patch.object(KubectlConnector, 'connect', return_value=False):
            with pytest.raises(GatewayError, match="Cannot get pod default/web: not connected"):
                connector.get_pod_status("web", "default")

    def test_is_not_found(self):
        assert KubectlConnector.is_not_found(
            {"success": False, "error": 'Error from server (NotFound): pods "x" not found'}
        )
        assert not KubectlConnector.is_not_found({"success": False, "error": "timeout"})
        assert not KubectlConnector.is_not_found({"success": True, "error": ""})

    def test_run_command_splits_strings(self):
        connector = KubectlConnector(kubeconfig="/tmp/kc")
        with patch('eirinix_testing.connection.kubectl.subprocess.run') as mock_run:
            mock_run.return_value = completed(stdout="ok")
            result = connector.run_command("get pods", namespace="eirini")
        assert result["success"]
        assert result["output"] == "ok"
        assert mock_run.call_args[0][0] == [
            "kubectl", "--kubeconfig", "/tmp/kc", "--namespace", "eirini", "get", "pods"
        ]

    def test_subprocess_error_is_reported(self):
        connector = KubectlConnector()
        with patch('eirinix_testing.connection.kubectl.subprocess.run') as mock_run:
            mock_run.side_effect = subprocess.SubprocessError("boom")
            result = connector.run_command(["get", "pods"])
        assert not result["success"]
        assert result["error"] == "boom"
