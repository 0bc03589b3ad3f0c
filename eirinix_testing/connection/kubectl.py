"""
KubectlConnector module for K8s connections using kubectl CLI.
Runs kubectl through subprocess and reports the outcome as a plain result dict.
"""

import logging
import subprocess
from typing import Optional, Dict, Any, Union, List

logger = logging.getLogger(__name__)

# Markers kubectl prints on stderr when the requested object does not exist
NOT_FOUND_MARKERS = ("(NotFound)", "NotFound", "not found")


class KubectlConnector:
    """
    KubectlConnector runs kubectl commands against a cluster through subprocess.
    """

    def __init__(
        self,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
        namespace: str = "default"
    ):
        """
        Initialize a new KubectlConnector instance.

        Args:
            kubeconfig: Path to kubeconfig file. If None, no --kubeconfig flag is
                passed and kubectl reads KUBECONFIG (which may list several files)
                or its own default
            context: Kubernetes context to use. If None, uses current context
            namespace: Kubernetes namespace to use
        """
        self.kubeconfig = kubeconfig
        self.context = context
        self.namespace = namespace
        self.connected = False

    def connect(self) -> bool:
        """
        Verify connection to the Kubernetes cluster.

        Returns:
            bool: True if connection was successful, False otherwise
        """
        version_cmd = ["kubectl", "version", "--client", "--output=json"]
        result = self._execute_command(version_cmd)
        if not result["success"]:
            logger.error(f"kubectl is not available: {result['error']}")
            return False

        cmd = self._build_base_command(namespace=None)
        cmd.extend(["version", "--output=json"])
        result = self._execute_command(cmd)

        if result["success"]:
            self.connected = True
            logger.info("Successfully connected to Kubernetes cluster using kubectl")
            return True

        logger.error(f"Failed to connect to cluster: {result['error']}")
        return False

    def run_command(
        self,
        command: Union[str, List[str]],
        input_data: Optional[str] = None,
        namespace: Optional[str] = None,
        use_namespace: bool = True,
    ) -> Dict[str, Any]:
        """
        Run a kubectl command.

        Args:
            command: Command to run (string or list), without the leading "kubectl"
            input_data: Text fed to kubectl on stdin, e.g. a manifest for "apply -f -"
            namespace: Namespace overriding the connector's default
            use_namespace: Whether to add a namespace flag at all

        Returns:
            Dict containing command output and status
        """
        if isinstance(command, str):
            command = command.split()

        if use_namespace:
            cmd = self._build_base_command(namespace=namespace or self.namespace)
        else:
            cmd = self._build_base_command(namespace=None)
        cmd.extend(command)

        return self._execute_command(cmd, input_data=input_data)

    @staticmethod
    def is_not_found(result: Dict[str, Any]) -> bool:
        """Tell whether a failed command result means the object does not exist."""
        if result["success"]:
            return False
        error = result.get("error") or ""
        return any(marker in error for marker in NOT_FOUND_MARKERS)

    def _build_base_command(self, namespace: Optional[str]) -> List[str]:
        """
        Build base kubectl command with config, context, and namespace.

        Args:
            namespace: Namespace flag to add, or None for none

        Returns:
            List[str]: Base command as list of strings
        """
        cmd = ["kubectl"]

        if self.kubeconfig:
            cmd.extend(["--kubeconfig", self.kubeconfig])

        if self.context:
            cmd.extend(["--context", self.context])

        if namespace:
            cmd.extend(["--namespace", namespace])

        return cmd

    def _execute_command(self, cmd: List[str], input_data: Optional[str] = None) -> Dict[str, Any]:
        """
        Execute a command using subprocess.

        Args:
            cmd: Command to execute as list of strings
            input_data: Optional text passed on stdin

        Returns:
            Dict containing:
                success: bool indicating command success
                output: command stdout
                error: command stderr, or the exception text if it could not run
                returncode: command return code
                exception: the exception raised while launching, if any
        """
        logger.debug(f"Executing command: {' '.join(cmd)}")

        result = {
            "success": False,
            "output": "",
            "error": "",
            "returncode": -1,
            "exception": None,
        }

        try:
            process = subprocess.run(
                cmd,
                input=input_data,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                universal_newlines=True,
                check=False
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error(f"Error executing command: {e}")
            result["error"] = str(e)
            result["exception"] = e
            return result

        result["returncode"] = process.returncode
        result["output"] = process.stdout or ""

        if process.returncode == 0:
            result["success"] = True
        else:
            result["error"] = process.stderr or ""

        return result
