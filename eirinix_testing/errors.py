"""
Exceptions raised by the test harness.
"""

from typing import Optional


class HarnessError(Exception):
    """Base class for every error raised by the harness."""


class GatewayError(HarnessError):
    """
    Raised when kubectl fails to apply, fetch or delete a resource.

    Attributes:
        output: Captured kubectl output (stdout and stderr), if any
        cause: Underlying exception, if the failure was raised rather than reported
    """

    def __init__(self, message: str, output: str = "", cause: Optional[BaseException] = None):
        self.output = output
        self.cause = cause
        if output:
            message = f"{message}: {output.strip()}"
        super().__init__(message)


class NotFoundError(HarnessError):
    """Raised when the cluster reports that a resource does not exist."""

    def __init__(self, kind: str, name: str, namespace: str, output: str = ""):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        self.output = output
        super().__init__(f"{kind} {namespace}/{name} not found")


class ConstructionError(HarnessError):
    """Raised when the harness cannot be built, e.g. no free port is available."""
