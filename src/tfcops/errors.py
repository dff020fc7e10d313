"""
Exception types raised by tfc-ops.

Validation problems are raised before any remote call is made. API failures
carry enough request context to reproduce the call by hand.
"""

from typing import List, Optional


class TfcOpsError(Exception):
    """Base class for all tfc-ops errors."""


class InvalidSpecificationError(TfcOpsError, ValueError):
    """Raised when operator input is malformed or contradictory."""


class ConfigurationError(TfcOpsError):
    """Raised when required configuration (e.g. an API token) is missing."""


class ApiError(TfcOpsError):
    """Raised when the API answers with a status code of 300 or above."""

    def __init__(
        self,
        method: str,
        url: str,
        status_code: int,
        reason: str = "",
        request_body: Optional[str] = None,
        response_body: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.method = method
        self.url = url
        self.status_code = status_code
        self.reason = reason
        self.request_body = request_body
        self.response_body = response_body
        super().__init__(message or (
            "API returned an error.\n"
            f"\tMethod: {method}\n"
            f"\tURL: {url}\n"
            f"\tCode: {status_code}\n"
            f"\tStatus: {reason}\n"
            f"\tRequest Body: {request_body or ''}\n"
            f"\tResponse Body: {response_body or ''}"
        ))


class TransportError(TfcOpsError):
    """Raised when a request gets no usable answer (connection, timeout, undecodable body)."""

    def __init__(self, method: str, url: str, cause: Exception):
        self.method = method
        self.url = url
        self.cause = cause
        super().__init__(f"{method} {url} failed: {cause}")


class NotFoundError(ApiError):
    """Raised when a named resource does not exist (HTTP 404)."""

    @classmethod
    def for_resource(cls, resource_type: str, name: str) -> "NotFoundError":
        """Build a NotFoundError for a lookup that was resolved client-side."""
        return cls(
            method="GET",
            url="",
            status_code=404,
            reason="Not Found",
            message=f"{resource_type} '{name}' not found",
        )


class ReadOnlyModeError(TfcOpsError):
    """Raised when a mutating request is attempted in read-only mode."""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        super().__init__(f"read-only mode enabled, refusing {method} {path}")


class PolicyViolationError(TfcOpsError):
    """Raised when a successful read reveals a contradiction with the request."""


class PartialFailureError(TfcOpsError):
    """
    Raised when some sub-operations of a batch failed.

    Nothing that succeeded is rolled back; both lists are kept so the operator
    can reconcile by hand.
    """

    def __init__(self, operation: str, succeeded: List[str], failed: List[str]):
        self.operation = operation
        self.succeeded = list(succeeded)
        self.failed = list(failed)
        if succeeded:
            message = (
                f"{operation}: {len(failed)} of {len(failed) + len(succeeded)} failed "
                f"({', '.join(failed)}); succeeded: {', '.join(succeeded)}"
            )
        else:
            message = f"{operation}: all failed ({', '.join(failed)})"
        super().__init__(message)

    @property
    def all_failed(self) -> bool:
        """True when no sub-operation succeeded."""
        return not self.succeeded


class CloneStepError(TfcOpsError):
    """Raised when one step of a workspace clone fails."""

    def __init__(self, step: str, organization: str, workspace: str, cause: Exception):
        self.step = step
        self.organization = organization
        self.workspace = workspace
        self.cause = cause
        super().__init__(f"clone of {organization}/{workspace} failed at '{step}': {cause}")


class StateMigrationError(TfcOpsError):
    """Raised when the external state migration (terraform init) fails."""

    def __init__(self, command: str, returncode: int, stderr: str = ""):
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"'{command}' exited with status {returncode}: {stderr.strip()}")
