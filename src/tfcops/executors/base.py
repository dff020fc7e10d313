"""
Base executor class for Terraform Cloud operations.

Provides common functionality for all executors including error handling,
dry-run support and result bookkeeping.

There is no retry and no rollback: every sub-step is logged and recorded as an
ExecutionResult so an interrupted batch can be reconciled by hand.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

from tfcops.api import WorkspaceApi
from tfcops.errors import ApiError, NotFoundError, PolicyViolationError, ReadOnlyModeError, TransportError

logger = logging.getLogger(__name__)

T = TypeVar('T')  # Generic type for models


class OperationType(str, Enum):
    """Types of operations that can be performed."""
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    GRANT = "GRANT"
    APPLY = "APPLY"
    NO_OP = "NO_OP"
    SKIPPED = "SKIPPED"


@dataclass
class ExecutionResult:
    """Result of an execution operation."""

    success: bool
    operation: OperationType
    resource_type: str
    resource_name: str
    message: str = ""
    error: Optional[Exception] = None
    duration_seconds: float = 0.0
    changes: Dict[str, Any] = field(default_factory=dict)
    dry_run: bool = False

    def __str__(self) -> str:
        """String representation of the result."""
        status = "✅" if self.success else "❌"
        prefix = "[DRY RUN] " if self.dry_run else ""
        return (
            f"{prefix}{status} {self.operation.value} {self.resource_type} "
            f"{self.resource_name}: {self.message}"
        )


class BaseExecutor(ABC, Generic[T]):
    """
    Base class for all Terraform Cloud executors.

    Provides common functionality including:
    - Error handling
    - Dry-run mode support
    - Result bookkeeping and summaries
    """

    def __init__(
        self,
        api: WorkspaceApi,
        dry_run: bool = False,
        continue_on_error: bool = False,
    ):
        """
        Initialize the executor.

        Args:
            api: Workspace API implementation
            dry_run: If True, only show what would be done
            continue_on_error: Record failures and keep going instead of raising
        """
        self.api = api
        self.dry_run = dry_run
        self.continue_on_error = continue_on_error
        self.results: List[ExecutionResult] = []

    @abstractmethod
    def get_resource_type(self) -> str:
        """Get the type of resource this executor handles."""
        pass

    def _start_timer(self) -> float:
        return time.time()

    def _elapsed(self, start_time: float) -> float:
        return time.time() - start_time

    def _result(
        self,
        operation: OperationType,
        resource_name: str,
        message: str,
        start_time: Optional[float] = None,
        changes: Optional[Dict[str, Any]] = None,
        success: bool = True,
    ) -> ExecutionResult:
        """Build a result, record it and log it."""
        result = ExecutionResult(
            success=success,
            operation=operation,
            resource_type=self.get_resource_type(),
            resource_name=resource_name,
            message=message,
            duration_seconds=self._elapsed(start_time) if start_time else 0.0,
            changes=changes or {},
            dry_run=self.dry_run,
        )
        self.results.append(result)
        if self.dry_run:
            logger.info(f"[DRY RUN] {result.operation.value} {result.resource_type} {resource_name}: {message}")
        else:
            logger.info(f"{result.operation.value} {result.resource_type} {resource_name}: {message}")
        return result

    def _record_failure(
        self,
        operation: OperationType,
        resource_name: str,
        error: Exception
    ) -> ExecutionResult:
        """Record and log a failed operation without raising."""
        if isinstance(error, NotFoundError):
            message = f"Resource not found: {error}"
        elif isinstance(error, ApiError) and error.status_code in (401, 403):
            message = f"Permission denied ({error.status_code}). Check that the token has access to the organization."
        elif isinstance(error, ApiError) and error.status_code == 422:
            message = f"Invalid parameter: {error}"
        elif isinstance(error, TransportError):
            message = f"No answer from the API: {error}"
        elif isinstance(error, ReadOnlyModeError):
            message = f"Refused in read-only mode: {error}"
        elif isinstance(error, PolicyViolationError):
            message = f"Refused: {error}"
        else:
            message = str(error)

        result = ExecutionResult(
            success=False,
            operation=operation,
            resource_type=self.get_resource_type(),
            resource_name=resource_name,
            message=message,
            error=error,
            dry_run=self.dry_run,
        )

        self.results.append(result)
        logger.error(f"Operation failed: {result}")
        return result

    def _handle_error(
        self,
        operation: OperationType,
        resource_name: str,
        error: Exception
    ) -> ExecutionResult:
        """
        Handle an error during execution.

        Args:
            operation: The operation that failed
            resource_name: Name of the resource
            error: The exception that occurred

        Returns:
            ExecutionResult with error details (only when continue_on_error)
        """
        result = self._record_failure(operation, resource_name, error)

        if not self.continue_on_error:
            raise error

        return result

    def get_summary(self) -> str:
        """
        Get a summary of execution results.

        Returns:
            Summary string
        """
        if not self.results:
            return "No operations performed"

        successful = sum(1 for r in self.results if r.success)
        failed = sum(1 for r in self.results if not r.success)

        lines = [
            "Execution Summary:",
            f"  Total operations: {len(self.results)}",
            f"  Successful: {successful}",
            f"  Failed: {failed}"
        ]

        if failed > 0:
            lines.append("\nFailed operations:")
            for result in self.results:
                if not result.success:
                    lines.append(f"  - {result}")

        return "\n".join(lines)
