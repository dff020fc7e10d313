"""
Variable set executor (Variable Set Applier).

Applies existing variable sets to workspaces. Set contents are never created
or modified here.
"""

import logging
from typing import List

from tfcops.errors import NotFoundError, PartialFailureError
from tfcops.models import VariableSet, Workspace, workspace_names

from .base import BaseExecutor, ExecutionResult, OperationType

logger = logging.getLogger(__name__)


class VariableSetExecutor(BaseExecutor[VariableSet]):
    """Executor for variable set operations."""

    def get_resource_type(self) -> str:
        """Get the resource type."""
        return "VARIABLE_SET"

    def list_all(self, organization: str) -> List[VariableSet]:
        """Every variable set in the organization."""
        return self.api.list_variable_sets(organization)

    def find_by_name(self, organization: str, name: str) -> VariableSet:
        """
        Resolve a variable set by exact name.

        Raises:
            NotFoundError: If the organization has no set with that name
        """
        for varset in self.list_all(organization):
            if varset.name == name:
                return varset
        raise NotFoundError.for_resource("variable set", name)

    def list_applied_to(self, workspace_id: str) -> List[VariableSet]:
        """Variable sets applied to a workspace."""
        return self.api.list_workspace_variable_sets(workspace_id)

    def apply_to_workspace(self, variable_set: VariableSet, workspace_id: str, workspace_name: str = "") -> ExecutionResult:
        """Apply one set to one workspace."""
        return self.apply_to_workspaces(
            variable_set,
            [Workspace(id=workspace_id, name=workspace_name or workspace_id)],
        )

    def apply_to_workspaces(self, variable_set: VariableSet, workspaces: List[Workspace]) -> ExecutionResult:
        """Apply one set to several workspaces in a single call."""
        start_time = self._start_timer()
        try:
            if not self.dry_run:
                self.api.apply_variable_set(variable_set.id, [ws.id for ws in workspaces])
            return self._result(
                OperationType.APPLY,
                variable_set.name,
                f"Applied variable set to {workspace_names(workspaces)}",
                start_time,
                changes={"workspaces": [ws.name for ws in workspaces]},
            )
        except Exception as e:
            return self._handle_error(OperationType.APPLY, variable_set.name, e)

    def copy_all(self, source_id: str, dest_id: str, dest_name: str = "") -> List[ExecutionResult]:
        """
        Apply every set applied to the source workspace to the destination.

        Each set is applied independently; nothing is undone when a later set
        fails.

        Raises:
            PartialFailureError: If any set could not be applied; ``all_failed``
                tells whether anything succeeded
        """
        sets = self.list_applied_to(source_id)
        logger.info(f"Copying {len(sets)} variable set(s) from {source_id} to {dest_name or dest_id}")

        results: List[ExecutionResult] = []
        succeeded: List[str] = []
        failed: List[str] = []
        errors: List[Exception] = []
        for varset in sets:
            start_time = self._start_timer()
            try:
                if not self.dry_run:
                    self.api.apply_variable_set(varset.id, [dest_id])
                succeeded.append(varset.name)
                results.append(self._result(
                    OperationType.APPLY,
                    varset.name,
                    f"Applied variable set to workspace '{dest_name or dest_id}'",
                    start_time,
                ))
            except Exception as e:
                failed.append(varset.name)
                errors.append(e)
                results.append(self._record_failure(OperationType.APPLY, varset.name, e))

        if failed:
            error = PartialFailureError("apply variable sets", succeeded, failed)
            raise error from errors[0]
        return results
