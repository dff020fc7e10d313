"""
Variable executor (Variable Store).

Reads, searches and writes workspace variables. HCL values are escaped on the
way out (see ``Variable.to_api``). Hidden values, whether flagged sensitive or
read back as the sentinel, never appear in search output.
"""

import logging
from typing import Dict, List, Optional

from tfcops.errors import PolicyViolationError
from tfcops.models import Variable, Workspace

from .base import BaseExecutor, ExecutionResult, OperationType

logger = logging.getLogger(__name__)


class VariableExecutor(BaseExecutor[Variable]):
    """Executor for workspace variable operations."""

    def get_resource_type(self) -> str:
        """Get the resource type."""
        return "VARIABLE"

    # =========================================================================
    # READ
    # =========================================================================

    def list_for_workspace(self, workspace_id: str) -> List[Variable]:
        """All variables of a workspace, values as returned by the API."""
        return self.api.list_variables(workspace_id)

    def find_by_key(self, workspace_id: str, key: str) -> Optional[Variable]:
        """Exact, case-sensitive key lookup; None when absent."""
        for var in self.list_for_workspace(workspace_id):
            if var.key == key:
                return var
        return None

    def search(self, workspace_id: str, key_contains: str = "", value_contains: str = "") -> List[Variable]:
        """
        Variables whose key contains ``key_contains`` or whose value contains
        ``value_contains``.

        Empty terms are ignored. Hidden values are returned as the redaction
        marker and never match a value search.
        """
        return [
            var.redacted()
            for var in self.list_for_workspace(workspace_id)
            if var.matches(key_contains, value_contains)
        ]

    def search_all(
        self,
        workspaces: List[Workspace],
        key_contains: str = "",
        value_contains: str = "",
    ) -> Dict[str, List[Variable]]:
        """
        Search several workspaces, one at a time.

        Returns:
            Workspace name -> matching (redacted) variables; workspaces without
            a match are left out
        """
        found: Dict[str, List[Variable]] = {}
        for ws in workspaces:
            matches = self.search(ws.id, key_contains, value_contains)
            if matches:
                found[ws.name] = matches
        return found

    # =========================================================================
    # WRITE
    # =========================================================================

    def create(self, workspace_id: str, variable: Variable, resource_name: str = "") -> ExecutionResult:
        """Create a variable on a workspace."""
        start_time = self._start_timer()
        name = resource_name or f"{workspace_id}/{variable.key}"
        try:
            if not self.dry_run:
                logger.debug(f"Creating variable {variable.key} on {workspace_id}")
                self.api.create_variable(workspace_id, variable)
            return self._result(
                OperationType.CREATE,
                name,
                f"Created variable {variable.key}",
                start_time,
                changes={"key": variable.key, "hcl": variable.hcl, "sensitive": variable.sensitive},
            )
        except Exception as e:
            return self._handle_error(OperationType.CREATE, name, e)

    def update(self, workspace_id: str, variable: Variable, resource_name: str = "") -> ExecutionResult:
        """
        Update a variable in place.

        Key, value, description, category, HCL and sensitive flags are all
        resent.
        """
        start_time = self._start_timer()
        name = resource_name or f"{workspace_id}/{variable.key}"
        if not variable.id:
            raise ValueError(f"Variable '{variable.key}' has no ID and cannot be updated")
        try:
            if not self.dry_run:
                logger.debug(f"Updating variable {variable.key} ({variable.id}) on {workspace_id}")
                self.api.update_variable(workspace_id, variable)
            return self._result(
                OperationType.UPDATE,
                name,
                f"Updated variable {variable.key}",
                start_time,
                changes={"key": variable.key, "hcl": variable.hcl, "sensitive": variable.sensitive},
            )
        except Exception as e:
            return self._handle_error(OperationType.UPDATE, name, e)

    def delete(self, workspace_id: str, variable: Variable, resource_name: str = "") -> ExecutionResult:
        """Delete a variable; failures are always reported."""
        start_time = self._start_timer()
        name = resource_name or f"{workspace_id}/{variable.key}"
        try:
            if not self.dry_run:
                self.api.delete_variable(workspace_id, variable.id or "")
            return self._result(OperationType.DELETE, name, f"Deleted variable {variable.key}", start_time)
        except Exception as e:
            return self._handle_error(OperationType.DELETE, name, e)

    def create_all(self, workspace_id: str, variables: List[Variable], workspace_name: str = "") -> List[ExecutionResult]:
        """
        Create variables in order, stopping at the first failure.

        The failing key is named in the error; variables created before it are
        left in place.
        """
        results = []
        label = workspace_name or workspace_id
        for var in variables:
            try:
                result = self.create(workspace_id, var, resource_name=f"{label}/{var.key}")
            except Exception:
                logger.error(f"Stopped creating variables on {label} at '{var.key}' "
                             f"({len(results)} of {len(variables)} created)")
                raise
            results.append(result)
            if not result.success:
                logger.error(f"Stopped creating variables on {label} at '{var.key}'")
                break
        return results

    def add_if_absent(self, workspace: Workspace, variable: Variable) -> ExecutionResult:
        """
        Create ``variable`` unless its key already exists.

        Raises:
            PolicyViolationError: If a variable with the same key exists
        """
        if self.find_by_key(workspace.id, variable.key) is not None:
            raise PolicyViolationError(
                f"Variable '{variable.key}' already exists on workspace '{workspace.name}'"
            )
        return self.create(workspace.id, variable, resource_name=f"{workspace.name}/{variable.key}")

    def delete_by_key(self, workspace: Workspace, key: str) -> Optional[ExecutionResult]:
        """
        Delete the variable named ``key``.

        Returns:
            The delete result, or None when no variable has that key
        """
        var = self.find_by_key(workspace.id, key)
        if var is None:
            logger.info(f"No variable '{key}' on workspace '{workspace.name}'")
            return None
        return self.delete(workspace.id, var, resource_name=f"{workspace.name}/{key}")
