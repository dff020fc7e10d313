"""
Variable update executor (Variable Update Engine).

Updates, or adds, one variable on one workspace or on every workspace of an
organization. The decision for each workspace is the same in dry-run and live
mode; dry-run only suppresses the write.
"""

import logging
from typing import Callable, List, Optional

from tfcops.api import WorkspaceApi
from tfcops.errors import PolicyViolationError
from tfcops.models import Variable, VariableUpdateSpecification, Workspace

from .base import BaseExecutor, ExecutionResult, OperationType
from .workspace_executor import WorkspaceExecutor

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[str], bool]

NO_MATCH_MESSAGE = "No match found and no variable added"


class VariableUpdateExecutor(BaseExecutor[VariableUpdateSpecification]):
    """
    Executor for add-or-update variable requests.

    Per workspace:
    - search on value: the first non-hidden variable whose value equals the
      search string (case-insensitive) gets the new value
    - search on key: the variable whose key equals the search string
      (case-insensitive) gets the new value; if ``add_if_missing`` was
      requested this is a collision and fails
    - a replaced variable is sent as a literal (not HCL) with the requested
      sensitive flag
    - no match: a new variable is created when ``add_if_missing``, otherwise
      nothing happens
    """

    def __init__(self, api: WorkspaceApi, dry_run: bool = False, continue_on_error: bool = False,
                 lenient_collisions: bool = False):
        """
        Initialize the executor.

        Args:
            api: Workspace API implementation
            dry_run: If True, only show what would be done
            continue_on_error: Record per-workspace failures and move on
            lenient_collisions: Skip a workspace whose key collides with an
                add-if-missing request instead of failing
        """
        super().__init__(api, dry_run=dry_run, continue_on_error=continue_on_error)
        self.lenient_collisions = lenient_collisions

    def get_resource_type(self) -> str:
        """Get the resource type."""
        return "VARIABLE"

    def run(self, spec: VariableUpdateSpecification, confirm: Optional[ConfirmCallback] = None) -> List[ExecutionResult]:
        """
        Apply the request to ``spec.workspace``, or to every workspace.

        When more than one workspace is processed, ``confirm(workspace_name)``
        is asked before each one; a declined workspace gets a SKIPPED result.
        """
        directory = WorkspaceExecutor(self.api)
        if spec.workspace:
            targets = [directory.find_by_name(spec.organization, spec.workspace)]
        else:
            targets = directory.list_all(spec.organization)
            logger.info(f"Processing {len(targets)} workspace(s) in {spec.organization}")

        results: List[ExecutionResult] = []
        for ws in targets:
            if len(targets) > 1 and confirm is not None and not confirm(ws.name):
                results.append(self._result(OperationType.SKIPPED, ws.name, "Skipped by operator"))
                continue
            try:
                results.append(self.update_workspace(ws, spec))
            except Exception as e:
                results.append(self._handle_error(OperationType.UPDATE, ws.name, e))
        return results

    def update_workspace(self, workspace: Workspace, spec: VariableUpdateSpecification) -> ExecutionResult:
        """
        Apply the request to one workspace.

        Raises:
            PolicyViolationError: If ``add_if_missing`` is set and the key exists
        """
        start_time = self._start_timer()
        variables = self.api.list_variables(workspace.id)
        search = spec.search_string.lower()

        if spec.search_on_value:
            match = self._find(variables, lambda v: not v.is_hidden and v.value.lower() == search)
        else:
            match = self._find(variables, lambda v: v.key.lower() == search)

        if match is not None and spec.add_if_missing:
            message = (
                f"add_if_missing was requested but a variable already exists "
                f"with key {match.key} on workspace '{workspace.name}'"
            )
            if self.lenient_collisions:
                return self._result(OperationType.SKIPPED, workspace.name, message, start_time)
            raise PolicyViolationError(message)

        if match is not None:
            updated = match.model_copy(update={"value": spec.new_value, "hcl": False, "sensitive": spec.sensitive})
            if not self.dry_run:
                self.api.update_variable(workspace.id, updated)
            old = match.display_value()
            new = updated.display_value()
            return self._result(
                OperationType.UPDATE,
                workspace.name,
                f"Replaced the value of {match.key} from {old} to {new}",
                start_time,
                changes={"key": match.key},
            )

        if spec.add_if_missing:
            created = Variable(key=spec.search_string, value=spec.new_value, hcl=False, sensitive=spec.sensitive)
            if not self.dry_run:
                self.api.create_variable(workspace.id, created)
            return self._result(
                OperationType.CREATE,
                workspace.name,
                f"Added variable {created.key} = {created.display_value()}",
                start_time,
                changes={"key": created.key},
            )

        return self._result(OperationType.NO_OP, workspace.name, NO_MATCH_MESSAGE, start_time)

    @staticmethod
    def _find(variables: List[Variable], predicate: Callable[[Variable], bool]) -> Optional[Variable]:
        for var in variables:
            if predicate(var):
                return var
        return None
