"""Run trigger executor."""

import logging
from typing import List, Optional

from tfcops.models import RunTrigger, RunTriggerDirection, Workspace

from .base import BaseExecutor, ExecutionResult, OperationType

logger = logging.getLogger(__name__)


class RunTriggerExecutor(BaseExecutor[RunTrigger]):
    """Executor for run triggers between workspaces."""

    def get_resource_type(self) -> str:
        """Get the resource type."""
        return "RUN_TRIGGER"

    def list(self, workspace_id: str, direction: RunTriggerDirection = RunTriggerDirection.INBOUND) -> List[RunTrigger]:
        """Inbound (sources of this workspace) or outbound (workspaces it triggers) run triggers."""
        return self.api.list_run_triggers(workspace_id, direction)

    def find(self, workspace_id: str, source_id: str) -> Optional[RunTrigger]:
        """The inbound trigger from ``source_id``, or None."""
        for trigger in self.list(workspace_id, RunTriggerDirection.INBOUND):
            if trigger.source_id == source_id:
                return trigger
        return None

    def create(self, workspace: Workspace, source: Workspace) -> ExecutionResult:
        """Make runs in ``source`` queue runs in ``workspace``; NO_OP if already configured."""
        start_time = self._start_timer()
        resource_name = f"{source.name} -> {workspace.name}"
        try:
            if self.find(workspace.id, source.id) is not None:
                return self._result(OperationType.NO_OP, resource_name, "Run trigger already exists", start_time)
            if not self.dry_run:
                self.api.create_run_trigger(workspace.id, source.id)
            return self._result(OperationType.CREATE, resource_name, "Created run trigger", start_time)
        except Exception as e:
            return self._handle_error(OperationType.CREATE, resource_name, e)
