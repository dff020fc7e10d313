"""
Workspace executor (Workspace Directory).

Resolves workspace names and filters to workspaces, creates workspaces for the
clone flow, updates attributes in bulk and manages remote state consumers.
"""

import logging
from typing import Any, Dict, List, Optional

from tfcops.errors import NotFoundError
from tfcops.models import Workspace, WorkspaceUpdateSpecification, workspace_names

from .base import BaseExecutor, ExecutionResult, OperationType

logger = logging.getLogger(__name__)


class WorkspaceExecutor(BaseExecutor[Workspace]):
    """Executor for workspace operations."""

    def get_resource_type(self) -> str:
        """Get the resource type."""
        return "WORKSPACE"

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def find_by_name(self, organization: str, name: str) -> Workspace:
        """
        Resolve a workspace by exact name.

        Raises:
            NotFoundError: If no workspace has that name
        """
        logger.debug(f"Reading workspace {organization}/{name}")
        return self.api.get_workspace(organization, name)

    def find_by_filter(self, organization: str, substring: str) -> List[Workspace]:
        """Workspaces whose name contains ``substring``; empty when nothing matches."""
        workspaces = self.api.list_workspaces(organization, search=substring)
        logger.debug(f"Filter '{substring}' matched {len(workspaces)} workspace(s) in {organization}")
        return workspaces

    def list_all(self, organization: str) -> List[Workspace]:
        """Every workspace in the organization."""
        return self.api.list_workspaces(organization)

    def list_attributes(self, organization: str, labels: List[str]) -> List[List[str]]:
        """
        One row of attribute values per workspace.

        Args:
            organization: Organization to list
            labels: Attribute labels (see WORKSPACE_LIST_ATTRIBUTES)

        Raises:
            InvalidSpecificationError: If a label is unknown
        """
        return [
            [ws.attribute_by_label(label) for label in labels]
            for ws in self.list_all(organization)
        ]

    # =========================================================================
    # MUTATIONS
    # =========================================================================

    def create(self, organization: str, attributes: Dict[str, Any]) -> Optional[Workspace]:
        """
        Create a workspace.

        Returns:
            The created workspace, or None in dry-run mode
        """
        start_time = self._start_timer()
        name = attributes.get("name", "")
        if self.dry_run:
            self._result(OperationType.CREATE, f"{organization}/{name}", "Would be created (dry run)", start_time)
            return None

        logger.info(f"Creating workspace {organization}/{name}")
        workspace = self.api.create_workspace(organization, attributes)
        self._result(
            OperationType.CREATE,
            f"{organization}/{name}",
            f"Created workspace {workspace.id}",
            start_time,
            changes=dict(attributes),
        )
        return workspace

    def update_attribute(self, spec: WorkspaceUpdateSpecification) -> List[ExecutionResult]:
        """
        Set one attribute on every workspace matching the filter.

        Raises:
            NotFoundError: If no workspace matches the filter
        """
        attributes = spec.attributes()
        workspaces = self.find_by_filter(spec.organization, spec.workspace_filter)
        if not workspaces:
            raise NotFoundError.for_resource("workspace matching filter", spec.workspace_filter)

        logger.info(f"Setting '{spec.attribute}' to '{spec.value}' on {workspace_names(workspaces)}")
        results: List[ExecutionResult] = []
        for ws in workspaces:
            start_time = self._start_timer()
            message = f"set '{spec.attribute}' to '{spec.value}'"
            try:
                if not self.dry_run:
                    self.api.update_workspace(ws.id, attributes)
                results.append(self._result(
                    OperationType.UPDATE, ws.name, message, start_time, changes=dict(attributes)
                ))
            except Exception as e:
                results.append(self._handle_error(OperationType.UPDATE, ws.name, e))
        return results

    # =========================================================================
    # REMOTE STATE CONSUMERS
    # =========================================================================

    def _resolve_all(self, organization: str, names: List[str]) -> List[Workspace]:
        return [self.find_by_name(organization, name) for name in names]

    def list_consumers(self, organization: str, workspace: str) -> List[Workspace]:
        """Workspaces allowed to read ``workspace``'s state."""
        ws = self.find_by_name(organization, workspace)
        return self.api.list_remote_state_consumers(ws.id)

    def add_consumers(self, organization: str, workspace: str, consumers: List[str]) -> ExecutionResult:
        """Allow more workspaces to read ``workspace``'s state."""
        return self._change_consumers("add", organization, workspace, consumers)

    def update_consumers(self, organization: str, workspace: str, consumers: List[str]) -> ExecutionResult:
        """Replace the consumer list of ``workspace``."""
        return self._change_consumers("update", organization, workspace, consumers)

    def remove_consumers(self, organization: str, workspace: str, consumers: List[str]) -> ExecutionResult:
        """Revoke state access of the given workspaces."""
        return self._change_consumers("remove", organization, workspace, consumers)

    def _change_consumers(
        self,
        action: str,
        organization: str,
        workspace: str,
        consumers: List[str],
    ) -> ExecutionResult:
        start_time = self._start_timer()
        ws = self.find_by_name(organization, workspace)
        resolved = self._resolve_all(organization, consumers)
        consumer_ids = [c.id for c in resolved]
        operations = {
            "add": (OperationType.CREATE, self.api.add_remote_state_consumers, "Added"),
            "update": (OperationType.UPDATE, self.api.replace_remote_state_consumers, "Set"),
            "remove": (OperationType.DELETE, self.api.remove_remote_state_consumers, "Removed"),
        }
        operation, call, verb = operations[action]
        message = f"{verb} consumer {workspace_names(resolved)}"
        try:
            if not self.dry_run:
                call(ws.id, consumer_ids)
            return self._result(
                operation, workspace, message, start_time, changes={"consumers": consumers}
            )
        except Exception as e:
            return self._handle_error(operation, workspace, e)
