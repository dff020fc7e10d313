"""
Team access executor (Team Access Propagator).

Replays team access grants from one workspace onto another, keeping each
grant's permission profile exactly as it was.
"""

import logging
from typing import List

from tfcops.models import TeamAccessGrant, Workspace

from .base import BaseExecutor, ExecutionResult, OperationType

logger = logging.getLogger(__name__)


class TeamAccessExecutor(BaseExecutor[TeamAccessGrant]):
    """Executor for team access grants."""

    def get_resource_type(self) -> str:
        """Get the resource type."""
        return "TEAM_ACCESS"

    def list_for(self, workspace_id: str) -> List[TeamAccessGrant]:
        """Team access grants on a workspace."""
        return self.api.list_team_access(workspace_id)

    def grant(self, workspace: Workspace, grant: TeamAccessGrant) -> ExecutionResult:
        """Give one team access to ``workspace`` with the grant's permissions."""
        start_time = self._start_timer()
        resource_name = f"{workspace.name}/{grant.team_id}"
        try:
            if not self.dry_run:
                self.api.create_team_access(workspace.id, grant)
            return self._result(
                OperationType.GRANT,
                resource_name,
                f"Granted team {grant.team_id} '{grant.access.value}' access",
                start_time,
                changes=grant.permissions(),
            )
        except Exception as e:
            logger.error(f"Failed to grant team {grant.team_id} access to workspace '{workspace.name}'")
            return self._handle_error(OperationType.GRANT, resource_name, e)

    def propagate(self, dest: Workspace, grants: List[TeamAccessGrant]) -> List[ExecutionResult]:
        """
        Create every grant on ``dest``, in order.

        Stops at the first failure; grants already created stay in place.
        """
        results = []
        for grant in grants:
            result = self.grant(dest, grant)
            results.append(result)
            if not result.success:
                break
        return results
