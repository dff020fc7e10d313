"""
Team access models.

A team access grant binds one team to one workspace with a permission profile.
When a workspace is cloned, every grant on the source is replayed verbatim on
the destination.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import Field

from .base import BaseOpsModel, relationship_id, resource_identifier
from .enums import (
    AccessLevel,
    RunsPermission,
    SentinelMocksPermission,
    StateVersionsPermission,
    VariablesPermission,
)


class TeamAccessGrant(BaseOpsModel):
    """
    Permission profile of a team on a workspace.

    Example:
        ```python
        grant = TeamAccessGrant(team_id="team-abc", access=AccessLevel.WRITE)
        ```
    """

    id: Optional[str] = Field(default=None, description="Grant ID (tws-...)")
    team_id: str
    workspace_id: Optional[str] = None
    access: AccessLevel = AccessLevel.READ
    runs: Optional[RunsPermission] = None
    variables: Optional[VariablesPermission] = None
    state_versions: Optional[StateVersionsPermission] = None
    sentinel_mocks: Optional[SentinelMocksPermission] = None
    workspace_locking: Optional[bool] = None
    run_tasks: Optional[bool] = None

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "TeamAccessGrant":
        """Parse a JSON:API ``team-workspaces`` resource object."""
        attrs = resource.get("attributes") or {}
        return cls(
            id=resource.get("id"),
            team_id=relationship_id(resource, "team") or "",
            workspace_id=relationship_id(resource, "workspace"),
            access=AccessLevel(attrs.get("access", AccessLevel.READ.value)),
            runs=attrs.get("runs"),
            variables=attrs.get("variables"),
            state_versions=attrs.get("state-versions"),
            sentinel_mocks=attrs.get("sentinel-mocks"),
            workspace_locking=attrs.get("workspace-locking"),
            run_tasks=attrs.get("run-tasks"),
        )

    def permissions(self) -> Dict[str, Any]:
        """The permission profile as API attributes; unset permissions are omitted."""
        attrs: Dict[str, Any] = {"access": self.access.value}
        optional = {
            "runs": self.runs,
            "variables": self.variables,
            "state-versions": self.state_versions,
            "sentinel-mocks": self.sentinel_mocks,
            "workspace-locking": self.workspace_locking,
            "run-tasks": self.run_tasks,
        }
        for name, value in optional.items():
            if value is None:
                continue
            attrs[name] = value.value if hasattr(value, "value") else value
        return attrs

    def to_api(self, workspace_id: str) -> Dict[str, Any]:
        """Build the create-grant document for ``workspace_id``."""
        return {
            "data": {
                "type": "team-workspaces",
                "attributes": self.permissions(),
                "relationships": {
                    "workspace": {"data": resource_identifier("workspaces", workspace_id)},
                    "team": {"data": resource_identifier("teams", self.team_id)},
                },
            }
        }
