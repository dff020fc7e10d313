"""Run trigger models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from .base import BaseOpsModel, relationship_id, resource_identifier


class RunTrigger(BaseOpsModel):
    """A run trigger: a run in the source workspace queues a run in the workspace."""

    id: Optional[str] = None
    source_id: str
    source_name: str = ""
    workspace_id: str
    workspace_name: str = ""
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "RunTrigger":
        """Parse a JSON:API ``run-triggers`` resource object."""
        attrs = resource.get("attributes") or {}
        return cls(
            id=resource.get("id"),
            source_id=relationship_id(resource, "sourceable") or "",
            source_name=attrs.get("sourceable-name", ""),
            workspace_id=relationship_id(resource, "workspace") or "",
            workspace_name=attrs.get("workspace-name", ""),
            created_at=attrs.get("created-at"),
        )


def create_payload(source_workspace_id: str) -> Dict[str, Any]:
    """Build the create document for a run trigger sourced from ``source_workspace_id``."""
    return {
        "data": {
            "relationships": {
                "sourceable": {"data": resource_identifier("workspaces", source_workspace_id)},
            }
        }
    }
