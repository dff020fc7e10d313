"""
Variable set models.

A variable set is a named bundle of variables that can be applied to many
workspaces. tfc-ops never edits a set's contents; it only reads which sets are
applied where and applies existing sets to more workspaces.
"""

from __future__ import annotations

from typing import Any, Dict, List

from pydantic import Field

from .base import BaseOpsModel, resource_identifier


class VariableSet(BaseOpsModel):
    """A Terraform Cloud variable set."""

    id: str = Field(..., description="Variable set ID (varset-...)")
    name: str
    description: str = ""
    is_global: bool = Field(default=False, description="Applied to every workspace in the organization")

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "VariableSet":
        """Parse a JSON:API ``varsets`` resource object."""
        attrs = resource.get("attributes") or {}
        return cls(
            id=resource["id"],
            name=attrs.get("name", ""),
            description=attrs.get("description") or "",
            is_global=bool(attrs.get("global", False)),
        )


def apply_payload(workspace_ids: List[str]) -> Dict[str, Any]:
    """Build the relationship document that applies a set to workspaces."""
    return {"data": [resource_identifier("workspaces", ws_id) for ws_id in workspace_ids]}
