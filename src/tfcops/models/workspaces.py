"""
Workspace models.

This module contains:
- VcsRepo: VCS repository binding of a workspace
- Workspace: A Terraform Cloud workspace as read from the API
- Attribute mappings used by ``workspaces list`` and ``workspaces update``
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from pydantic import Field

from tfcops.errors import InvalidSpecificationError

from .base import BaseOpsModel, relationship_id

logger = logging.getLogger(__name__)


class VcsRepo(BaseOpsModel):
    """VCS repository binding of a workspace."""

    identifier: str = Field(..., description="Repository identifier, e.g. 'org/repo'")
    branch: str = Field(default="", description="Branch; empty means the default branch")
    oauth_token_id: Optional[str] = Field(default=None, description="OAuth token of the VCS connection")
    display_identifier: Optional[str] = Field(default=None)

    @classmethod
    def from_api(cls, attrs: Optional[Dict[str, Any]]) -> Optional["VcsRepo"]:
        """Parse the ``vcs-repo`` attribute; returns None for workspaces without VCS."""
        if not attrs or not attrs.get("identifier"):
            return None
        return cls(
            identifier=attrs["identifier"],
            branch=attrs.get("branch") or "",
            oauth_token_id=attrs.get("oauth-token-id"),
            display_identifier=attrs.get("display-identifier"),
        )


class Workspace(BaseOpsModel):
    """
    A Terraform Cloud workspace.

    Workspaces are read from the API everywhere except in the clone flow, where
    a new one is created from the attributes of a source workspace.
    """

    id: str = Field(..., description="Workspace ID assigned by Terraform Cloud (ws-...)")
    name: str = Field(..., description="Name, unique within the organization")
    organization: Optional[str] = None
    terraform_version: Optional[str] = None
    working_directory: Optional[str] = None
    vcs_repo: Optional[VcsRepo] = None
    auto_apply: bool = False
    locked: bool = False
    execution_mode: Optional[str] = None
    structured_run_output_enabled: bool = False
    environment: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "Workspace":
        """Parse a JSON:API workspace resource object."""
        attrs = resource.get("attributes") or {}
        return cls(
            id=resource["id"],
            name=attrs.get("name", ""),
            organization=relationship_id(resource, "organization"),
            terraform_version=attrs.get("terraform-version"),
            working_directory=attrs.get("working-directory"),
            vcs_repo=VcsRepo.from_api(attrs.get("vcs-repo")),
            auto_apply=bool(attrs.get("auto-apply", False)),
            locked=bool(attrs.get("locked", False)),
            execution_mode=attrs.get("execution-mode"),
            structured_run_output_enabled=bool(attrs.get("structured-run-output-enabled", False)),
            environment=attrs.get("environment"),
            created_at=attrs.get("created-at"),
        )

    @property
    def vcs_token_id(self) -> Optional[str]:
        """OAuth token ID of the VCS binding, if any."""
        return self.vcs_repo.oauth_token_id if self.vcs_repo else None

    def attribute_by_label(self, label: str) -> str:
        """
        Get a listable attribute as a string.

        Args:
            label: Attribute label, e.g. 'terraform-version' or 'vcs-repo.oauth-token-id'

        Returns:
            The attribute value rendered as a string

        Raises:
            InvalidSpecificationError: If the label is not a known attribute
        """
        getter = WORKSPACE_LIST_ATTRIBUTES.get(label.strip().lower())
        if getter is None:
            raise InvalidSpecificationError(f"Attribute label not valid: {label}")
        value = getter(self)
        if value is None:
            return ""
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)


def _vcs(attr: str) -> Callable[[Workspace], Any]:
    def getter(ws: Workspace) -> Any:
        return getattr(ws.vcs_repo, attr) if ws.vcs_repo else None
    return getter


WORKSPACE_LIST_ATTRIBUTES: Dict[str, Callable[[Workspace], Any]] = {
    "id": lambda ws: ws.id,
    "name": lambda ws: ws.name,
    "auto-apply": lambda ws: ws.auto_apply,
    "created-at": lambda ws: ws.created_at,
    "environment": lambda ws: ws.environment,
    "execution-mode": lambda ws: ws.execution_mode,
    "locked": lambda ws: ws.locked,
    "structured-run-output-enabled": lambda ws: ws.structured_run_output_enabled,
    "terraform-version": lambda ws: ws.terraform_version,
    "working-directory": lambda ws: ws.working_directory,
    "vcs-repo.identifier": _vcs("identifier"),
    "vcs-repo.branch": _vcs("branch"),
    "vcs-repo.display-identifier": _vcs("display_identifier"),
    "vcs-repo.oauth-token-id": _vcs("oauth_token_id"),
}

# Deprecated spellings kept for old scripts
WORKSPACE_LIST_ATTRIBUTES_DEPRECATED: Dict[str, str] = {
    "createdat": "created-at",
    "terraformversion": "terraform-version",
    "vcsrepo": "vcs-repo.identifier",
    "workingdirectory": "working-directory",
}

for _old, _new in WORKSPACE_LIST_ATTRIBUTES_DEPRECATED.items():
    WORKSPACE_LIST_ATTRIBUTES[_old] = WORKSPACE_LIST_ATTRIBUTES[_new]


# =============================================================================
# ATTRIBUTE UPDATES
# =============================================================================

def parse_attribute_value(value: str) -> Any:
    """
    Convert a command-line value to its JSON type.

    'null' becomes None, integers and 'true'/'false' are converted, anything
    else stays a string.
    """
    if value == "null":
        return None
    try:
        return int(value)
    except ValueError:
        pass
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    return value


def _as_bool(value: str) -> bool:
    parsed = parse_attribute_value(value)
    if not isinstance(parsed, bool):
        raise InvalidSpecificationError(f"expected 'true' or 'false', got '{value}'")
    return parsed


def _as_str(value: str) -> Optional[str]:
    return None if value == "null" else value


# Attribute name -> parser producing the JSON value sent in data.attributes
WORKSPACE_UPDATE_ATTRIBUTES: Dict[str, Callable[[str], Any]] = {
    "terraform-version": _as_str,
    "working-directory": _as_str,
    "description": _as_str,
    "execution-mode": _as_str,
    "auto-apply": _as_bool,
    "allow-destroy-plan": _as_bool,
    "file-triggers-enabled": _as_bool,
    "global-remote-state": _as_bool,
    "queue-all-runs": _as_bool,
    "speculative-enabled": _as_bool,
    "structured-run-output-enabled": _as_bool,
}


def build_attribute_update(attribute: str, value: str) -> Dict[str, Any]:
    """
    Build the ``data.attributes`` body for a single-attribute workspace update.

    Raises:
        InvalidSpecificationError: If the attribute is unknown or the value has the wrong type
    """
    parser = WORKSPACE_UPDATE_ATTRIBUTES.get(attribute)
    if parser is None:
        raise InvalidSpecificationError(
            f"'{attribute}' is not an updatable workspace attribute. "
            f"Available options: {', '.join(sorted(WORKSPACE_UPDATE_ATTRIBUTES))}"
        )
    return {attribute: parser(value)}


def workspace_names(workspaces: List[Workspace]) -> str:
    """Render a workspace list for log and console messages."""
    if not workspaces:
        return ""
    if len(workspaces) == 1:
        return f"workspace '{workspaces[0].name}'"
    return "workspaces: " + ", ".join(ws.name for ws in workspaces)
