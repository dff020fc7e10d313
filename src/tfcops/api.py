"""
Workspace management API.

``WorkspaceApi`` is the capability set the executors depend on. ``TfcApiV2``
implements it against the Terraform Cloud / Enterprise v2 API through a
RemoteClient. Executors never build URLs themselves, so they can be exercised
against an in-memory implementation.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from urllib.parse import quote

from tfcops.client import RemoteClient
from tfcops.context import ClientContext
from tfcops.models import (
    RunTrigger,
    RunTriggerDirection,
    TeamAccessGrant,
    Variable,
    VariableSet,
    Workspace,
    resource_identifier,
)
from tfcops.models.run_triggers import create_payload as run_trigger_payload
from tfcops.models.variable_sets import apply_payload as variable_set_payload

logger = logging.getLogger(__name__)


class WorkspaceApi(ABC):
    """Operations on workspaces and the resources attached to them."""

    # Workspaces

    @abstractmethod
    def get_workspace(self, organization: str, name: str) -> Workspace:
        """Read a workspace by name; raises NotFoundError if absent."""

    @abstractmethod
    def list_workspaces(self, organization: str, search: Optional[str] = None) -> List[Workspace]:
        """List workspaces, optionally only those whose name contains ``search``."""

    @abstractmethod
    def create_workspace(self, organization: str, attributes: Dict[str, Any]) -> Workspace:
        """Create a workspace from JSON:API attributes."""

    @abstractmethod
    def update_workspace(self, workspace_id: str, attributes: Dict[str, Any]) -> Workspace:
        """Patch workspace attributes."""

    # Variables

    @abstractmethod
    def list_variables(self, workspace_id: str) -> List[Variable]:
        """List the variables of a workspace."""

    @abstractmethod
    def create_variable(self, workspace_id: str, variable: Variable) -> Variable:
        """Create a variable."""

    @abstractmethod
    def update_variable(self, workspace_id: str, variable: Variable) -> Variable:
        """Update a variable identified by ``variable.id``."""

    @abstractmethod
    def delete_variable(self, workspace_id: str, variable_id: str) -> None:
        """Delete a variable."""

    # Variable sets

    @abstractmethod
    def list_variable_sets(self, organization: str) -> List[VariableSet]:
        """List the variable sets of an organization."""

    @abstractmethod
    def list_workspace_variable_sets(self, workspace_id: str) -> List[VariableSet]:
        """List the variable sets applied to a workspace."""

    @abstractmethod
    def apply_variable_set(self, variable_set_id: str, workspace_ids: List[str]) -> None:
        """Apply a variable set to workspaces."""

    # Team access

    @abstractmethod
    def list_team_access(self, workspace_id: str) -> List[TeamAccessGrant]:
        """List team access grants on a workspace."""

    @abstractmethod
    def create_team_access(self, workspace_id: str, grant: TeamAccessGrant) -> TeamAccessGrant:
        """Grant a team access to a workspace."""

    # Remote state consumers

    @abstractmethod
    def list_remote_state_consumers(self, workspace_id: str) -> List[Workspace]:
        """List the workspaces allowed to read this workspace's state."""

    @abstractmethod
    def add_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        """Add remote state consumers."""

    @abstractmethod
    def replace_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        """Replace the full list of remote state consumers."""

    @abstractmethod
    def remove_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        """Remove remote state consumers."""

    # Run triggers

    @abstractmethod
    def list_run_triggers(self, workspace_id: str, direction: RunTriggerDirection) -> List[RunTrigger]:
        """List inbound or outbound run triggers of a workspace."""

    @abstractmethod
    def create_run_trigger(self, workspace_id: str, source_workspace_id: str) -> RunTrigger:
        """Create a run trigger sourced from another workspace."""


def _segment(value: str) -> str:
    return quote(value, safe="")


def _consumer_payload(consumer_ids: List[str]) -> Dict[str, Any]:
    return {"data": [resource_identifier("workspaces", ws_id) for ws_id in consumer_ids]}


class TfcApiV2(WorkspaceApi):
    """
    WorkspaceApi over the Terraform Cloud v2 REST API.

    Example:
        ```python
        api = TfcApiV2.from_context(ClientContext(token="..."))
        ws = api.get_workspace("acme", "app-prod")
        ```
    """

    def __init__(self, client: RemoteClient):
        self.client = client

    @classmethod
    def from_context(cls, context: ClientContext) -> "TfcApiV2":
        return cls(RemoteClient(context))

    @property
    def context(self) -> ClientContext:
        return self.client.context

    # =========================================================================
    # WORKSPACES
    # =========================================================================

    def get_workspace(self, organization: str, name: str) -> Workspace:
        data = self.client.get(f"/organizations/{_segment(organization)}/workspaces/{_segment(name)}")
        return Workspace.from_api(data["data"])

    def list_workspaces(self, organization: str, search: Optional[str] = None) -> List[Workspace]:
        params = {"search[name]": search} if search else None
        items = self.client.paginate(f"/organizations/{_segment(organization)}/workspaces", params)
        return [Workspace.from_api(item) for item in items]

    def create_workspace(self, organization: str, attributes: Dict[str, Any]) -> Workspace:
        body = {"data": {"type": "workspaces", "attributes": attributes}}
        data = self.client.post(f"/organizations/{_segment(organization)}/workspaces", body)
        return Workspace.from_api(data["data"])

    def update_workspace(self, workspace_id: str, attributes: Dict[str, Any]) -> Workspace:
        body = {"data": {"type": "workspaces", "attributes": attributes}}
        data = self.client.patch(f"/workspaces/{workspace_id}", body)
        return Workspace.from_api(data["data"])

    # =========================================================================
    # VARIABLES
    # =========================================================================

    def list_variables(self, workspace_id: str) -> List[Variable]:
        data = self.client.get(f"/workspaces/{workspace_id}/vars")
        return [Variable.from_api(item) for item in data.get("data") or []]

    def create_variable(self, workspace_id: str, variable: Variable) -> Variable:
        data = self.client.post(f"/workspaces/{workspace_id}/vars", variable.to_api())
        return Variable.from_api(data["data"])

    def update_variable(self, workspace_id: str, variable: Variable) -> Variable:
        data = self.client.patch(f"/workspaces/{workspace_id}/vars/{variable.id}", variable.to_api())
        return Variable.from_api(data["data"])

    def delete_variable(self, workspace_id: str, variable_id: str) -> None:
        self.client.delete(f"/workspaces/{workspace_id}/vars/{variable_id}")

    # =========================================================================
    # VARIABLE SETS
    # =========================================================================

    def list_variable_sets(self, organization: str) -> List[VariableSet]:
        items = self.client.paginate(f"/organizations/{_segment(organization)}/varsets")
        return [VariableSet.from_api(item) for item in items]

    def list_workspace_variable_sets(self, workspace_id: str) -> List[VariableSet]:
        items = self.client.paginate(f"/workspaces/{workspace_id}/varsets")
        return [VariableSet.from_api(item) for item in items]

    def apply_variable_set(self, variable_set_id: str, workspace_ids: List[str]) -> None:
        self.client.post(
            f"/varsets/{variable_set_id}/relationships/workspaces",
            variable_set_payload(workspace_ids),
        )

    # =========================================================================
    # TEAM ACCESS
    # =========================================================================

    def list_team_access(self, workspace_id: str) -> List[TeamAccessGrant]:
        items = self.client.paginate("/team-workspaces", {"filter[workspace][id]": workspace_id})
        return [TeamAccessGrant.from_api(item) for item in items]

    def create_team_access(self, workspace_id: str, grant: TeamAccessGrant) -> TeamAccessGrant:
        data = self.client.post("/team-workspaces", grant.to_api(workspace_id))
        return TeamAccessGrant.from_api(data["data"])

    # =========================================================================
    # REMOTE STATE CONSUMERS
    # =========================================================================

    def list_remote_state_consumers(self, workspace_id: str) -> List[Workspace]:
        items = self.client.paginate(f"/workspaces/{workspace_id}/relationships/remote-state-consumers")
        return [Workspace.from_api(item) for item in items]

    def add_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        self.client.post(
            f"/workspaces/{workspace_id}/relationships/remote-state-consumers",
            _consumer_payload(consumer_ids),
        )

    def replace_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        self.client.patch(
            f"/workspaces/{workspace_id}/relationships/remote-state-consumers",
            _consumer_payload(consumer_ids),
        )

    def remove_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        self.client.delete(
            f"/workspaces/{workspace_id}/relationships/remote-state-consumers",
            _consumer_payload(consumer_ids),
        )

    # =========================================================================
    # RUN TRIGGERS
    # =========================================================================

    def list_run_triggers(self, workspace_id: str, direction: RunTriggerDirection) -> List[RunTrigger]:
        items = self.client.paginate(
            f"/workspaces/{workspace_id}/run-triggers",
            {"filter[run-trigger][type]": RunTriggerDirection(direction).value},
        )
        return [RunTrigger.from_api(item) for item in items]

    def create_run_trigger(self, workspace_id: str, source_workspace_id: str) -> RunTrigger:
        data = self.client.post(
            f"/workspaces/{workspace_id}/run-triggers",
            run_trigger_payload(source_workspace_id),
        )
        return RunTrigger.from_api(data["data"])
