"""
In-memory WorkspaceApi for executor tests.

Every call is recorded in ``calls`` as ``(method_name, args)`` so tests can
assert that read-only runs made no mutating call. Failures are injected per
method through ``fail``.
"""

import itertools
from typing import Any, Dict, List, Optional, Set, Tuple

from tfcops.api import WorkspaceApi
from tfcops.errors import ApiError, NotFoundError
from tfcops.models import (
    RunTrigger,
    RunTriggerDirection,
    TeamAccessGrant,
    Variable,
    VariableSet,
    VcsRepo,
    Workspace,
)

MUTATING_CALLS = {
    "create_workspace",
    "update_workspace",
    "create_variable",
    "update_variable",
    "delete_variable",
    "apply_variable_set",
    "create_team_access",
    "add_remote_state_consumers",
    "replace_remote_state_consumers",
    "remove_remote_state_consumers",
    "create_run_trigger",
}


def api_error(method: str = "POST", status_code: int = 422, body: str = "unprocessable") -> ApiError:
    """An ApiError like the client raises for a rejected request."""
    return ApiError(method=method, url="https://app.terraform.io/api/v2/test", status_code=status_code,
                    reason="Unprocessable Entity", response_body=body)


class FakeWorkspaceApi(WorkspaceApi):
    """Dictionary-backed WorkspaceApi."""

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self.workspaces: Dict[str, Workspace] = {}  # id -> workspace
        self.variables: Dict[str, List[Variable]] = {}  # workspace id -> variables
        self.variable_sets: Dict[str, List[VariableSet]] = {}  # organization -> sets
        self.applied_sets: Dict[str, Set[str]] = {}  # set id -> workspace ids
        self.team_access: Dict[str, List[TeamAccessGrant]] = {}
        self.consumers: Dict[str, List[str]] = {}
        self.run_triggers: List[RunTrigger] = []
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.fail: Dict[str, Exception] = {}
        self.fail_variable_set_ids: Set[str] = set()
        self.fail_team_ids: Set[str] = set()

    # -------------------------------------------------------------------------
    # Helpers for tests
    # -------------------------------------------------------------------------

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if name in self.fail:
            raise self.fail[name]

    @property
    def mutations(self) -> List[Tuple[str, Tuple[Any, ...]]]:
        return [call for call in self.calls if call[0] in MUTATING_CALLS]

    def add_workspace(self, organization: str, name: str, **fields: Any) -> Workspace:
        ws = Workspace(id=fields.pop("id", None) or self._next_id("ws"), name=name,
                       organization=organization, **fields)
        self.workspaces[ws.id] = ws
        self.variables.setdefault(ws.id, [])
        return ws

    def add_variable(self, workspace: Workspace, key: str, value: str = "", **fields: Any) -> Variable:
        var = Variable(id=self._next_id("var"), key=key, value=value, **fields)
        self.variables.setdefault(workspace.id, []).append(var)
        return var

    def add_variable_set(self, organization: str, name: str, applied_to: Optional[List[Workspace]] = None) -> VariableSet:
        varset = VariableSet(id=self._next_id("varset"), name=name)
        self.variable_sets.setdefault(organization, []).append(varset)
        self.applied_sets[varset.id] = {ws.id for ws in applied_to or []}
        return varset

    def add_team_access(self, workspace: Workspace, grant: TeamAccessGrant) -> TeamAccessGrant:
        stored = grant.model_copy(update={"id": self._next_id("tws"), "workspace_id": workspace.id})
        self.team_access.setdefault(workspace.id, []).append(stored)
        return stored

    def variable_values(self, workspace: Workspace) -> Dict[str, str]:
        return {v.key: v.value for v in self.variables.get(workspace.id, [])}

    def by_name(self, organization: str, name: str) -> Optional[Workspace]:
        for ws in self.workspaces.values():
            if ws.organization == organization and ws.name == name:
                return ws
        return None

    # -------------------------------------------------------------------------
    # Workspaces
    # -------------------------------------------------------------------------

    def get_workspace(self, organization: str, name: str) -> Workspace:
        self._record("get_workspace", organization, name)
        ws = self.by_name(organization, name)
        if ws is None:
            raise NotFoundError(method="GET", url=f"/organizations/{organization}/workspaces/{name}",
                                status_code=404, reason="Not Found")
        return ws

    def list_workspaces(self, organization: str, search: Optional[str] = None) -> List[Workspace]:
        self._record("list_workspaces", organization, search)
        return [
            ws for ws in self.workspaces.values()
            if ws.organization == organization and (not search or search in ws.name)
        ]

    def create_workspace(self, organization: str, attributes: Dict[str, Any]) -> Workspace:
        self._record("create_workspace", organization, attributes)
        vcs = attributes.get("vcs-repo")
        return self.add_workspace(
            organization,
            attributes["name"],
            terraform_version=attributes.get("terraform-version"),
            working_directory=attributes.get("working-directory"),
            vcs_repo=VcsRepo(
                identifier=vcs["identifier"],
                branch=vcs.get("branch", ""),
                oauth_token_id=vcs.get("oauth-token-id"),
            ) if vcs else None,
        )

    def update_workspace(self, workspace_id: str, attributes: Dict[str, Any]) -> Workspace:
        self._record("update_workspace", workspace_id, attributes)
        ws = self.workspaces[workspace_id]
        fields = {name.replace("-", "_"): value for name, value in attributes.items()
                  if name.replace("-", "_") in Workspace.model_fields}
        updated = ws.model_copy(update=fields)
        self.workspaces[workspace_id] = updated
        return updated

    # -------------------------------------------------------------------------
    # Variables
    # -------------------------------------------------------------------------

    def list_variables(self, workspace_id: str) -> List[Variable]:
        self._record("list_variables", workspace_id)
        return list(self.variables.get(workspace_id, []))

    def create_variable(self, workspace_id: str, variable: Variable) -> Variable:
        self._record("create_variable", workspace_id, variable)
        created = variable.model_copy(update={"id": self._next_id("var")})
        self.variables.setdefault(workspace_id, []).append(created)
        return created

    def update_variable(self, workspace_id: str, variable: Variable) -> Variable:
        self._record("update_variable", workspace_id, variable)
        stored = self.variables.get(workspace_id, [])
        for i, existing in enumerate(stored):
            if existing.id == variable.id:
                stored[i] = variable
                return variable
        raise NotFoundError(method="PATCH", url=f"/workspaces/{workspace_id}/vars/{variable.id}",
                            status_code=404, reason="Not Found")

    def delete_variable(self, workspace_id: str, variable_id: str) -> None:
        self._record("delete_variable", workspace_id, variable_id)
        self.variables[workspace_id] = [v for v in self.variables.get(workspace_id, []) if v.id != variable_id]

    # -------------------------------------------------------------------------
    # Variable sets
    # -------------------------------------------------------------------------

    def list_variable_sets(self, organization: str) -> List[VariableSet]:
        self._record("list_variable_sets", organization)
        return list(self.variable_sets.get(organization, []))

    def list_workspace_variable_sets(self, workspace_id: str) -> List[VariableSet]:
        self._record("list_workspace_variable_sets", workspace_id)
        return [
            varset
            for sets in self.variable_sets.values()
            for varset in sets
            if workspace_id in self.applied_sets.get(varset.id, set())
        ]

    def apply_variable_set(self, variable_set_id: str, workspace_ids: List[str]) -> None:
        self._record("apply_variable_set", variable_set_id, workspace_ids)
        if variable_set_id in self.fail_variable_set_ids:
            raise api_error()
        self.applied_sets.setdefault(variable_set_id, set()).update(workspace_ids)

    # -------------------------------------------------------------------------
    # Team access
    # -------------------------------------------------------------------------

    def list_team_access(self, workspace_id: str) -> List[TeamAccessGrant]:
        self._record("list_team_access", workspace_id)
        return list(self.team_access.get(workspace_id, []))

    def create_team_access(self, workspace_id: str, grant: TeamAccessGrant) -> TeamAccessGrant:
        self._record("create_team_access", workspace_id, grant)
        if grant.team_id in self.fail_team_ids:
            raise api_error()
        return self.add_team_access(self.workspaces[workspace_id], grant)

    # -------------------------------------------------------------------------
    # Remote state consumers
    # -------------------------------------------------------------------------

    def list_remote_state_consumers(self, workspace_id: str) -> List[Workspace]:
        self._record("list_remote_state_consumers", workspace_id)
        return [self.workspaces[ws_id] for ws_id in self.consumers.get(workspace_id, [])]

    def add_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        self._record("add_remote_state_consumers", workspace_id, consumer_ids)
        current = self.consumers.setdefault(workspace_id, [])
        current.extend(ws_id for ws_id in consumer_ids if ws_id not in current)

    def replace_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        self._record("replace_remote_state_consumers", workspace_id, consumer_ids)
        self.consumers[workspace_id] = list(consumer_ids)

    def remove_remote_state_consumers(self, workspace_id: str, consumer_ids: List[str]) -> None:
        self._record("remove_remote_state_consumers", workspace_id, consumer_ids)
        self.consumers[workspace_id] = [
            ws_id for ws_id in self.consumers.get(workspace_id, []) if ws_id not in consumer_ids
        ]

    # -------------------------------------------------------------------------
    # Run triggers
    # -------------------------------------------------------------------------

    def list_run_triggers(self, workspace_id: str, direction: RunTriggerDirection) -> List[RunTrigger]:
        self._record("list_run_triggers", workspace_id, direction)
        if RunTriggerDirection(direction) == RunTriggerDirection.INBOUND:
            return [t for t in self.run_triggers if t.workspace_id == workspace_id]
        return [t for t in self.run_triggers if t.source_id == workspace_id]

    def create_run_trigger(self, workspace_id: str, source_workspace_id: str) -> RunTrigger:
        self._record("create_run_trigger", workspace_id, source_workspace_id)
        trigger = RunTrigger(
            id=self._next_id("rt"),
            source_id=source_workspace_id,
            source_name=self.workspaces[source_workspace_id].name,
            workspace_id=workspace_id,
            workspace_name=self.workspaces[workspace_id].name,
        )
        self.run_triggers.append(trigger)
        return trigger
