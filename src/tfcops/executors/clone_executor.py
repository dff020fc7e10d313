"""
Clone executor (Clone Orchestrator).

Creates a new workspace that replicates a source workspace: attributes, VCS
binding, variables, and (within the same account) variable sets and team
access. Cloning to a different account creates the destination through a
second API client scoped to the destination token and can hand off state
migration to Terraform.

The sequence is linear and not transactional. When a step fails, the steps
before it are left in place and the error names the step, so the operator can
finish the clone by hand.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from tfcops.api import TfcApiV2, WorkspaceApi
from tfcops.context import ClientContext
from tfcops.errors import CloneStepError, ConfigurationError
from tfcops.models import DEFAULT_PLACEHOLDER, CloneSpecification, Variable, Workspace
from tfcops.state_migration import TerraformStateMigrator

from .base import BaseExecutor, ExecutionResult, OperationType
from .team_access_executor import TeamAccessExecutor
from .variable_executor import VariableExecutor
from .variable_set_executor import VariableSetExecutor
from .workspace_executor import WorkspaceExecutor

logger = logging.getLogger(__name__)

R = TypeVar('R')


@dataclass
class CloneResult:
    """Outcome of a clone."""

    workspace: Optional[Workspace]  # None in dry-run mode
    sensitive_vars: List[str] = field(default_factory=list)  # keys to re-enter by hand
    results: List[ExecutionResult] = field(default_factory=list)


def transform_variables(variables: List[Variable], copy_variables: bool) -> Tuple[List[Variable], List[str]]:
    """
    Prepare source variables for creation on the destination.

    Without ``copy_variables`` every value becomes the placeholder. With it,
    values are copied except hidden ones, which cannot be read back: those get
    the placeholder too and their keys are returned for manual follow-up.

    Returns:
        (variables to create, keys of hidden variables)
    """
    prepared: List[Variable] = []
    sensitive_vars: List[str] = []
    for var in variables:
        if var.is_hidden:
            sensitive_vars.append(var.key)
        value = var.value if copy_variables and not var.is_hidden else DEFAULT_PLACEHOLDER
        prepared.append(var.model_copy(update={"id": None, "value": value}))
    return prepared, sensitive_vars


def destination_attributes(source: Workspace, name: str, vcs_token_id: Optional[str]) -> Dict[str, Any]:
    """Create-workspace attributes copied from ``source``; the VCS binding needs a token."""
    attrs: Dict[str, Any] = {"name": name}
    if source.terraform_version:
        attrs["terraform-version"] = source.terraform_version
    if source.working_directory is not None:
        attrs["working-directory"] = source.working_directory
    if vcs_token_id and source.vcs_repo:
        attrs["vcs-repo"] = {
            "identifier": source.vcs_repo.identifier,
            "oauth-token-id": vcs_token_id,
            "branch": source.vcs_repo.branch,
        }
    elif source.vcs_repo:
        logger.warning(f"Workspace '{source.name}' has a VCS repo but no OAuth token; cloning without VCS")
    return attrs


class CloneExecutor(BaseExecutor[CloneSpecification]):
    """
    Executor for workspace clones.

    Example:
        ```python
        executor = CloneExecutor(api)
        result = executor.clone(CloneSpecification(
            organization="acme", source_workspace="app-prod", new_workspace="app-staging",
        ))
        print(result.sensitive_vars)
        ```
    """

    def __init__(
        self,
        api: WorkspaceApi,
        dry_run: bool = False,
        destination_api: Optional[WorkspaceApi] = None,
        source_context: Optional[ClientContext] = None,
        destination_context: Optional[ClientContext] = None,
        state_migrator: Optional[TerraformStateMigrator] = None,
    ):
        """
        Initialize the executor.

        Args:
            api: API of the source account
            dry_run: If True, only show what would be done
            destination_api: API of the destination account (cross-account);
                built from ``destination_context`` when not given
            source_context: Source credentials, needed for state migration
            destination_context: Destination credentials (cross-account)
            state_migrator: Runs the terraform state handoff
        """
        super().__init__(api, dry_run=dry_run)
        self.destination_api = destination_api
        self.source_context = source_context
        self.destination_context = destination_context
        self.state_migrator = state_migrator

    def get_resource_type(self) -> str:
        """Get the resource type."""
        return "WORKSPACE_CLONE"

    def _step(self, step: str, spec: CloneSpecification, action: Callable[[], R]) -> R:
        """Run one clone step, wrapping any failure in a CloneStepError."""
        logger.info(f"Clone {spec.organization}/{spec.source_workspace}: {step}")
        try:
            return action()
        except CloneStepError:
            raise
        except Exception as e:
            logger.error(f"Clone step '{step}' failed: {e}")
            raise CloneStepError(step, spec.organization, spec.source_workspace, e) from e

    def _collect(self, *executors: BaseExecutor) -> None:
        for executor in executors:
            self.results.extend(executor.results)
            executor.results = []

    def _get_destination_api(self) -> WorkspaceApi:
        if self.destination_api is not None:
            return self.destination_api
        if self.destination_context is None:
            raise ConfigurationError("cross-account clone requires a destination API or destination context")
        self.destination_api = TfcApiV2.from_context(self.destination_context)
        return self.destination_api

    def clone(self, spec: CloneSpecification) -> CloneResult:
        """
        Clone ``spec.source_workspace`` to ``spec.new_workspace``.

        Returns:
            CloneResult with the new workspace and the keys of variables whose
            values must be re-entered

        Raises:
            CloneStepError: If any step fails; earlier steps are not undone
        """
        self.results = []
        workspaces = WorkspaceExecutor(self.api, dry_run=self.dry_run)

        # Resolve source
        source = self._step("read source workspace", spec,
                            lambda: workspaces.find_by_name(spec.organization, spec.source_workspace))
        source_vars = self._step("read source variables", spec,
                                 lambda: VariableExecutor(self.api).list_for_workspace(source.id))

        # Account policy
        if spec.different_destination_account:
            dest_org = spec.new_organization or ""
            vcs_token_id = spec.new_vcs_token_id
        else:
            dest_org = spec.organization
            vcs_token_id = source.vcs_token_id

        attributes = destination_attributes(source, spec.new_workspace, vcs_token_id)
        variables, sensitive_vars = transform_variables(source_vars, spec.copy_variables)
        if sensitive_vars:
            logger.info(f"Sensitive variables to re-enter by hand: {', '.join(sensitive_vars)}")

        if self.dry_run:
            self._result(
                OperationType.CREATE,
                f"{dest_org}/{spec.new_workspace}",
                f"Would clone {spec.organization}/{source.name} with {len(variables)} variable(s)",
                changes=attributes,
            )
            return CloneResult(workspace=None, sensitive_vars=sensitive_vars, results=list(self.results))

        if spec.different_destination_account:
            dest = self._clone_cross_account(spec, source, dest_org, attributes, variables)
        else:
            dest = self._clone_same_account(spec, source, dest_org, attributes, variables)

        logger.info(f"Cloned {spec.organization}/{source.name} to {dest_org}/{dest.name}")
        return CloneResult(workspace=dest, sensitive_vars=sensitive_vars, results=list(self.results))

    def _clone_same_account(
        self,
        spec: CloneSpecification,
        source: Workspace,
        dest_org: str,
        attributes: Dict[str, Any],
        variables: List[Variable],
    ) -> Workspace:
        workspaces = WorkspaceExecutor(self.api)
        varsets = VariableSetExecutor(self.api)
        store = VariableExecutor(self.api)
        teams = TeamAccessExecutor(self.api)
        try:
            dest = self._step("create workspace", spec, lambda: workspaces.create(dest_org, attributes))

            if spec.apply_variable_sets:
                self._step("copy variable sets", spec, lambda: varsets.copy_all(source.id, dest.id, dest.name))

            self._step("create variables", spec, lambda: store.create_all(dest.id, variables, dest.name))

            grants = self._step("read team access", spec, lambda: teams.list_for(source.id))
            self._step("grant team access", spec, lambda: teams.propagate(dest, grants))
        finally:
            self._collect(workspaces, varsets, store, teams)
        return dest

    def _clone_cross_account(
        self,
        spec: CloneSpecification,
        source: Workspace,
        dest_org: str,
        attributes: Dict[str, Any],
        variables: List[Variable],
    ) -> Workspace:
        dest_api = self._step("connect to destination account", spec, self._get_destination_api)
        workspaces = WorkspaceExecutor(dest_api)
        store = VariableExecutor(dest_api)
        try:
            dest = self._step("create workspace", spec, lambda: workspaces.create(dest_org, attributes))
            self._step("create variables", spec, lambda: store.create_all(dest.id, variables, dest.name))
        finally:
            self._collect(workspaces, store)

        if spec.copy_state:
            self._step("migrate state", spec, lambda: self._migrate_state(spec, source, dest_org, dest))
        return dest

    def _migrate_state(self, spec: CloneSpecification, source: Workspace, dest_org: str, dest: Workspace) -> None:
        if self.source_context is None or self.destination_context is None:
            raise ConfigurationError("state migration requires source and destination credentials")
        migrator = self.state_migrator or TerraformStateMigrator()
        start_time = self._start_timer()
        migrator.migrate(
            spec.organization,
            source.name,
            dest_org,
            dest.name,
            self.source_context.token,
            self.destination_context.token,
        )
        self._result(OperationType.UPDATE, f"{dest_org}/{dest.name}", "Migrated state", start_time)
