"""
Unit tests for VariableUpdateExecutor.
"""

from typing import List

import pytest

from tests.fixtures import FakeWorkspaceApi
from tfcops.errors import NotFoundError, PolicyViolationError
from tfcops.executors import NO_MATCH_MESSAGE, OperationType, VariableUpdateExecutor
from tfcops.models import VariableUpdateSpecification, Workspace


def make_spec(**overrides) -> VariableUpdateSpecification:
    fields = {
        "organization": "acme",
        "workspace": "app-prod",
        "search_string": "region",
        "new_value": "eu-west-1",
    }
    fields.update(overrides)
    return VariableUpdateSpecification(**fields)


def stored(fake_api: FakeWorkspaceApi, workspace: Workspace, key: str):
    return next(v for v in fake_api.variables[workspace.id] if v.key == key)


class TestUpdateByKey:
    """Tests for key searches."""

    def test_replaces_value(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """A matching key gets the new value."""
        results = VariableUpdateExecutor(fake_api).run(make_spec())

        assert results[0].operation == OperationType.UPDATE
        assert results[0].message == "Replaced the value of region from us-east-1 to eu-west-1"
        assert fake_api.variable_values(source_workspace)["region"] == "eu-west-1"

    def test_key_match_is_case_insensitive(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """Keys are compared without regard to case."""
        VariableUpdateExecutor(fake_api).run(make_spec(search_string="REGION"))

        assert fake_api.variable_values(source_workspace)["region"] == "eu-west-1"

    def test_key_match_is_complete(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """A partial key does not match."""
        results = VariableUpdateExecutor(fake_api).run(make_spec(search_string="reg"))

        assert results[0].operation == OperationType.NO_OP
        assert results[0].message == NO_MATCH_MESSAGE
        assert fake_api.mutations == []

    def test_replaced_value_is_literal(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """An HCL variable becomes a literal when replaced."""
        VariableUpdateExecutor(fake_api).run(make_spec(search_string="tags", new_value="none"))

        tags = stored(fake_api, source_workspace, "tags")
        assert tags.value == "none"
        assert tags.hcl is False

    def test_sensitive_flag_applied(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """The requested sensitive flag is applied and the new value is not shown."""
        results = VariableUpdateExecutor(fake_api).run(make_spec(sensitive=True))

        assert stored(fake_api, source_workspace, "region").sensitive is True
        assert results[0].message == "Replaced the value of region from us-east-1 to (sensitive)"

    def test_hidden_old_value_not_shown(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """Replacing a sensitive variable does not reveal anything."""
        results = VariableUpdateExecutor(fake_api).run(make_spec(search_string="db_password", new_value="new"))

        assert results[0].message == "Replaced the value of db_password from (sensitive) to new"

    def test_idempotent(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """Running twice leaves one variable with the new value."""
        executor = VariableUpdateExecutor(fake_api)

        executor.run(make_spec())
        executor.run(make_spec())

        regions = [v for v in fake_api.variables[source_workspace.id] if v.key == "region"]
        assert [v.value for v in regions] == ["eu-west-1"]


class TestValuesKeptVerbatim:
    """Tests that new values reach the API exactly as given."""

    def test_replace_keeps_whitespace(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """Leading and trailing whitespace survives a replace."""
        VariableUpdateExecutor(fake_api).run(make_spec(new_value="  padded value\n"))

        assert fake_api.variable_values(source_workspace)["region"] == "  padded value\n"

    def test_add_keeps_whitespace(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """Leading and trailing whitespace survives an add."""
        VariableUpdateExecutor(fake_api).run(
            make_spec(search_string="PAD", new_value="  padded value\n", add_if_missing=True),
        )

        assert stored(fake_api, source_workspace, "PAD").value == "  padded value\n"

    def test_value_search_is_not_trimmed(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """A padded search string does not match an unpadded value."""
        results = VariableUpdateExecutor(fake_api).run(make_spec(search_string=" us-east-1 ", search_on_value=True))

        assert results[0].operation == OperationType.NO_OP
        assert fake_api.mutations == []


class TestUpdateByValue:
    """Tests for value searches."""

    def test_matches_value_case_insensitively(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """The variable whose value equals the search string is updated."""
        results = VariableUpdateExecutor(fake_api).run(
            make_spec(search_string="US-EAST-1", search_on_value=True),
        )

        assert results[0].message == "Replaced the value of region from us-east-1 to eu-west-1"
        assert fake_api.variable_values(source_workspace)["region"] == "eu-west-1"

    def test_hidden_values_never_match(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """A sensitive variable is never matched by value."""
        fake_api.add_variable(source_workspace, "secret", "hunter2", sensitive=True)

        results = VariableUpdateExecutor(fake_api).run(make_spec(search_string="hunter2", search_on_value=True))

        assert results[0].operation == OperationType.NO_OP
        assert fake_api.mutations == []


class TestAddIfMissing:
    """Tests for add_if_missing."""

    def test_adds_missing_key(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """A missing key is created with the new value."""
        results = VariableUpdateExecutor(fake_api).run(
            make_spec(search_string="size", new_value="m5.large", add_if_missing=True),
        )

        assert results[0].operation == OperationType.CREATE
        assert results[0].message == "Added variable size = m5.large"
        size = stored(fake_api, source_workspace, "size")
        assert size.value == "m5.large"
        assert size.hcl is False

    def test_adds_sensitive_variable(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """A sensitive addition does not show its value."""
        results = VariableUpdateExecutor(fake_api).run(
            make_spec(search_string="token", new_value="abc", add_if_missing=True, sensitive=True),
        )

        assert results[0].message == "Added variable token = (sensitive)"
        assert stored(fake_api, source_workspace, "token").sensitive is True

    def test_existing_key_is_a_collision(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """add_if_missing on an existing key fails and changes nothing."""
        with pytest.raises(PolicyViolationError, match="already exists with key region on workspace 'app-prod'"):
            VariableUpdateExecutor(fake_api).run(make_spec(add_if_missing=True))

        assert fake_api.mutations == []
        assert fake_api.variable_values(source_workspace)["region"] == "us-east-1"

    def test_lenient_collision_is_skipped(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace) -> None:
        """With lenient collisions the workspace is skipped instead."""
        results = VariableUpdateExecutor(fake_api, lenient_collisions=True).run(make_spec(add_if_missing=True))

        assert results[0].operation == OperationType.SKIPPED
        assert results[0].success
        assert fake_api.mutations == []


class TestDryRun:
    """Tests for read-only runs."""

    @pytest.mark.parametrize("overrides,operation", [
        ({}, OperationType.UPDATE),
        ({"search_string": "size", "add_if_missing": True}, OperationType.CREATE),
        ({"search_string": "missing"}, OperationType.NO_OP),
    ])
    def test_same_decision_without_writes(self, fake_api: FakeWorkspaceApi, source_workspace: Workspace,
                                          overrides: dict, operation: OperationType) -> None:
        """Dry run reports the live decision and message but writes nothing."""
        dry = VariableUpdateExecutor(fake_api, dry_run=True).run(make_spec(**overrides))[0]
        assert fake_api.mutations == []

        live = VariableUpdateExecutor(fake_api).run(make_spec(**overrides))[0]

        assert dry.operation == live.operation == operation
        assert dry.message == live.message
        assert dry.dry_run and not live.dry_run


class TestAllWorkspaces:
    """Tests for organization-wide runs."""

    @pytest.fixture
    def workspaces(self, fake_api: FakeWorkspaceApi) -> List[Workspace]:
        result = []
        for name in ("app-prod", "app-stg", "network"):
            ws = fake_api.add_workspace("acme", name)
            fake_api.add_variable(ws, "region", "us-east-1")
            result.append(ws)
        return result

    def test_every_workspace_processed(self, fake_api: FakeWorkspaceApi, workspaces: List[Workspace]) -> None:
        """Without a workspace name, every workspace is processed."""
        results = VariableUpdateExecutor(fake_api).run(make_spec(workspace=None))

        assert [r.resource_name for r in results] == ["app-prod", "app-stg", "network"]
        assert all(fake_api.variable_values(ws)["region"] == "eu-west-1" for ws in workspaces)

    def test_confirmation_per_workspace(self, fake_api: FakeWorkspaceApi, workspaces: List[Workspace]) -> None:
        """A declined workspace is skipped and left unchanged."""
        asked: List[str] = []

        def confirm(name: str) -> bool:
            asked.append(name)
            return name != "network"

        results = VariableUpdateExecutor(fake_api).run(make_spec(workspace=None), confirm=confirm)

        assert asked == ["app-prod", "app-stg", "network"]
        assert results[2].operation == OperationType.SKIPPED
        assert fake_api.variable_values(workspaces[2])["region"] == "us-east-1"

    def test_single_workspace_not_confirmed(self, fake_api: FakeWorkspaceApi, workspaces: List[Workspace]) -> None:
        """A named workspace is processed without asking."""
        def confirm(name: str) -> bool:
            raise AssertionError("should not ask")

        results = VariableUpdateExecutor(fake_api).run(make_spec(workspace="network"), confirm=confirm)

        assert results[0].operation == OperationType.UPDATE

    def test_continue_after_collision(self, fake_api: FakeWorkspaceApi, workspaces: List[Workspace]) -> None:
        """With continue_on_error a collision is recorded and the next workspace is processed."""
        other = fake_api.add_workspace("acme", "empty")
        executor = VariableUpdateExecutor(fake_api, continue_on_error=True)

        results = executor.run(make_spec(workspace=None, add_if_missing=True))

        assert [r.success for r in results] == [False, False, False, True]
        assert "Refused" in results[0].message
        assert fake_api.variable_values(other) == {"region": "eu-west-1"}

    def test_unknown_workspace(self, fake_api: FakeWorkspaceApi) -> None:
        """A named workspace that does not exist is an error."""
        with pytest.raises(NotFoundError):
            VariableUpdateExecutor(fake_api).run(make_spec(workspace="ghost"))
