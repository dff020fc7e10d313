"""Test fixtures for tfc-ops."""

from .fake_api import MUTATING_CALLS, FakeWorkspaceApi, api_error
from .model_factories import (
    make_grant,
    make_variable,
    make_varset,
    make_vcs_repo,
    make_workspace,
    team_access_resource,
    variable_resource,
    workspace_resource,
)

__all__ = [
    "FakeWorkspaceApi",
    "MUTATING_CALLS",
    "api_error",
    "make_workspace",
    "make_vcs_repo",
    "make_variable",
    "make_varset",
    "make_grant",
    "workspace_resource",
    "variable_resource",
    "team_access_resource",
]
