"""
Shared pytest fixtures for tfc-ops tests.

Provides an in-memory API seeded with a source workspace, and environment
isolation so no test reads the developer's real token or config files.
"""

from pathlib import Path
from typing import Generator

import pytest

from tests.fixtures import FakeWorkspaceApi, make_vcs_repo
from tfcops.models import Workspace

ENV_VARS = ("ATLAS_TOKEN", "ATLAS_TOKEN_DESTINATION", "TFC_OPS_DEBUG", "TFC_OPS_HOSTNAME")


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[Path, None, None]:
    """
    Autouse fixture that hides the developer's token and config files.

    HOME points at an empty temporary directory, so ``~/.tfc-ops.yaml`` and
    ``~/.terraform.d/credentials.tfrc.json`` do not exist unless a test writes
    them.
    """
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    yield tmp_path


@pytest.fixture
def fake_api() -> FakeWorkspaceApi:
    """An empty in-memory API."""
    return FakeWorkspaceApi()


@pytest.fixture
def source_workspace(fake_api: FakeWorkspaceApi) -> Workspace:
    """
    Workspace 'app-prod' in 'acme' with a VCS binding and three variables:
    a plain literal, an HCL map and a sensitive secret.
    """
    ws = fake_api.add_workspace(
        "acme",
        "app-prod",
        terraform_version="1.5.7",
        working_directory="envs/prod",
        vcs_repo=make_vcs_repo(),
    )
    fake_api.add_variable(ws, "region", "us-east-1")
    fake_api.add_variable(ws, "tags", '{ team = "ops" }', hcl=True)
    fake_api.add_variable(ws, "db_password", "", sensitive=True)
    return ws
