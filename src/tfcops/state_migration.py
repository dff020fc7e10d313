"""
State migration handoff.

Copies a workspace's Terraform state to a workspace in another account by
running ``terraform init`` twice in the current directory: once against the
source backend, then against the destination backend, answering "yes" to
Terraform's offer to copy the existing state.

The directory must contain a backend configuration whose ``name`` is supplied
through ``-backend-config``. Tokens are passed to each subprocess through its
own environment; the process environment is left untouched.
"""

import logging
import os
import shutil
import subprocess
from pathlib import Path
from typing import Dict, List, Optional

from tfcops.errors import StateMigrationError

logger = logging.getLogger(__name__)

TOKEN_ENV_VAR = "ATLAS_TOKEN"


class TerraformStateMigrator:
    """Runs the two ``terraform init`` calls that move state between backends."""

    def __init__(self, working_dir: Optional[Path] = None, terraform_bin: str = "terraform"):
        self.working_dir = Path(working_dir) if working_dir else Path.cwd()
        self.terraform_bin = terraform_bin

    def _init_command(self, organization: str, workspace: str) -> List[str]:
        return [self.terraform_bin, "init", f"-backend-config=name={organization}/{workspace}"]

    def _env(self, token: str) -> Dict[str, str]:
        env = dict(os.environ)
        env[TOKEN_ENV_VAR] = token
        return env

    def _run(self, command: List[str], token: str, stdin: Optional[str] = None) -> None:
        logger.info(f"Running {' '.join(command)}")
        result = subprocess.run(
            command,
            cwd=self.working_dir,
            env=self._env(token),
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            raise StateMigrationError(" ".join(command), result.returncode, result.stderr)

    def migrate(
        self,
        source_org: str,
        source_name: str,
        dest_org: str,
        dest_name: str,
        source_token: str,
        dest_token: str,
    ) -> None:
        """
        Move state from ``source_org/source_name`` to ``dest_org/dest_name``.

        Raises:
            StateMigrationError: If either ``terraform init`` exits non-zero
        """
        stale = self.working_dir / ".terraform"
        if stale.exists():
            logger.debug(f"Removing {stale}")
            shutil.rmtree(stale)

        self._run(self._init_command(source_org, source_name), source_token)
        self._run(self._init_command(dest_org, dest_name), dest_token, stdin="yes\n")
        logger.info(f"Migrated state from {source_org}/{source_name} to {dest_org}/{dest_name}")
