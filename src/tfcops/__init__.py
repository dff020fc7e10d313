"""
tfc-ops: bulk operations for Terraform Cloud / Enterprise.

Clone workspaces, add or update variables across many workspaces, apply
variable sets and update workspace attributes, with a read-only mode that
reports every decision without changing anything.

Example:
    ```python
    from tfcops import ClientContext, TfcApiV2, VariableUpdateExecutor, VariableUpdateSpecification

    api = TfcApiV2.from_context(ClientContext(token="..."))
    spec = VariableUpdateSpecification(
        organization="acme", workspace="app-prod", search_string="region", new_value="eu-west-1",
    )
    for result in VariableUpdateExecutor(api, dry_run=True).run(spec):
        print(result)
    ```
"""

__version__ = "0.1.0"

from tfcops.api import TfcApiV2, WorkspaceApi
from tfcops.client import RemoteClient
from tfcops.config import OpsSettings, load_settings
from tfcops.context import ClientContext
from tfcops.errors import (
    ApiError,
    CloneStepError,
    ConfigurationError,
    InvalidSpecificationError,
    NotFoundError,
    PartialFailureError,
    PolicyViolationError,
    ReadOnlyModeError,
    TransportError,
    StateMigrationError,
    TfcOpsError,
)
from tfcops.executors import (
    CloneExecutor,
    CloneResult,
    ExecutionResult,
    OperationType,
    RunTriggerExecutor,
    TeamAccessExecutor,
    VariableExecutor,
    VariableSetExecutor,
    VariableUpdateExecutor,
    WorkspaceExecutor,
)
from tfcops.models import (
    CloneSpecification,
    TeamAccessGrant,
    Variable,
    VariableSet,
    VariableUpdateSpecification,
    Workspace,
    WorkspaceUpdateSpecification,
)

__all__ = [
    '__version__',
    # API
    'ClientContext',
    'RemoteClient',
    'WorkspaceApi',
    'TfcApiV2',
    'OpsSettings',
    'load_settings',
    # Errors
    'TfcOpsError',
    'ApiError',
    'NotFoundError',
    'ReadOnlyModeError',
    'TransportError',
    'InvalidSpecificationError',
    'ConfigurationError',
    'PolicyViolationError',
    'PartialFailureError',
    'CloneStepError',
    'StateMigrationError',
    # Executors
    'ExecutionResult',
    'OperationType',
    'WorkspaceExecutor',
    'VariableExecutor',
    'VariableSetExecutor',
    'TeamAccessExecutor',
    'RunTriggerExecutor',
    'CloneExecutor',
    'CloneResult',
    'VariableUpdateExecutor',
    # Models
    'Workspace',
    'Variable',
    'VariableSet',
    'TeamAccessGrant',
    'CloneSpecification',
    'VariableUpdateSpecification',
    'WorkspaceUpdateSpecification',
]
