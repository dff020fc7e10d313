"""
Executor modules for applying changes to Terraform Cloud workspaces.
"""

from .base import BaseExecutor, ExecutionResult, OperationType
from .workspace_executor import WorkspaceExecutor
from .variable_executor import VariableExecutor
from .variable_set_executor import VariableSetExecutor
from .team_access_executor import TeamAccessExecutor
from .run_trigger_executor import RunTriggerExecutor
from .clone_executor import CloneExecutor, CloneResult, transform_variables, destination_attributes
from .variable_update_executor import VariableUpdateExecutor, NO_MATCH_MESSAGE

__all__ = [
    # Base classes
    'BaseExecutor',
    'ExecutionResult',
    'OperationType',

    # Resource executors
    'WorkspaceExecutor',
    'VariableExecutor',
    'VariableSetExecutor',
    'TeamAccessExecutor',
    'RunTriggerExecutor',

    # Orchestrators
    'CloneExecutor',
    'CloneResult',
    'transform_variables',
    'destination_attributes',
    'VariableUpdateExecutor',
    'NO_MATCH_MESSAGE',
]
