"""
Terraform Cloud resource models.

This package provides the Pydantic models for workspaces, variables, variable
sets, team access and run triggers, plus the operation specifications. The
models are organized into logical modules but are all exported from this
single interface for convenience.
"""

from .enums import (
    VariableCategory,
    AccessLevel,
    RunsPermission,
    VariablesPermission,
    StateVersionsPermission,
    SentinelMocksPermission,
    RunTriggerDirection,
)

from .base import (
    BaseOpsModel,
    relationship_id,
    resource_identifier,
)

from .workspaces import (
    VcsRepo,
    Workspace,
    WORKSPACE_LIST_ATTRIBUTES,
    WORKSPACE_UPDATE_ATTRIBUTES,
    build_attribute_update,
    parse_attribute_value,
    workspace_names,
)

from .variables import (
    Variable,
    SENSITIVE_SENTINEL,
    DEFAULT_PLACEHOLDER,
    REDACTION_MARKER,
    escape_hcl,
)

from .variable_sets import VariableSet
from .team_access import TeamAccessGrant
from .run_triggers import RunTrigger

from .specs import (
    BaseSpecification,
    CloneSpecification,
    VariableUpdateSpecification,
    WorkspaceUpdateSpecification,
    MIN_WORKSPACE_FILTER_LENGTH,
)

__all__ = [
    # Enums
    'VariableCategory',
    'AccessLevel',
    'RunsPermission',
    'VariablesPermission',
    'StateVersionsPermission',
    'SentinelMocksPermission',
    'RunTriggerDirection',
    # Base
    'BaseOpsModel',
    'relationship_id',
    'resource_identifier',
    # Workspaces
    'VcsRepo',
    'Workspace',
    'WORKSPACE_LIST_ATTRIBUTES',
    'WORKSPACE_UPDATE_ATTRIBUTES',
    'build_attribute_update',
    'parse_attribute_value',
    'workspace_names',
    # Variables
    'Variable',
    'SENSITIVE_SENTINEL',
    'DEFAULT_PLACEHOLDER',
    'REDACTION_MARKER',
    'escape_hcl',
    # Variable sets, team access, run triggers
    'VariableSet',
    'TeamAccessGrant',
    'RunTrigger',
    # Specifications
    'BaseSpecification',
    'CloneSpecification',
    'VariableUpdateSpecification',
    'WorkspaceUpdateSpecification',
    'MIN_WORKSPACE_FILTER_LENGTH',
]
