"""
Enum definitions for Terraform Cloud resources.

This module contains all enumeration types used throughout the models.
"""

from enum import Enum


class VariableCategory(str, Enum):
    """Where a workspace variable is exposed during a run."""
    TERRAFORM = "terraform"  # Terraform input variable
    ENV = "env"  # Shell environment variable


class AccessLevel(str, Enum):
    """Team access levels on a workspace."""
    READ = "read"
    PLAN = "plan"
    WRITE = "write"
    ADMIN = "admin"
    CUSTOM = "custom"  # Fine-grained permissions set individually


class RunsPermission(str, Enum):
    """Run permission for a custom team access grant."""
    READ = "read"
    PLAN = "plan"
    APPLY = "apply"


class VariablesPermission(str, Enum):
    """Variable permission for a custom team access grant."""
    NONE = "none"
    READ = "read"
    WRITE = "write"


class StateVersionsPermission(str, Enum):
    """State version permission for a custom team access grant."""
    NONE = "none"
    READ_OUTPUTS = "read-outputs"
    READ = "read"
    WRITE = "write"


class SentinelMocksPermission(str, Enum):
    """Sentinel mock permission for a custom team access grant."""
    NONE = "none"
    READ = "read"


class RunTriggerDirection(str, Enum):
    """Which side of a run trigger relationship to list."""
    INBOUND = "inbound"  # Workspaces that trigger this one
    OUTBOUND = "outbound"  # Workspaces this one triggers
