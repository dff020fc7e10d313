"""
Operation specifications.

A specification captures one operator request (clone a workspace, update a
variable, update a workspace attribute). Contradictory or incomplete requests
are rejected when the specification is constructed, so nothing reaches the
API until the request is known to be coherent.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from pydantic import ConfigDict, Field, ValidationError, model_validator
from typing_extensions import Self

from tfcops.errors import InvalidSpecificationError

from .base import BaseOpsModel
from .workspaces import WORKSPACE_UPDATE_ATTRIBUTES, build_attribute_update

logger = logging.getLogger(__name__)

# Shortest filter accepted by bulk workspace updates
MIN_WORKSPACE_FILTER_LENGTH = 3


class BaseSpecification(BaseOpsModel):
    """Base for specifications; validation failures raise InvalidSpecificationError."""

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as e:
            messages = "; ".join(_error_message(err) for err in e.errors())
            raise InvalidSpecificationError(f"{type(self).__name__}: {messages}") from e


def _error_message(err: Any) -> str:
    loc = ".".join(str(part) for part in err.get("loc", ()))
    msg = str(err.get("msg", ""))
    # pydantic prefixes messages of ValueErrors raised in validators
    msg = msg.replace("Value error, ", "", 1)
    return f"{loc}: {msg}" if loc else msg


class CloneSpecification(BaseSpecification):
    """
    Request to clone a workspace.

    Same-account clones reuse the source workspace's VCS binding. Cloning to a
    different account (another organization, usually with another token) needs
    an explicit destination organization and VCS OAuth token, because OAuth
    tokens are scoped to one organization.

    Example:
        ```python
        spec = CloneSpecification(
            organization="acme",
            source_workspace="app-prod",
            new_workspace="app-staging",
            copy_variables=True,
        )
        ```
    """

    organization: str = Field(..., min_length=1)
    source_workspace: str = Field(..., min_length=1)
    new_workspace: str = Field(..., min_length=1)
    new_organization: Optional[str] = Field(default=None, description="Destination organization (cross-account)")
    new_vcs_token_id: Optional[str] = Field(default=None, description="Destination VCS OAuth token (cross-account)")
    copy_state: bool = Field(default=False, description="Hand off state migration (cross-account only)")
    copy_variables: bool = Field(default=False, description="Copy values instead of placeholders")
    apply_variable_sets: bool = Field(default=False, description="Apply the source's variable sets (same account only)")
    different_destination_account: bool = False

    @model_validator(mode='after')
    def validate_destination_account(self) -> Self:
        """Cross-account clones must name the destination organization and VCS token."""
        if self.different_destination_account:
            missing = [
                name for name in ("new_organization", "new_vcs_token_id")
                if not getattr(self, name)
            ]
            if missing:
                raise ValueError(
                    "cloning to a different account requires "
                    + " and ".join(missing)
                )
        elif self.copy_state:
            logger.info("copy_state only applies to cross-account clones and will be ignored")
        return self

    @property
    def destination_organization(self) -> str:
        """Organization the new workspace is created in."""
        if self.different_destination_account and self.new_organization:
            return self.new_organization
        return self.organization


class VariableUpdateSpecification(BaseSpecification):
    """
    Request to update (or add) one variable on one or all workspaces.

    ``search_string`` is matched against keys, or against values when
    ``search_on_value`` is set. ``add_if_missing`` creates the variable with
    ``search_string`` as its key when no key matches; it cannot be combined
    with a value search because a value is not a key.
    """

    # Values are sent exactly as given
    model_config = ConfigDict(str_strip_whitespace=False)

    organization: str = Field(..., min_length=1)
    workspace: Optional[str] = Field(default=None, description="Workspace name; None means every workspace")
    search_string: str = Field(..., min_length=1)
    new_value: str = Field(default="")
    search_on_value: bool = False
    add_if_missing: bool = False
    sensitive: bool = False

    @model_validator(mode='after')
    def validate_search_mode(self) -> Self:
        """add_if_missing and search_on_value are mutually exclusive."""
        if self.add_if_missing and self.search_on_value:
            raise ValueError("add_if_missing cannot be used with search_on_value")
        return self


class WorkspaceUpdateSpecification(BaseSpecification):
    """Request to set one attribute on every workspace matching a filter."""

    organization: str = Field(..., min_length=1)
    workspace_filter: str = Field(..., min_length=MIN_WORKSPACE_FILTER_LENGTH)
    attribute: str = Field(..., min_length=1)
    value: str

    @model_validator(mode='after')
    def validate_attribute(self) -> Self:
        """The attribute must be updatable and the value must parse for it."""
        if self.attribute not in WORKSPACE_UPDATE_ATTRIBUTES:
            raise ValueError(
                f"'{self.attribute}' is not an updatable workspace attribute. "
                f"Available options: {', '.join(sorted(WORKSPACE_UPDATE_ATTRIBUTES))}"
            )
        self.attributes()
        return self

    def attributes(self) -> dict:
        """The ``data.attributes`` body sent to each matching workspace."""
        return build_attribute_update(self.attribute, self.value)
