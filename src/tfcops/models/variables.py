"""
Workspace variable models.

A variable is a key/value pair owned by exactly one workspace. Sensitive
variables are write-only: once set, the API never returns their value again.
Depending on the server version, the value reads back either empty or as the
sentinel string ``TF_ENTERPRISE_SENSITIVE_VAR``; both are treated as "unknown".
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import ConfigDict, Field

from .base import BaseOpsModel
from .enums import VariableCategory

logger = logging.getLogger(__name__)

# Value the API returns in place of a sensitive variable's real value
SENSITIVE_SENTINEL = "TF_ENTERPRISE_SENSITIVE_VAR"

# Value written to a cloned workspace when the real value is not copied
DEFAULT_PLACEHOLDER = "REPLACE_THIS_VALUE"

# Shown in place of a hidden value in listings
REDACTION_MARKER = "(sensitive)"


def escape_hcl(value: str) -> str:
    """Escape double quotes and newlines so an HCL value survives transmission."""
    return value.replace('"', '\\"').replace("\n", "\\n")


class Variable(BaseOpsModel):
    """
    A Terraform Cloud workspace variable.

    Example:
        ```python
        var = Variable(key="region", value="us-east-1")
        var = Variable(key="tags", value='{ team = "ops" }', hcl=True)
        ```
    """

    # Values are sent exactly as given
    model_config = ConfigDict(str_strip_whitespace=False)

    id: Optional[str] = Field(default=None, description="Variable ID (var-...), None until created")
    key: str = Field(..., min_length=1)
    value: str = Field(default="")
    description: str = Field(default="")
    category: VariableCategory = Field(default=VariableCategory.TERRAFORM)
    hcl: bool = Field(default=False, description="Value is parsed as an HCL expression")
    sensitive: bool = Field(default=False, description="Value is write-only")

    @classmethod
    def from_api(cls, resource: Dict[str, Any]) -> "Variable":
        """Parse a JSON:API ``vars`` resource object."""
        attrs = resource.get("attributes") or {}
        return cls(
            id=resource.get("id"),
            key=attrs["key"],
            value=attrs.get("value") or "",
            description=attrs.get("description") or "",
            category=VariableCategory(attrs.get("category") or VariableCategory.TERRAFORM.value),
            hcl=bool(attrs.get("hcl", False)),
            sensitive=bool(attrs.get("sensitive", False)),
        )

    @property
    def is_hidden(self) -> bool:
        """True when the real value cannot be read back from the API."""
        return self.sensitive or self.value == SENSITIVE_SENTINEL

    def escaped_value(self) -> str:
        """The value as transmitted: HCL values are escaped, literals are not."""
        if not self.hcl:
            return self.value
        return escape_hcl(self.value)

    def display_value(self) -> str:
        """The value safe for output; hidden values are replaced by a marker."""
        return REDACTION_MARKER if self.is_hidden else self.value

    def redacted(self) -> "Variable":
        """Copy of this variable whose value is safe to display."""
        return self.model_copy(update={"value": self.display_value()})

    def to_api(self) -> Dict[str, Any]:
        """Build the JSON:API document for a create or update request."""
        data: Dict[str, Any] = {
            "type": "vars",
            "attributes": {
                "key": self.key,
                "value": self.escaped_value(),
                "description": self.description,
                "category": self.category.value,
                "hcl": self.hcl,
                "sensitive": self.sensitive,
            },
        }
        if self.id:
            data["id"] = self.id
        return {"data": data}

    def matches(self, key_contains: str = "", value_contains: str = "") -> bool:
        """
        Substring match on key or value.

        Empty search terms are ignored. Hidden values never match a value search.
        """
        if key_contains and key_contains in self.key:
            return True
        if value_contains and not self.is_hidden and value_contains in self.value:
            return True
        return False
