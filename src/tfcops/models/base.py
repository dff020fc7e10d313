"""
Base classes and helpers for Terraform Cloud models.

The API speaks JSON:API: every resource arrives as an object with ``id``,
``type``, ``attributes`` and ``relationships``. Models parse those objects with
``from_api`` and produce request documents with ``to_api``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)


class BaseOpsModel(BaseModel):
    """
    Base model for all Terraform Cloud objects with common configuration.

    This provides standard Pydantic v2 configuration shared by every model.
    """

    model_config = ConfigDict(
        validate_assignment=False,  # Disabled for performance
        validate_default=True,  # Validate defaults once
        populate_by_name=True,  # Allow field population by name
        use_enum_values=False,  # Keep enums as enum objects
        str_strip_whitespace=True,  # Strip whitespace from strings
    )


def relationship_id(resource: Dict[str, Any], name: str) -> Optional[str]:
    """
    Get the ID of a to-one relationship from a JSON:API resource object.

    Args:
        resource: Resource object (an element of ``data``)
        name: Relationship name (e.g. 'team', 'workspace')

    Returns:
        The related resource ID, or None if the relationship is absent
    """
    data = (resource.get("relationships") or {}).get(name, {}).get("data")
    if isinstance(data, dict):
        return data.get("id")
    return None


def resource_identifier(resource_type: str, resource_id: str) -> Dict[str, str]:
    """Build a JSON:API resource identifier object."""
    return {"type": resource_type, "id": resource_id}
