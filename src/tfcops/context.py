"""
Client context.

A ClientContext carries everything a RemoteClient needs to talk to one
account: token, hostname and the read-only/debug switches. It is immutable;
cross-account operations build a second context with ``for_token`` instead of
swapping credentials on a shared client.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_HOSTNAME = "app.terraform.io"
DEFAULT_PAGE_SIZE = 100


class ClientContext(BaseModel):
    """Credentials and switches for one API account."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    token: str = Field(..., min_length=1, repr=False)
    hostname: str = Field(default=DEFAULT_HOSTNAME)
    read_only: bool = Field(default=False, description="Refuse every non-GET request")
    debug: bool = Field(default=False, description="Log request and response bodies")
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=100)
    timeout: float = Field(default=60.0, gt=0)

    @property
    def base_url(self) -> str:
        return f"https://{self.hostname}/api/v2"

    def for_token(self, token: str) -> "ClientContext":
        """Same settings, different account."""
        return self.model_copy(update={"token": token})
