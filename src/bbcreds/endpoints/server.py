"""Self-hosted Bitbucket Server endpoints."""

from __future__ import annotations

from typing import Any, ClassVar, Literal, Optional

from pydantic import field_validator

from bbcreds.credentials.matchers import matcher_for_server
from bbcreds.endpoints.base import AbstractEndpoint, EndpointDescriptor, normalize_server_url


class BitbucketServerEndpoint(AbstractEndpoint):
    """A self-hosted server.

    The server URL is normalised on construction, and a blank
    ``name`` becomes ``None`` (the URL is shown instead).
    Servers accept username/password and personal access tokens.

    Example::

        BitbucketServerEndpoint(name="Corp", server_url="HTTPS://git.corp/")
        # server_url == "https://git.corp"
    """

    descriptor: ClassVar[EndpointDescriptor] = EndpointDescriptor(
        "Bitbucket Server", matcher_for_server
    )

    type: Literal["server"] = "server"
    name: Optional[str] = None

    @field_validator("server_url", mode="before")
    @classmethod
    def _normalise_url(cls, value: Any) -> str:
        return normalize_server_url(value)

    @field_validator("name", mode="before")
    @classmethod
    def _fix_name(cls, value: Any) -> Any:
        if value is None or not str(value).strip():
            return None
        return str(value).strip()

    @property
    def display_name(self) -> str:
        return self.name or self.server_url
