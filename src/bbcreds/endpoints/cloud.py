"""The Bitbucket Cloud endpoint."""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import field_validator

from bbcreds.credentials.matchers import matcher_for_cloud
from bbcreds.endpoints.base import CLOUD_URL, AbstractEndpoint, EndpointDescriptor


class BitbucketCloudEndpoint(AbstractEndpoint):
    """The cloud service.  Its server URL is always :data:`CLOUD_URL`.

    Cloud only accepts username/password credentials (app passwords), so
    its descriptor prefers :func:`~bbcreds.credentials.matchers.matcher_for_cloud`.
    """

    descriptor: ClassVar[EndpointDescriptor] = EndpointDescriptor(
        "Bitbucket Cloud", matcher_for_cloud
    )

    type: Literal["cloud"] = "cloud"
    server_url: str = CLOUD_URL

    @field_validator("server_url", mode="before")
    @classmethod
    def _fixed_url(cls, value: Any) -> str:
        return CLOUD_URL

    @property
    def display_name(self) -> str:
        return self.descriptor.display_name
