"""Endpoint configuration -- the registry of known endpoints.

:class:`EndpointConfiguration` holds the configured endpoints and answers
:meth:`~EndpointConfiguration.find_endpoint` for a URL.  With nothing
configured it contains just the cloud endpoint.  Endpoints are unique by
normalised server URL.

The on-disk shape is :class:`EndpointConfigurationData`; see
:func:`~bbcreds.config.load_endpoint_configuration`.
"""

from __future__ import annotations

import logging
from typing import Annotated, Optional, Union

from pydantic import BaseModel, Field

from bbcreds.endpoints.base import AbstractEndpoint, normalize_server_url
from bbcreds.endpoints.cloud import BitbucketCloudEndpoint
from bbcreds.endpoints.server import BitbucketServerEndpoint

logger = logging.getLogger(__name__)

Endpoint = Annotated[
    Union[BitbucketCloudEndpoint, BitbucketServerEndpoint],
    Field(discriminator="type"),
]


class EndpointConfigurationData(BaseModel):
    """Serialised form of an :class:`EndpointConfiguration`."""

    endpoints: list[Endpoint] = Field(default_factory=list)


class EndpointConfiguration:
    """Registry of configured endpoints, unique by normalised server URL.

    Args:
        endpoints: Initial endpoints.  Duplicates are dropped (first wins);
            an empty list means "cloud only".

    Example::

        config = EndpointConfiguration()
        config.add_endpoint(BitbucketServerEndpoint(server_url="https://git.corp"))
        config.find_endpoint("HTTPS://git.corp/")  # the server endpoint
    """

    def __init__(self, endpoints: Optional[list[AbstractEndpoint]] = None) -> None:
        self._endpoints: list[AbstractEndpoint] = []
        self.set_endpoints(endpoints or [])

    @property
    def endpoints(self) -> list[AbstractEndpoint]:
        """The configured endpoints, or the cloud endpoint alone if none are."""
        if not self._endpoints:
            return [BitbucketCloudEndpoint()]
        return list(self._endpoints)

    def set_endpoints(self, endpoints: list[AbstractEndpoint]) -> None:
        """Replace all endpoints, dropping later duplicates of the same URL."""
        seen: set[str] = set()
        unique: list[AbstractEndpoint] = []
        for endpoint in endpoints:
            if endpoint.server_url in seen:
                logger.warning("Ignoring duplicate endpoint for %s", endpoint.server_url)
                continue
            seen.add(endpoint.server_url)
            unique.append(endpoint)
        self._endpoints = unique or [BitbucketCloudEndpoint()]

    def find_endpoint(self, server_url: Optional[str]) -> Optional[AbstractEndpoint]:
        """Return the endpoint for *server_url*, or ``None`` if none is configured.

        ``None`` resolves to the cloud URL.
        """
        normalized = normalize_server_url(server_url)
        for endpoint in self.endpoints:
            if endpoint.server_url == normalized:
                return endpoint
        return None

    def add_endpoint(self, endpoint: AbstractEndpoint) -> bool:
        """Add *endpoint* unless one with the same URL exists.

        Returns:
            ``True`` if the endpoint was added.
        """
        if self.find_endpoint(endpoint.server_url) is not None:
            return False
        self._endpoints = self.endpoints + [endpoint]
        return True

    def update_endpoint(self, endpoint: AbstractEndpoint) -> None:
        """Replace the endpoint with the same URL, or append *endpoint*."""
        endpoints = self.endpoints
        for index, existing in enumerate(endpoints):
            if existing.server_url == endpoint.server_url:
                endpoints[index] = endpoint
                break
        else:
            endpoints.append(endpoint)
        self._endpoints = endpoints

    def remove_endpoint(self, server_url: Optional[str]) -> bool:
        """Remove the endpoint for *server_url*.

        Removing the last endpoint leaves the cloud default in place, so the
        cloud endpoint cannot be removed when it is the only one.

        Returns:
            ``True`` if the endpoint is gone afterwards.
        """
        normalized = normalize_server_url(server_url)
        endpoints = self.endpoints
        remaining = [e for e in endpoints if e.server_url != normalized]
        if len(remaining) == len(endpoints):
            return False
        self._endpoints = remaining
        return self.find_endpoint(normalized) is None

    def to_data(self) -> EndpointConfigurationData:
        return EndpointConfigurationData(endpoints=self._endpoints)

    @classmethod
    def from_data(cls, data: EndpointConfigurationData) -> EndpointConfiguration:
        return cls(list(data.endpoints))
