"""Bitbucket endpoints and the endpoint configuration registry."""

from bbcreds.endpoints.base import (
    CLOUD_URL,
    AbstractEndpoint,
    EndpointDescriptor,
    normalize_server_url,
)
from bbcreds.endpoints.cloud import BitbucketCloudEndpoint
from bbcreds.endpoints.configuration import (
    EndpointConfiguration,
    EndpointConfigurationData,
)
from bbcreds.endpoints.server import BitbucketServerEndpoint

__all__ = [
    "AbstractEndpoint",
    "BitbucketCloudEndpoint",
    "BitbucketServerEndpoint",
    "CLOUD_URL",
    "EndpointConfiguration",
    "EndpointConfigurationData",
    "EndpointDescriptor",
    "normalize_server_url",
]
