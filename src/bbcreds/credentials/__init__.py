"""Credential matching and lookup.

The main entry points are:

- :func:`matcher_for_cloud`, :func:`matcher_for_server`,
  :func:`matcher_for_any` and :func:`matcher_for_url` -- pick the
  :class:`CredentialsMatcher` for a target.
- :func:`lookup_credentials` -- find a credential by id for a context.
- :class:`CredentialStore` -- the store contract, with
  :class:`InMemoryCredentialStore` and :class:`FileCredentialStore`.
- :func:`create_default_registry` -- credential type descriptors for
  validating and creating credentials from raw fields.
"""

from bbcreds.credentials.descriptors import (
    CredentialDescriptor,
    PersonalAccessTokenDescriptor,
    UsernamePasswordDescriptor,
)
from bbcreds.credentials.lookup import endpoint_credentials, lookup_credentials
from bbcreds.credentials.matchers import (
    CredentialsMatcher,
    all_of,
    any_of,
    first_or_none,
    instance_of,
    matcher_for_any,
    matcher_for_cloud,
    matcher_for_server,
    matcher_for_url,
    with_id,
)
from bbcreds.credentials.registry import CredentialTypeRegistry, create_default_registry
from bbcreds.credentials.store import (
    CredentialStore,
    FileCredentialStore,
    InMemoryCredentialStore,
)

__all__ = [
    "CredentialDescriptor",
    "CredentialStore",
    "CredentialTypeRegistry",
    "CredentialsMatcher",
    "FileCredentialStore",
    "InMemoryCredentialStore",
    "PersonalAccessTokenDescriptor",
    "UsernamePasswordDescriptor",
    "all_of",
    "any_of",
    "create_default_registry",
    "endpoint_credentials",
    "first_or_none",
    "instance_of",
    "lookup_credentials",
    "matcher_for_any",
    "matcher_for_cloud",
    "matcher_for_server",
    "matcher_for_url",
    "with_id",
]
