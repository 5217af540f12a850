"""Credential matchers -- predicates over credential variants.

A :class:`CredentialsMatcher` decides whether a credential is applicable to
some target.  Matchers are small immutable values built from a handful of
combinators (:func:`instance_of`, :func:`any_of`, :func:`all_of`,
:func:`with_id`).  Because they are frozen dataclasses they compare by value,
so two matchers assembled from the same rule are equal.

The registry functions pick the matcher for a target service:

- :func:`matcher_for_cloud` -- username/password only.
- :func:`matcher_for_server` -- username/password or personal access token.
- :func:`matcher_for_any` -- same rule as server, for callers that do not
  know which kind of service they are talking to.
- :func:`matcher_for_url` -- whatever the endpoint registered for a URL
  prefers, falling back to :func:`matcher_for_any`.

Keeping "which variants are acceptable" apart from "which URL implies which
variant" means a new kind of endpoint only needs a new descriptor, never a
change to the lookup.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Optional, TypeVar

from bbcreds.models import (
    BaseCredential,
    PersonalAccessTokenCredential,
    UsernamePasswordCredential,
)

if TYPE_CHECKING:
    from bbcreds.endpoints.configuration import EndpointConfiguration

C = TypeVar("C", bound=BaseCredential)


class CredentialsMatcher(ABC):
    """Predicate selecting acceptable credentials.

    Matchers are callable, so they can be handed straight to ``filter``::

        tokens = list(filter(instance_of(PersonalAccessTokenCredential), creds))
    """

    @abstractmethod
    def matches(self, credential: BaseCredential) -> bool:
        """Return ``True`` if *credential* is acceptable."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """Return a short human-readable rendering of the rule."""
        ...

    def __call__(self, credential: BaseCredential) -> bool:
        return self.matches(credential)


@dataclass(frozen=True)
class InstanceOfMatcher(CredentialsMatcher):
    """Matches credentials that are instances of ``credential_class``."""

    credential_class: type

    def matches(self, credential: BaseCredential) -> bool:
        return isinstance(credential, self.credential_class)

    def describe(self) -> str:
        return f"instanceof {self.credential_class.__name__}"


@dataclass(frozen=True)
class IdMatcher(CredentialsMatcher):
    """Matches the credential whose id equals ``credentials_id`` exactly."""

    credentials_id: str

    def matches(self, credential: BaseCredential) -> bool:
        return credential.id == self.credentials_id

    def describe(self) -> str:
        return f"id == {self.credentials_id!r}"


@dataclass(frozen=True)
class AnyOfMatcher(CredentialsMatcher):
    """Matches when at least one of ``matchers`` matches."""

    matchers: tuple[CredentialsMatcher, ...]

    def matches(self, credential: BaseCredential) -> bool:
        return any(m.matches(credential) for m in self.matchers)

    def describe(self) -> str:
        return "(" + " || ".join(m.describe() for m in self.matchers) + ")"


@dataclass(frozen=True)
class AllOfMatcher(CredentialsMatcher):
    """Matches when every one of ``matchers`` matches."""

    matchers: tuple[CredentialsMatcher, ...]

    def matches(self, credential: BaseCredential) -> bool:
        return all(m.matches(credential) for m in self.matchers)

    def describe(self) -> str:
        return "(" + " && ".join(m.describe() for m in self.matchers) + ")"


# --- Combinators ---


def instance_of(credential_class: type) -> CredentialsMatcher:
    return InstanceOfMatcher(credential_class)


def with_id(credentials_id: str) -> CredentialsMatcher:
    return IdMatcher(credentials_id)


def any_of(*matchers: CredentialsMatcher) -> CredentialsMatcher:
    return AnyOfMatcher(tuple(matchers))


def all_of(*matchers: CredentialsMatcher) -> CredentialsMatcher:
    return AllOfMatcher(tuple(matchers))


def first_or_none(credentials: Iterable[C], matcher: CredentialsMatcher) -> Optional[C]:
    """Return the first credential accepted by *matcher*, keeping the input order."""
    for credential in credentials:
        if matcher.matches(credential):
            return credential
    return None


# --- Registry ---


def matcher_for_cloud() -> CredentialsMatcher:
    """Return the matcher for credentials applicable to Bitbucket Cloud."""
    return instance_of(UsernamePasswordCredential)


def matcher_for_server() -> CredentialsMatcher:
    """Return the matcher for credentials applicable to Bitbucket Server."""
    return any_of(
        instance_of(UsernamePasswordCredential),
        instance_of(PersonalAccessTokenCredential),
    )


def matcher_for_any() -> CredentialsMatcher:
    """Return the matcher for credentials applicable to either Cloud or Server.

    The rule is currently the same as :func:`matcher_for_server`.
    """
    return any_of(
        instance_of(UsernamePasswordCredential),
        instance_of(PersonalAccessTokenCredential),
    )


def matcher_for_url(url: Optional[str], configuration: EndpointConfiguration) -> CredentialsMatcher:
    """Return the matcher preferred by the endpoint registered for *url*.

    An unknown URL is not an error: it means "use the permissive default".

    Args:
        url: The server URL, or ``None`` (which resolves to the cloud URL).
        configuration: Endpoint registry used to find the endpoint.

    Returns:
        The endpoint descriptor's matcher, or :func:`matcher_for_any` when no
        endpoint is registered or it expresses no preference.
    """
    endpoint = configuration.find_endpoint(url)
    if endpoint is not None:
        matcher = endpoint.descriptor.credentials_matcher()
        if matcher is not None:
            return matcher
    return matcher_for_any()
