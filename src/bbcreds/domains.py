"""Credential domains and the URI requirements they are tested against.

A credential can be restricted to a *domain*: a named set of
specifications that say which URLs the credential applies to.  When a
lookup targets a server URL, :func:`requirements_from_uri` breaks the URL
into *requirements* (scheme, hostname, hostname:port, path) and the store
keeps only credentials whose domain accepts every one of them.

The global domain has no specifications and accepts every URL, and an
absent URL produces no requirements at all, so it imposes no restriction.

Each specification answers one of :class:`SpecificationResult`
``POSITIVE``, ``NEGATIVE`` or ``UNKNOWN``.  ``UNKNOWN`` is returned for
requirement kinds a specification does not understand and never rejects a
credential on its own.
"""

from __future__ import annotations

import enum
from fnmatch import fnmatchcase
from typing import Annotated, Literal, Optional, Union
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_PORTS = {"http": 80, "https": 443, "ssh": 22}
"""Port implied by each scheme when a URL names none."""


class SpecificationResult(str, enum.Enum):
    """Outcome of testing one requirement against one specification."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    UNKNOWN = "unknown"


# --- Requirements ---


class SchemeRequirement(BaseModel):
    """The target URL uses this (lowercase) scheme."""

    model_config = ConfigDict(frozen=True)

    scheme: str


class HostnameRequirement(BaseModel):
    """The target URL points at this (lowercase) host name."""

    model_config = ConfigDict(frozen=True)

    hostname: str


class HostnamePortRequirement(BaseModel):
    """The target URL points at this host and (explicit or default) port."""

    model_config = ConfigDict(frozen=True)

    hostname: str
    port: int


class PathRequirement(BaseModel):
    """The target URL has this path."""

    model_config = ConfigDict(frozen=True)

    path: str


DomainRequirement = Union[
    SchemeRequirement,
    HostnameRequirement,
    HostnamePortRequirement,
    PathRequirement,
]


def requirements_from_uri(uri: Optional[str]) -> list[DomainRequirement]:
    """Derive the domain requirements implied by *uri*.

    Args:
        uri: The target server URL, or ``None``.

    Returns:
        The requirements for every part present in the URL. ``None``, a
        blank string or a URL that cannot be parsed yields an empty list,
        i.e. no restriction.
    """
    if uri is None or not uri.strip():
        return []

    try:
        parts = urlsplit(uri.strip())
    except ValueError:
        return []
    requirements: list[DomainRequirement] = []

    scheme = parts.scheme.lower()
    if scheme:
        requirements.append(SchemeRequirement(scheme=scheme))

    hostname = parts.hostname
    if hostname:
        requirements.append(HostnameRequirement(hostname=hostname))
        try:
            port = parts.port
        except ValueError:
            port = None
        if port is None:
            port = DEFAULT_PORTS.get(scheme)
        if port is not None:
            requirements.append(HostnamePortRequirement(hostname=hostname, port=port))

    if parts.path:
        requirements.append(PathRequirement(path=parts.path))

    return requirements


# --- Specifications ---


def _split_patterns(value: str, lower: bool = True) -> list[str]:
    patterns = [p.strip() for p in value.split(",") if p.strip()]
    return [p.lower() for p in patterns] if lower else patterns


def _matches_any(candidate: str, patterns: list[str]) -> bool:
    return any(fnmatchcase(candidate, pattern) for pattern in patterns)


def _include_exclude(candidate: str, includes: list[str], excludes: list[str]) -> SpecificationResult:
    if _matches_any(candidate, excludes):
        return SpecificationResult.NEGATIVE
    if not includes or _matches_any(candidate, includes):
        return SpecificationResult.POSITIVE
    return SpecificationResult.NEGATIVE


class HostnameSpecification(BaseModel):
    """Restrict a domain to host names matching glob patterns.

    Both ``includes`` and ``excludes`` are comma-separated glob patterns
    compared case-insensitively, e.g. ``"*.example.com, git.corp"``.  An
    empty ``includes`` accepts every host not excluded.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["hostname"] = "hostname"
    includes: str = "*"
    excludes: str = ""

    def test(self, requirement: DomainRequirement) -> SpecificationResult:
        if not isinstance(requirement, HostnameRequirement):
            return SpecificationResult.UNKNOWN
        return _include_exclude(
            requirement.hostname.lower(),
            _split_patterns(self.includes),
            _split_patterns(self.excludes),
        )


class HostnamePortSpecification(BaseModel):
    """Restrict a domain to ``host:port`` pairs matching glob patterns."""

    model_config = ConfigDict(frozen=True)

    type: Literal["hostname_port"] = "hostname_port"
    includes: str = "*"
    excludes: str = ""

    def test(self, requirement: DomainRequirement) -> SpecificationResult:
        if not isinstance(requirement, HostnamePortRequirement):
            return SpecificationResult.UNKNOWN
        return _include_exclude(
            f"{requirement.hostname.lower()}:{requirement.port}",
            _split_patterns(self.includes),
            _split_patterns(self.excludes),
        )


class SchemeSpecification(BaseModel):
    """Restrict a domain to a comma-separated list of URL schemes."""

    model_config = ConfigDict(frozen=True)

    type: Literal["scheme"] = "scheme"
    schemes: str = "https"

    def test(self, requirement: DomainRequirement) -> SpecificationResult:
        if not isinstance(requirement, SchemeRequirement):
            return SpecificationResult.UNKNOWN
        if requirement.scheme.lower() in _split_patterns(self.schemes):
            return SpecificationResult.POSITIVE
        return SpecificationResult.NEGATIVE


class PathSpecification(BaseModel):
    """Restrict a domain to URL paths matching glob patterns."""

    model_config = ConfigDict(frozen=True)

    type: Literal["path"] = "path"
    includes: str = "*"
    excludes: str = ""
    case_sensitive: bool = True

    def test(self, requirement: DomainRequirement) -> SpecificationResult:
        if not isinstance(requirement, PathRequirement):
            return SpecificationResult.UNKNOWN
        lower = not self.case_sensitive
        path = requirement.path.lower() if lower else requirement.path
        return _include_exclude(
            path,
            _split_patterns(self.includes, lower=lower),
            _split_patterns(self.excludes, lower=lower),
        )


DomainSpecification = Annotated[
    Union[
        HostnameSpecification,
        HostnamePortSpecification,
        SchemeSpecification,
        PathSpecification,
    ],
    Field(discriminator="type"),
]


class Domain(BaseModel):
    """A named group of specifications restricting where credentials apply.

    Example::

        corp = Domain(
            name="corp",
            specifications=[HostnameSpecification(includes="*.corp.example")],
        )
        corp.test(requirements_from_uri("https://git.corp.example/scm"))  # True
        corp.test(requirements_from_uri("https://bitbucket.org"))         # False
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    description: Optional[str] = None
    specifications: list[DomainSpecification] = Field(default_factory=list)

    @property
    def is_global(self) -> bool:
        """Whether this is the unrestricted global domain."""
        return self.name is None and not self.specifications

    def test(self, requirements: list[DomainRequirement]) -> bool:
        """Return ``True`` unless some specification rejects some requirement."""
        for specification in self.specifications:
            for requirement in requirements:
                if specification.test(requirement) is SpecificationResult.NEGATIVE:
                    return False
        return True


GLOBAL_DOMAIN = Domain()
"""The unrestricted domain every credential belongs to by default."""
