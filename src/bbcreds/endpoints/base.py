"""Endpoint base model, endpoint descriptors and server URL normalisation.

An *endpoint* is a configured instance of the hosting service: the cloud
service or one self-hosted server.  Each endpoint type carries an
:class:`EndpointDescriptor` exposing its display name and the credentials
matcher it prefers, which is how
:func:`~bbcreds.credentials.matchers.matcher_for_url` turns a URL into a
matcher.

Endpoints are compared by their normalised server URL; see
:func:`normalize_server_url`.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Optional
from urllib.parse import urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, model_validator

from bbcreds.credentials.matchers import CredentialsMatcher
from bbcreds.domains import DEFAULT_PORTS

CLOUD_URL = "https://bitbucket.org"
"""Server URL of the cloud service."""

_NORMALIZED_SCHEMES = ("http", "https")


def _remove_dot_segments(path: str) -> str:
    segments: list[str] = []
    for segment in path.split("/"):
        if segment == ".":
            continue
        if segment == "..":
            if len(segments) > 1:
                segments.pop()
            continue
        segments.append(segment)
    return "/".join(segments)


def normalize_server_url(server_url: Optional[str]) -> str:
    """Normalise a server URL so equivalent spellings compare equal.

    - A blank or ``None`` URL resolves to :data:`CLOUD_URL`.
    - For ``http``/``https`` URLs the scheme and host are lowercased, the
      scheme's default port is dropped and ``.``/``..`` path segments are
      resolved.  Other schemes are left alone.
    - A single trailing ``/`` is removed.

    Unparseable input is returned as given, minus the trailing slash.

    Example::

        normalize_server_url("HTTPS://Bitbucket.Example.com:443/scm/")
        # 'https://bitbucket.example.com/scm'
    """
    if server_url is None or not server_url.strip():
        server_url = CLOUD_URL
    server_url = server_url.strip()

    try:
        parts = urlsplit(server_url)
        scheme = parts.scheme.lower()
        if scheme in _NORMALIZED_SCHEMES:
            port = parts.port
            if port == DEFAULT_PORTS[scheme]:
                port = None
            host = parts.hostname or ""
            if ":" in host:
                host = f"[{host}]"
            userinfo, at, _ = parts.netloc.rpartition("@")
            netloc = (userinfo + at) + host
            if port is not None:
                netloc += f":{port}"
            server_url = urlunsplit(
                (scheme, netloc, _remove_dot_segments(parts.path), parts.query, parts.fragment)
            )
    except ValueError:
        pass

    if server_url.endswith("/"):
        server_url = server_url[:-1]
    return server_url


class EndpointDescriptor:
    """Describes an endpoint type: its display name and preferred matcher.

    Args:
        display_name: Name shown to users for this endpoint type.
        matcher_factory: Returns the matcher for credentials applicable to
            endpoints of this type, or ``None`` for no preference.
    """

    def __init__(
        self,
        display_name: str,
        matcher_factory: Optional[Callable[[], CredentialsMatcher]] = None,
    ) -> None:
        self._display_name = display_name
        self._matcher_factory = matcher_factory

    @property
    def display_name(self) -> str:
        return self._display_name

    def credentials_matcher(self) -> Optional[CredentialsMatcher]:
        """Return the preferred matcher, or ``None`` if this type has none."""
        if self._matcher_factory is None:
            return None
        return self._matcher_factory()


class AbstractEndpoint(BaseModel):
    """Fields common to every endpoint type.

    Attributes:
        server_url: Normalised URL of the service.
        manage_hooks: Whether repository hooks are managed automatically.
        credentials_id: Credential used to manage hooks.  Only kept when
            ``manage_hooks`` is set; trimmed, and blank becomes ``None``.
    """

    model_config = ConfigDict(frozen=True)

    descriptor: ClassVar[EndpointDescriptor]

    server_url: str
    manage_hooks: bool = False
    credentials_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fix_credentials_id(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        credentials_id = data.get("credentials_id")
        if not data.get("manage_hooks") or credentials_id is None or not str(credentials_id).strip():
            data["credentials_id"] = None
        else:
            data["credentials_id"] = str(credentials_id).strip()
        return data

    @property
    def display_name(self) -> str:
        """Name to show for this endpoint."""
        return self.server_url
