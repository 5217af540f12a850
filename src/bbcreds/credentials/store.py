"""Credential stores -- the collaborators a lookup enumerates.

:class:`CredentialStore` is the contract the lookup relies on: enumerate the
credentials visible to a context under a principal, restricted by domain
requirements, and answer whether a principal may use credentials from a
context at all.

Two implementations ship with the package:

- :class:`InMemoryCredentialStore` -- credentials and grants held in memory,
  in insertion order.  This order is the enumeration order a lookup sees.
- :class:`FileCredentialStore` -- the in-memory store loaded from and saved
  to a JSON file.  Writes go through :func:`~bbcreds.files.atomic_write`
  with ``0o600`` permissions, applied before the secrets are written.
  Secrets are stored in clear text; encryption at rest is out of scope.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

from pydantic import ValidationError

from bbcreds.domains import DomainRequirement
from bbcreds.exceptions import ConfigError
from bbcreds.files import atomic_write
from bbcreds.models import (
    BaseCredential,
    CredentialsScope,
    CredentialStoreData,
    Item,
    Principal,
)

logger = logging.getLogger(__name__)

ALL_ITEMS = "*"
"""Grant wildcard: the principal may use credentials from every item."""


class CredentialStore(ABC):
    """Source of credentials for :func:`~bbcreds.credentials.lookup.lookup_credentials`.

    Implementations own all mutable shared state and are expected to make
    their own arrangements for thread safety.
    """

    @abstractmethod
    def lookup_credentials(
        self,
        context: Item,
        principal: Principal,
        requirements: list[DomainRequirement],
    ) -> list[BaseCredential]:
        """Enumerate the credentials visible to *context* under *principal*.

        Args:
            context: The requesting item.
            principal: The identity to enumerate as.
            requirements: Domain requirements derived from the target URL.
                An empty list imposes no restriction.

        Returns:
            The visible credentials in store order.  An unauthorised
            principal gets an empty list, never an error.
        """
        ...

    @abstractmethod
    def has_permission(self, principal: Principal, context: Item) -> bool:
        """Return whether *principal* may use credentials from *context*."""
        ...


class InMemoryCredentialStore(CredentialStore):
    """Credentials and grants kept in memory.

    Visibility rules:

    - a system principal may use every context; any other principal needs a
      grant for the context's full name (or the ``"*"`` wildcard);
    - ``GLOBAL`` credentials are visible from every context, ``SYSTEM`` and
      ``USER`` credentials only from the root context;
    - a credential is returned only when its domain accepts the requirements.

    Args:
        credentials: Initial credentials, in enumeration order.
        grants: Principal name to item full names.
    """

    def __init__(
        self,
        credentials: Optional[list[BaseCredential]] = None,
        grants: Optional[dict[str, list[str]]] = None,
    ) -> None:
        self._credentials: list[BaseCredential] = []
        self._grants: dict[str, set[str]] = {}
        for credential in credentials or []:
            self.add(credential)
        for principal_name, items in (grants or {}).items():
            for item_name in items:
                self.grant(principal_name, item_name)

    def __iter__(self) -> Iterator[BaseCredential]:
        return iter(list(self._credentials))

    def __len__(self) -> int:
        return len(self._credentials)

    @property
    def grants(self) -> dict[str, list[str]]:
        """A sorted copy of the grants table."""
        return {name: sorted(items) for name, items in sorted(self._grants.items())}

    def add(self, credential: BaseCredential) -> None:
        """Append *credential*, replacing any existing credential with the same id.

        A replaced credential keeps its position in the enumeration order.
        """
        for index, existing in enumerate(self._credentials):
            if existing.id == credential.id:
                self._credentials[index] = credential
                return
        self._credentials.append(credential)

    def get(self, credentials_id: str) -> Optional[BaseCredential]:
        """Return the credential with *credentials_id*, ignoring visibility rules."""
        for credential in self._credentials:
            if credential.id == credentials_id:
                return credential
        return None

    def remove(self, credentials_id: str) -> bool:
        """Remove the credential with *credentials_id*.

        Returns:
            ``True`` if a credential was removed.
        """
        before = len(self._credentials)
        self._credentials = [c for c in self._credentials if c.id != credentials_id]
        return len(self._credentials) != before

    def grant(self, principal_name: str, item_name: str) -> None:
        """Allow *principal_name* to use credentials from *item_name*."""
        self._grants.setdefault(principal_name, set()).add(item_name)

    def has_permission(self, principal: Principal, context: Item) -> bool:
        if principal.system:
            return True
        items = self._grants.get(principal.name, set())
        return ALL_ITEMS in items or context.full_name in items

    def lookup_credentials(
        self,
        context: Item,
        principal: Principal,
        requirements: list[DomainRequirement],
    ) -> list[BaseCredential]:
        if not self.has_permission(principal, context):
            logger.debug(
                "Principal '%s' may not use credentials from '%s'",
                principal.name,
                context.full_name,
            )
            return []
        return [
            credential
            for credential in self._credentials
            if _scope_visible(credential.scope, context)
            and credential.domain.test(requirements)
        ]


def _scope_visible(scope: CredentialsScope, context: Item) -> bool:
    if scope is CredentialsScope.GLOBAL:
        return True
    return context.is_root


class FileCredentialStore(InMemoryCredentialStore):
    """An :class:`InMemoryCredentialStore` persisted as a JSON file.

    Call :meth:`load` to read the file and :meth:`save` after changes.
    Changes are not written back automatically.

    Args:
        path: Location of the JSON file.

    Example::

        store = FileCredentialStore(Path("~/.local/share/bbcreds/credentials.json"))
        store.load()
        store.add(PersonalAccessTokenCredential(id="pat", token="s3cret"))
        store.save()
    """

    def __init__(self, path: Path) -> None:
        super().__init__()
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """The filesystem path to the credential file."""
        return self._path

    def load(self) -> None:
        """Replace the in-memory contents with the file's.

        A missing file loads as an empty store.

        Raises:
            ConfigError: If the file exists but cannot be read, is not
                UTF-8 JSON, or does not match :class:`~bbcreds.models.CredentialStoreData`.
        """
        self._credentials = []
        self._grants = {}
        if not self._path.is_file():
            return
        try:
            text = self._path.read_text(encoding="utf-8")
            data = CredentialStoreData.model_validate(json.loads(text))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            raise ConfigError(f"Invalid credential store at {self._path}: {exc}") from exc
        for credential in data.credentials:
            self.add(credential)
        for principal_name, items in data.grants.items():
            for item_name in items:
                self.grant(principal_name, item_name)
        logger.debug("Loaded %d credentials from %s", len(self), self._path)

    def save(self) -> None:
        """Persist the store atomically with ``0o600`` permissions.

        Raises:
            OSError: If the file cannot be written (permissions, disk full, etc.).
        """
        data = CredentialStoreData(credentials=list(self._credentials), grants=self.grants)
        payload = data.model_dump(mode="json")
        for entry, credential in zip(payload["credentials"], self._credentials):
            # SecretStr dumps as a mask; the file must keep the real value.
            password = getattr(credential, "password", None)
            if password is not None:
                entry["password"] = password.get_secret_value()
        atomic_write(self._path, json.dumps(payload, indent=2) + "\n", mode=0o600)
        logger.debug("Saved %d credentials to %s", len(self), self._path)
