"""Credential type registry -- lookup and dispatch for descriptors.

The :class:`CredentialTypeRegistry` maps ``kind`` strings
(``"personal_access_token"``, ``"username_password"``) to
:class:`~bbcreds.credentials.descriptors.CredentialDescriptor` instances
and exposes :meth:`~CredentialTypeRegistry.create`, which validates raw
fields and builds the credential in one step.

For most use cases, call :func:`create_default_registry` to get a registry
pre-loaded with every built-in credential type.
"""

from __future__ import annotations

from typing import Any

from bbcreds.credentials.descriptors import (
    CredentialDescriptor,
    PersonalAccessTokenDescriptor,
    UsernamePasswordDescriptor,
)
from bbcreds.exceptions import CredentialValidationError, InvalidUsageError
from bbcreds.models import BaseCredential


class CredentialTypeRegistry:
    """Registry of credential descriptors keyed by their ``kind``.

    Example::

        registry = create_default_registry()
        cred = registry.create("personal_access_token", {"id": "pat", "token": "abc"})
    """

    def __init__(self) -> None:
        self._descriptors: dict[str, CredentialDescriptor] = {}

    def register(self, descriptor: CredentialDescriptor) -> None:
        """Register *descriptor*, silently replacing one of the same kind."""
        self._descriptors[descriptor.kind] = descriptor

    def get_descriptor(self, kind: str) -> CredentialDescriptor:
        """Return the descriptor registered for *kind*.

        Raises:
            InvalidUsageError: If no descriptor is registered for *kind*.
        """
        descriptor = self._descriptors.get(kind)
        if descriptor is None:
            available = ", ".join(sorted(self._descriptors)) or "(none)"
            raise InvalidUsageError(
                f"Unknown credential kind '{kind}'. Available kinds: {available}"
            )
        return descriptor

    def list_kinds(self) -> list[str]:
        """Return the registered kinds, sorted."""
        return sorted(self._descriptors)

    def create(self, kind: str, fields: dict[str, Any]) -> BaseCredential:
        """Validate *fields* and build a credential of *kind*.

        Warnings do not block creation; errors do.

        Raises:
            InvalidUsageError: If *kind* is unknown.
            CredentialValidationError: If any field fails validation.
        """
        descriptor = self.get_descriptor(kind)
        errors = [
            result.message or "invalid value"
            for result in descriptor.validate(fields)
            if not result.is_ok
        ]
        if errors:
            raise CredentialValidationError(kind, errors)
        return descriptor.create(fields)


def create_default_registry() -> CredentialTypeRegistry:
    """Create a :class:`CredentialTypeRegistry` with the built-in descriptors.

    Registered kinds:

    - ``personal_access_token`` -- Bitbucket Server personal access token.
    - ``username_password`` -- username with password.
    """
    registry = CredentialTypeRegistry()
    registry.register(PersonalAccessTokenDescriptor())
    registry.register(UsernamePasswordDescriptor())
    return registry
