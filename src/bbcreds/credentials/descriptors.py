"""Credential type descriptors -- display names and form validation.

A :class:`CredentialDescriptor` describes one credential variant to the
outside world: its ``kind`` key, the name shown to users, how to validate
raw form fields before a credential is saved, and how to build the
credential from those fields.

Validation lives here rather than in the credential models.  A
:class:`~bbcreds.models.PersonalAccessTokenCredential` accepts a blank
token, and it is the descriptor that refuses to *save* one.

See Also:
    :class:`~bbcreds.credentials.registry.CredentialTypeRegistry` for
    registration and dispatch by kind.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional

from bbcreds.models import (
    BaseCredential,
    PersonalAccessTokenCredential,
    UsernamePasswordCredential,
    ValidationResult,
)


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class CredentialDescriptor(ABC):
    """Abstract base class for credential type descriptors.

    Subclasses provide:

    1. a :attr:`kind` matching the model's ``kind`` literal,
    2. a :attr:`display_name`,
    3. :attr:`credential_class`, the model built by :meth:`create`,
    4. :meth:`validate`, returning one result per checked field.
    """

    credential_class: type[BaseCredential]

    @property
    @abstractmethod
    def kind(self) -> str:
        ...

    @property
    @abstractmethod
    def display_name(self) -> str:
        ...

    @abstractmethod
    def validate(self, fields: dict[str, Any]) -> list[ValidationResult]:
        """Validate raw form *fields* for this credential type.

        Args:
            fields: Field name to raw value, as submitted.

        Returns:
            One :class:`~bbcreds.models.ValidationResult` per checked field.
            Callers refuse to save when any result is an error.
        """
        ...

    def create(self, fields: dict[str, Any]) -> BaseCredential:
        """Build the credential from *fields* without validating them."""
        return self.credential_class(**fields)


class PersonalAccessTokenDescriptor(CredentialDescriptor):
    """Descriptor for :class:`~bbcreds.models.PersonalAccessTokenCredential`."""

    credential_class = PersonalAccessTokenCredential

    @property
    def kind(self) -> str:
        return "personal_access_token"

    @property
    def display_name(self) -> str:
        return "Bitbucket Personal Access Token"

    def check_token(self, token: Optional[str]) -> ValidationResult:
        if _is_blank(token):
            return ValidationResult.error("Token is required.")
        return ValidationResult.ok()

    def validate(self, fields: dict[str, Any]) -> list[ValidationResult]:
        return [self.check_token(fields.get("token"))]


class UsernamePasswordDescriptor(CredentialDescriptor):
    """Descriptor for :class:`~bbcreds.models.UsernamePasswordCredential`."""

    credential_class = UsernamePasswordCredential

    @property
    def kind(self) -> str:
        return "username_password"

    @property
    def display_name(self) -> str:
        return "Username with password"

    def check_username(self, username: Optional[str]) -> ValidationResult:
        if _is_blank(username):
            return ValidationResult.error("Username is required.")
        return ValidationResult.ok()

    def check_password(self, password: Optional[str]) -> ValidationResult:
        if _is_blank(password):
            return ValidationResult.warning("Password is empty.")
        return ValidationResult.ok()

    def validate(self, fields: dict[str, Any]) -> list[ValidationResult]:
        return [
            self.check_username(fields.get("username")),
            self.check_password(fields.get("password")),
        ]
