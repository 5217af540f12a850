"""Canonical Pydantic models shared across all bbcreds modules.

This is the single source of truth for data shapes in the project. The
models fall into three groups:

**Credentials** -- the records a store holds and a lookup returns:
    :class:`CredentialsScope`, :class:`BaseCredential`,
    :class:`UsernamePasswordCredential`,
    :class:`PersonalAccessTokenCredential` and the :data:`Credential`
    discriminated union used to (de)serialise them.

**Lookup context** -- who is asking, and as whom:
    :class:`Principal`, :class:`Item`, :class:`Task`.

**Configuration and results** -- :class:`ValidationResult`,
    :class:`OutputConfig`, :class:`GlobalConfig` and
    :class:`CredentialStoreData`.

Credential models are frozen: once constructed, a credential's fields never
change.  Normalisation (null-coalescing, trimming, id generation) happens in
``field_validator`` hooks so the invariants hold for every instance,
whether built in code or loaded from disk.
"""

from __future__ import annotations

import enum
import uuid
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from bbcreds.domains import Domain


# --- Principals and contexts ---


class Principal(BaseModel):
    """An identity under which credentials are enumerated.

    Principals are plain values passed explicitly to the lookup.  The
    elevated identity used for administrative call sites is whatever
    principal the caller hands in as ``system_principal``;
    :data:`SYSTEM_PRINCIPAL` is provided as the conventional value.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    system: bool = Field(
        default=False, description="Whether this identity bypasses item permissions"
    )


SYSTEM_PRINCIPAL = Principal(name="SYSTEM", system=True)
ANONYMOUS_PRINCIPAL = Principal(name="anonymous")


class Item(BaseModel):
    """A requesting entity, such as a job or folder, identified by full name.

    The item with an empty ``full_name`` is the root context
    (:data:`ROOT_CONTEXT`), the only context in which ``SYSTEM``-scoped
    credentials are visible.
    """

    model_config = ConfigDict(frozen=True)

    full_name: str

    @property
    def is_root(self) -> bool:
        return self.full_name == ""


class Task(Item):
    """A schedulable unit of work.

    Lookups performed on behalf of a task run as the task's configured
    default authentication rather than an elevated identity, so a job
    configuration cannot be used to reach credentials its identity could
    not see.
    """

    default_authentication: Optional[Principal] = None


ROOT_CONTEXT = Item(full_name="")


# --- Credentials ---


class CredentialsScope(str, enum.Enum):
    """Visibility scope of a stored credential.

    ``GLOBAL`` credentials are visible to every item.  ``SYSTEM`` and
    ``USER`` credentials are only visible from the root context.
    """

    GLOBAL = "GLOBAL"
    SYSTEM = "SYSTEM"
    USER = "USER"


class BaseCredential(BaseModel):
    """Fields shared by every credential variant.

    Attributes:
        id: Unique identifier within the visible scope.  A missing or blank
            id is replaced with a random UUID; any other value is trimmed.
        scope: Visibility scope.  ``None`` normalises to ``GLOBAL``.
        description: Optional human-readable description (``None`` becomes
            ``""``).
        domain: The domain restricting which URLs this credential applies
            to.  Defaults to the unrestricted global domain.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    scope: CredentialsScope = CredentialsScope.GLOBAL
    description: str = ""
    domain: Domain = Field(default_factory=Domain)

    @field_validator("id", mode="before")
    @classmethod
    def _fix_id(cls, value: Any) -> Any:
        if value is None or not str(value).strip():
            return str(uuid.uuid4())
        return str(value).strip()

    @field_validator("scope", mode="before")
    @classmethod
    def _fix_scope(cls, value: Any) -> Any:
        return CredentialsScope.GLOBAL if value is None else value

    @field_validator("description", mode="before")
    @classmethod
    def _fix_description(cls, value: Any) -> Any:
        return "" if value is None else value


class UsernamePasswordCredential(BaseCredential):
    """A username and password pair.

    Accepted by both cloud and server endpoints.
    """

    kind: Literal["username_password"] = "username_password"
    username: str = ""
    password: SecretStr = Field(default_factory=lambda: SecretStr(""))

    @field_validator("username", mode="before")
    @classmethod
    def _fix_username(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("password", mode="before")
    @classmethod
    def _fix_password(cls, value: Any) -> Any:
        return "" if value is None else value


class PersonalAccessTokenCredential(BaseCredential):
    """A personal access token for a self-hosted server.

    The token is normalised once at construction: ``None`` becomes ``""``
    and surrounding whitespace is stripped.  The stored value is never
    ``None``, never changes afterwards, and is kept out of ``repr``.  No
    hashing or encryption happens here; protecting the value at rest is the
    store's job.

    Example::

        cred = PersonalAccessTokenCredential(id="pat", token="  s3cret\\n")
        assert cred.token == "s3cret"
    """

    kind: Literal["personal_access_token"] = "personal_access_token"
    token: str = Field(default="", repr=False)

    @field_validator("token", mode="before")
    @classmethod
    def _normalise_token(cls, value: Any) -> Any:
        if value is None:
            return ""
        return str(value).strip()


Credential = Annotated[
    Union[UsernamePasswordCredential, PersonalAccessTokenCredential],
    Field(discriminator="kind"),
]
"""Any concrete credential variant, discriminated by ``kind``."""


class CredentialStoreData(BaseModel):
    """On-disk shape of a :class:`~bbcreds.credentials.store.FileCredentialStore`.

    ``grants`` maps a principal name to the item full names it may use
    credentials from; ``"*"`` grants every item.
    """

    credentials: list[Credential] = Field(default_factory=list)
    grants: dict[str, list[str]] = Field(default_factory=dict)


# --- Validation ---


class ValidationKind(str, enum.Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class ValidationResult(BaseModel):
    """Outcome of validating a single credential form field."""

    kind: ValidationKind = ValidationKind.OK
    message: Optional[str] = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls()

    @classmethod
    def warning(cls, message: str) -> ValidationResult:
        return cls(kind=ValidationKind.WARNING, message=message)

    @classmethod
    def error(cls, message: str) -> ValidationResult:
        return cls(kind=ValidationKind.ERROR, message=message)

    @property
    def is_ok(self) -> bool:
        """``True`` unless this result is an error (warnings still pass)."""
        return self.kind is not ValidationKind.ERROR


# --- Configuration ---


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/bbcreds/config.json``.

    Loaded and saved by :func:`~bbcreds.config.load_global_config` and
    :func:`~bbcreds.config.save_global_config`.
    """

    credentials_file: Optional[str] = Field(
        default=None, description="Path to the credential store JSON file"
    )
    system_principal: str = Field(
        default="SYSTEM",
        description="Name of the elevated principal used for non-task lookups",
    )
    output: OutputConfig = Field(default_factory=OutputConfig)
