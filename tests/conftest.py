"""Shared test fixtures for bbcreds.

Provides isolated config environments, sample credentials, a recording
store for observing which principal a lookup runs as, and a CLI runner.
These fixtures are automatically discovered by pytest and available to
all test modules without explicit imports.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from bbcreds.credentials.store import CredentialStore, InMemoryCredentialStore
from bbcreds.domains import DomainRequirement
from bbcreds.models import (
    BaseCredential,
    Item,
    PersonalAccessTokenCredential,
    Principal,
    UsernamePasswordCredential,
)
from bbcreds.output import reset_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time.  When Typer's CliRunner redirects those streams during
    a test and the test finishes, the cached references become stale.
    Resetting forces a fresh manager to be created on next use.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Forces XDG path resolution and points XDG_CONFIG_HOME and
    XDG_DATA_HOME at subdirectories of tmp_path so that tests never touch
    real user config.  Clears ``BBCREDS_CREDENTIALS_FILE`` and changes the
    working directory to tmp_path.

    Returns:
        The tmp_path root directory for additional file creation.
    """
    monkeypatch.setattr("bbcreds.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.delenv("BBCREDS_CREDENTIALS_FILE", raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Credential fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def password_credential() -> UsernamePasswordCredential:
    return UsernamePasswordCredential(id="a", username="alice", password="hunter2")


@pytest.fixture
def token_credential() -> PersonalAccessTokenCredential:
    return PersonalAccessTokenCredential(id="b", token="s3cret")


@pytest.fixture
def two_credential_store(
    password_credential: UsernamePasswordCredential,
    token_credential: PersonalAccessTokenCredential,
) -> InMemoryCredentialStore:
    """Store holding ``a`` (username/password) then ``b`` (token)."""
    return InMemoryCredentialStore(credentials=[password_credential, token_credential])


class RecordingStore(CredentialStore):
    """Store that returns fixed credentials and records every enumeration."""

    def __init__(self, credentials: list[BaseCredential]) -> None:
        self.credentials = list(credentials)
        self.calls: list[tuple[Item, Principal, list[DomainRequirement]]] = []

    def lookup_credentials(
        self,
        context: Item,
        principal: Principal,
        requirements: list[DomainRequirement],
    ) -> list[BaseCredential]:
        self.calls.append((context, principal, requirements))
        return list(self.credentials)

    def has_permission(self, principal: Principal, context: Item) -> bool:
        return True


@pytest.fixture
def recording_store(
    password_credential: UsernamePasswordCredential,
    token_credential: PersonalAccessTokenCredential,
) -> RecordingStore:
    return RecordingStore([password_credential, token_credential])


# ---------------------------------------------------------------------------
# CLI runner fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
