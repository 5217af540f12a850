"""Exception hierarchy for bbcreds.

All exceptions inherit from :class:`BBCredsError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`bbcreds.exit_codes`.
The top-level error handler in :func:`bbcreds.app.main` catches
``BBCredsError`` and exits with the appropriate code.

The matcher and lookup core never raises these: a credential that does not
exist and one the caller may not see both come back as ``None``. Exceptions
only surface at the configuration and command-line boundaries.

Subclass hierarchy::

    BBCredsError (exit 1)
    +-- InvalidUsageError          (exit 2)
    |   +-- CredentialValidationError
    +-- NotFoundError              (exit 4)
    +-- ConfigError                (exit 1)
"""

from __future__ import annotations

from bbcreds.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
)


class BBCredsError(Exception):
    """Base exception for all bbcreds errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(BBCredsError):
    """Raised for invalid CLI arguments or unknown credential kinds."""

    exit_code = EXIT_INVALID_USAGE


class CredentialValidationError(InvalidUsageError):
    """Raised when credential fields fail their descriptor's validation.

    Args:
        kind: The credential kind being created.
        messages: Every error message reported by the descriptor.
    """

    def __init__(self, kind: str, messages: list[str]):
        self.kind = kind
        self.messages = list(messages)
        super().__init__(f"Invalid {kind} credential: " + "; ".join(self.messages))


class NotFoundError(BBCredsError):
    """Raised by commands when a credential or endpoint does not exist."""

    exit_code = EXIT_NOT_FOUND


class ConfigError(BBCredsError):
    """Raised for configuration problems (invalid JSON, bad secret sources)."""

    exit_code = EXIT_GENERIC_FAILURE
