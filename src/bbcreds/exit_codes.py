"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~bbcreds.exceptions.BBCredsError` subclass.
CI scripts wrapping ``bbcreds`` can inspect the exit code to tell a missing
credential apart from a broken configuration without parsing stderr.

Example::

    $ bbcreds credentials lookup deploy-token --item team/repo
    $ echo $?
    4   # EXIT_NOT_FOUND -- no visible credential matched
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or rejected field values."""

EXIT_NOT_FOUND = 4
"""The requested credential or endpoint was not found."""

EXIT_INTERRUPTED = 130
"""The user pressed Ctrl-C (128 + SIGINT)."""
