"""Resolve the principal a task's credential lookups run as.

A lookup made on behalf of a schedulable :class:`~bbcreds.models.Task`
must respect the identity configured for that task; otherwise anyone able
to edit a job could reach credentials the job's identity cannot see.
:class:`TaskAuthenticationResolver` answers "who is this task?" in a fixed
order:

1. the first non-``None`` answer from a registered authenticator,
2. the task's own ``default_authentication``,
3. :data:`~bbcreds.models.ANONYMOUS_PRINCIPAL`.

It never falls back to an elevated identity.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from bbcreds.models import ANONYMOUS_PRINCIPAL, Principal, Task

logger = logging.getLogger(__name__)

TaskAuthenticator = Callable[[Task], Optional[Principal]]
"""A hook that may assign a principal to a task, or return ``None`` to pass."""


class TaskAuthenticationResolver:
    """Resolve a task's default authentication.

    Args:
        authenticators: Hooks consulted in order before the task's own
            configuration, e.g. a site-wide "run every job as its owner"
            policy.

    Example::

        resolver = TaskAuthenticationResolver()
        resolver.register(lambda task: Principal(name="ci-bot"))
        resolver.default_authentication_of(Task(full_name="team/repo"))
        # Principal(name='ci-bot', system=False)
    """

    def __init__(self, authenticators: Iterable[TaskAuthenticator] = ()) -> None:
        self._authenticators: list[TaskAuthenticator] = list(authenticators)

    def register(self, authenticator: TaskAuthenticator) -> None:
        """Append *authenticator* to the consultation order."""
        self._authenticators.append(authenticator)

    def default_authentication_of(self, task: Task) -> Principal:
        """Return the principal *task* runs as."""
        for authenticator in self._authenticators:
            principal = authenticator(task)
            if principal is not None:
                logger.debug(
                    "Task '%s' authenticated as '%s' by authenticator",
                    task.full_name,
                    principal.name,
                )
                return principal
        if task.default_authentication is not None:
            return task.default_authentication
        return ANONYMOUS_PRINCIPAL
