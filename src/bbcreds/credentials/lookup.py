"""Look up a credential by id on behalf of a requesting context.

:func:`lookup_credentials` is the one operation callers need: given a
target URL, the requesting item, a credential id and a matcher, return the
first visible credential with that id that the matcher accepts.

Every "no" collapses to ``None``: a blank id, a missing context, a
principal that may not see anything, a credential of the wrong variant.
Callers treat the result as optional and never branch on the reason, and a
caller without access learns nothing about which credentials exist.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from bbcreds.context import TaskAuthenticationResolver
from bbcreds.credentials.matchers import (
    CredentialsMatcher,
    all_of,
    first_or_none,
    matcher_for_any,
    with_id,
)
from bbcreds.credentials.store import CredentialStore
from bbcreds.domains import requirements_from_uri
from bbcreds.models import ROOT_CONTEXT, BaseCredential, Item, Principal, Task

if TYPE_CHECKING:
    from bbcreds.endpoints.base import AbstractEndpoint

logger = logging.getLogger(__name__)

_DEFAULT_RESOLVER = TaskAuthenticationResolver()


def lookup_credentials(
    server_url: Optional[str],
    context: Optional[Item],
    credentials_id: Optional[str],
    matcher: CredentialsMatcher,
    *,
    store: CredentialStore,
    system_principal: Principal,
    resolver: Optional[TaskAuthenticationResolver] = None,
) -> Optional[BaseCredential]:
    """Look up the credential *credentials_id* as seen by *context*.

    Args:
        server_url: The URL the credential will be used against.  It only
            narrows the candidates by domain; ``None`` imposes no
            restriction.
        context: The item accessing the repository.  ``None`` never yields
            a result.
        credentials_id: The id to match exactly.  A blank id never yields a
            result.
        matcher: Filters applicable credential variants, e.g.
            :func:`~bbcreds.credentials.matchers.matcher_for_server`.
        store: Where credentials are enumerated from.
        system_principal: Identity used for contexts that are not tasks.
        resolver: Resolves a task's default authentication.  Defaults to a
            resolver with no authenticators.

    Returns:
        The first matching credential in store order, or ``None``.
    """
    if credentials_id is None or not credentials_id.strip() or context is None:
        return None

    if isinstance(context, Task):
        principal = (resolver or _DEFAULT_RESOLVER).default_authentication_of(context)
    else:
        principal = system_principal

    candidates = store.lookup_credentials(
        context, principal, requirements_from_uri(server_url)
    )
    credential = first_or_none(candidates, all_of(with_id(credentials_id), matcher))
    logger.debug(
        "Lookup of '%s' for '%s' as '%s': %s",
        credentials_id,
        context.full_name,
        principal.name,
        "found" if credential is not None else "not found",
    )
    return credential


def endpoint_credentials(
    endpoint: AbstractEndpoint,
    *,
    store: CredentialStore,
    system_principal: Principal,
) -> Optional[BaseCredential]:
    """Return the credential an endpoint uses to manage repository hooks.

    The lookup runs from the root context under *system_principal*, scoped
    to the endpoint's URL, and filtered by the endpoint's preferred matcher.

    Returns:
        The credential, or ``None`` when the endpoint does not manage hooks,
        has no credentials id, or the credential cannot be found.
    """
    if not endpoint.manage_hooks or endpoint.credentials_id is None:
        return None
    matcher = endpoint.descriptor.credentials_matcher() or matcher_for_any()
    return lookup_credentials(
        endpoint.server_url,
        ROOT_CONTEXT,
        endpoint.credentials_id,
        matcher,
        store=store,
        system_principal=system_principal,
    )
