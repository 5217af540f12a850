"""Credential commands -- manage the credential store and run lookups.

Provides the ``bbcreds credentials`` sub-command group.  Secrets are read
from a source descriptor (``env:VAR``, ``file:/path`` or ``prompt``), never
from a literal command-line argument, and are never printed back.

Typical workflow::

    bbcreds credentials add-token deploy --token-source env:BB_TOKEN --host "git.corp"
    bbcreds credentials grant ci-bot team/repo
    bbcreds credentials lookup deploy --item team/repo --task --run-as ci-bot \\
        --url https://git.corp/scm
"""

from __future__ import annotations

from typing import Any, Optional

import typer

from bbcreds.config import (
    get_credentials_path,
    load_endpoint_configuration,
    load_global_config,
    resolve_secret,
    system_principal_for,
)
from bbcreds.credentials import (
    CredentialsMatcher,
    FileCredentialStore,
    create_default_registry,
    lookup_credentials,
    matcher_for_any,
    matcher_for_cloud,
    matcher_for_server,
    matcher_for_url,
)
from bbcreds.domains import Domain, HostnameSpecification, SchemeSpecification
from bbcreds.exceptions import BBCredsError, InvalidUsageError, NotFoundError
from bbcreds.models import (
    ROOT_CONTEXT,
    BaseCredential,
    CredentialsScope,
    Item,
    Principal,
    Task,
    UsernamePasswordCredential,
)
from bbcreds.output import (
    debug,
    error,
    format_response,
    info,
    print_table,
    success,
    suggest,
    warning,
)


credentials_app = typer.Typer(no_args_is_help=True)

_MATCHERS = ("cloud", "server", "any", "url")


def describe_credential(credential: BaseCredential) -> dict[str, Any]:
    """Render *credential* as a dict with every secret field left out."""
    record: dict[str, Any] = {
        "id": credential.id,
        "kind": getattr(credential, "kind", type(credential).__name__),
        "scope": credential.scope.value,
        "domain": credential.domain.name or "(global)",
        "description": credential.description,
    }
    if isinstance(credential, UsernamePasswordCredential):
        record["username"] = credential.username
    return record


def _open_store(ctx: typer.Context) -> FileCredentialStore:
    obj = ctx.obj or {}
    config = load_global_config()
    store = FileCredentialStore(get_credentials_path(config, obj.get("credentials_file")))
    store.load()
    debug(f"Credential store: {store.path} ({len(store)} credentials)")
    return store


def _build_domain(host: Optional[str], scheme: Optional[str]) -> Domain:
    specifications: list[Any] = []
    if host:
        specifications.append(HostnameSpecification(includes=host))
    if scheme:
        specifications.append(SchemeSpecification(schemes=scheme))
    if not specifications:
        return Domain()
    return Domain(name=host or scheme, specifications=specifications)


def _parse_scope(scope: str) -> CredentialsScope:
    try:
        return CredentialsScope(scope.upper())
    except ValueError:
        allowed = ", ".join(s.value for s in CredentialsScope)
        raise InvalidUsageError(f"Unknown scope '{scope}'. Expected one of: {allowed}") from None


def _add_credential(ctx: typer.Context, kind: str, fields: dict[str, Any]) -> None:
    registry = create_default_registry()
    descriptor = registry.get_descriptor(kind)
    for result in descriptor.validate(fields):
        if result.is_ok and result.message:
            warning(result.message)
    credential = registry.create(kind, fields)
    store = _open_store(ctx)
    replacing = store.get(credential.id) is not None
    store.add(credential)
    store.save()
    verb = "Updated" if replacing else "Added"
    success(f"{verb} {descriptor.display_name} '{credential.id}'.")


@credentials_app.command("list")
def credentials_list(ctx: typer.Context) -> None:
    """List stored credentials (secrets are never shown)."""
    try:
        store = _open_store(ctx)
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    rows = []
    for credential in store:
        record = describe_credential(credential)
        rows.append(
            [record["id"], record["kind"], record["scope"], record["domain"], record["description"]]
        )
    if not rows:
        info(f"No credentials in {store.path}.")
    print_table(["ID", "KIND", "SCOPE", "DOMAIN", "DESCRIPTION"], rows, title="Credentials")


@credentials_app.command("add-token")
def credentials_add_token(
    ctx: typer.Context,
    credentials_id: str = typer.Argument(help="Credential id."),
    token_source: str = typer.Option(
        "prompt", "--token-source", "-t", help="Token source: env:VAR, file:/path, prompt."
    ),
    scope: str = typer.Option("GLOBAL", "--scope", help="GLOBAL, SYSTEM or USER."),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    host: Optional[str] = typer.Option(
        None, "--host", help="Restrict to host names matching these glob patterns."
    ),
    scheme: Optional[str] = typer.Option(None, "--scheme", help="Restrict to these URL schemes."),
) -> None:
    """Store a Bitbucket Server personal access token."""
    try:
        fields = {
            "id": credentials_id,
            "scope": _parse_scope(scope),
            "description": description,
            "domain": _build_domain(host, scheme),
            "token": resolve_secret(token_source),
        }
        _add_credential(ctx, "personal_access_token", fields)
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@credentials_app.command("add-password")
def credentials_add_password(
    ctx: typer.Context,
    credentials_id: str = typer.Argument(help="Credential id."),
    username: str = typer.Option(..., "--username", "-u"),
    password_source: str = typer.Option(
        "prompt", "--password-source", "-p", help="Password source: env:VAR, file:/path, prompt."
    ),
    scope: str = typer.Option("GLOBAL", "--scope", help="GLOBAL, SYSTEM or USER."),
    description: Optional[str] = typer.Option(None, "--description", "-d"),
    host: Optional[str] = typer.Option(None, "--host"),
    scheme: Optional[str] = typer.Option(None, "--scheme"),
) -> None:
    """Store a username with password."""
    try:
        fields = {
            "id": credentials_id,
            "scope": _parse_scope(scope),
            "description": description,
            "domain": _build_domain(host, scheme),
            "username": username,
            "password": resolve_secret(password_source),
        }
        _add_credential(ctx, "username_password", fields)
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


@credentials_app.command("remove")
def credentials_remove(
    ctx: typer.Context,
    credentials_id: str = typer.Argument(help="Credential id."),
) -> None:
    """Remove a stored credential."""
    try:
        store = _open_store(ctx)
        if not store.remove(credentials_id):
            raise NotFoundError(f"No credential with id '{credentials_id}'")
        store.save()
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Removed '{credentials_id}'.")


@credentials_app.command("grant")
def credentials_grant(
    ctx: typer.Context,
    principal: str = typer.Argument(help="Principal name."),
    item: str = typer.Argument(help="Item full name, or '*' for every item."),
) -> None:
    """Allow a principal to use credentials from an item."""
    try:
        store = _open_store(ctx)
        store.grant(principal, item)
        store.save()
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Granted '{principal}' access to '{item}'.")


def _select_matcher(name: str, url: Optional[str]) -> CredentialsMatcher:
    if name == "cloud":
        return matcher_for_cloud()
    if name == "server":
        return matcher_for_server()
    if name == "any":
        return matcher_for_any()
    if name == "url":
        return matcher_for_url(url, load_endpoint_configuration())
    raise InvalidUsageError(
        f"Unknown matcher '{name}'. Expected one of: {', '.join(_MATCHERS)}"
    )


@credentials_app.command("lookup")
def credentials_lookup(
    ctx: typer.Context,
    credentials_id: str = typer.Argument(help="Credential id to look up."),
    item: Optional[str] = typer.Option(
        None, "--item", "-i", help="Requesting item full name (default: root context)."
    ),
    task: bool = typer.Option(False, "--task", help="Treat the item as a schedulable task."),
    run_as: Optional[str] = typer.Option(
        None, "--run-as", help="Default authentication of the task."
    ),
    url: Optional[str] = typer.Option(None, "--url", help="Target server URL."),
    matcher: Optional[str] = typer.Option(
        None,
        "--matcher",
        "-m",
        help="cloud, server, any or url (default: url when --url is given, else any).",
    ),
) -> None:
    """Look up a credential the way a job would, and print it without secrets.

    Exits with code 4 when no visible credential matches.
    """
    try:
        config = load_global_config()
        store = _open_store(ctx)
        selected = _select_matcher(matcher or ("url" if url else "any"), url)
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    context: Item
    if task:
        context = Task(
            full_name=item or "",
            default_authentication=Principal(name=run_as) if run_as else None,
        )
    elif item:
        context = Item(full_name=item)
    else:
        context = ROOT_CONTEXT

    credential = lookup_credentials(
        url,
        context,
        credentials_id,
        selected,
        store=store,
        system_principal=system_principal_for(config),
    )
    if credential is None:
        error(f"No applicable credential '{credentials_id}' for this context.")
        if isinstance(context, Task):
            suggest(
                "Tasks run as their own identity; grant it access with "
                f"'bbcreds credentials grant PRINCIPAL {context.full_name or '*'}'"
            )
        raise typer.Exit(code=NotFoundError.exit_code)
    format_response(describe_credential(credential))
