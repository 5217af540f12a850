"""Endpoint commands -- manage configured Bitbucket endpoints.

Provides the ``bbcreds endpoints`` sub-command group.  Endpoints are saved
to ``endpoints.json`` in the config directory.  With none configured, the
cloud endpoint is the only one.
"""

from __future__ import annotations

from typing import Optional

import typer

from bbcreds.config import load_endpoint_configuration, save_endpoint_configuration
from bbcreds.credentials import matcher_for_url
from bbcreds.endpoints import BitbucketServerEndpoint
from bbcreds.exceptions import BBCredsError, InvalidUsageError, NotFoundError
from bbcreds.output import error, format_response, print_table, success


endpoints_app = typer.Typer(no_args_is_help=True)


@endpoints_app.command("list")
def endpoints_list() -> None:
    """List configured endpoints."""
    try:
        configuration = load_endpoint_configuration()
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    rows = [
        [
            endpoint.descriptor.display_name,
            endpoint.display_name,
            endpoint.server_url,
            "yes" if endpoint.manage_hooks else "no",
            endpoint.credentials_id or "",
        ]
        for endpoint in configuration.endpoints
    ]
    print_table(["TYPE", "NAME", "URL", "MANAGE HOOKS", "CREDENTIALS"], rows, title="Endpoints")


@endpoints_app.command("add-server")
def endpoints_add_server(
    server_url: str = typer.Argument(help="Server URL, e.g. https://git.corp.example"),
    name: Optional[str] = typer.Option(None, "--name", help="Display name."),
    manage_hooks: bool = typer.Option(False, "--manage-hooks", help="Manage repository hooks."),
    credentials_id: Optional[str] = typer.Option(
        None, "--credentials-id", help="Credential used to manage hooks."
    ),
) -> None:
    """Register a self-hosted Bitbucket Server."""
    try:
        configuration = load_endpoint_configuration()
        endpoint = BitbucketServerEndpoint(
            name=name,
            server_url=server_url,
            manage_hooks=manage_hooks,
            credentials_id=credentials_id,
        )
        if not configuration.add_endpoint(endpoint):
            raise InvalidUsageError(f"An endpoint for {endpoint.server_url} is already configured")
        save_endpoint_configuration(configuration)
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Added endpoint {endpoint.server_url}.")


@endpoints_app.command("remove")
def endpoints_remove(
    server_url: str = typer.Argument(help="Server URL of the endpoint to remove."),
) -> None:
    """Remove a configured endpoint."""
    try:
        configuration = load_endpoint_configuration()
        if not configuration.remove_endpoint(server_url):
            if configuration.find_endpoint(server_url) is not None:
                raise InvalidUsageError(f"{server_url} is the default endpoint and cannot be removed")
            raise NotFoundError(f"No endpoint configured for {server_url}")
        save_endpoint_configuration(configuration)
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    success(f"Removed endpoint {server_url}.")


@endpoints_app.command("matcher")
def endpoints_matcher(
    server_url: Optional[str] = typer.Argument(None, help="Server URL (default: cloud)."),
) -> None:
    """Show which credentials matcher applies to a URL."""
    try:
        configuration = load_endpoint_configuration()
    except BBCredsError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    endpoint = configuration.find_endpoint(server_url)
    matcher = matcher_for_url(server_url, configuration)
    format_response(
        {
            "url": server_url,
            "endpoint": endpoint.display_name if endpoint is not None else None,
            "matcher": matcher.describe(),
        }
    )
