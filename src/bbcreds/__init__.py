"""bbcreds -- credential matching and lookup for Bitbucket Cloud and Server.

This package decides which stored credentials apply to a Bitbucket target
and looks one up by id on behalf of a requesting job, under that job's
effective identity.

Typical use::

    from bbcreds.credentials import lookup_credentials, matcher_for_url

    matcher = matcher_for_url(server_url, endpoint_configuration)
    credential = lookup_credentials(
        server_url, job, "deploy-token", matcher,
        store=store, system_principal=SYSTEM_PRINCIPAL,
    )

Modules:
    models: Pydantic models shared across the entire package.
    domains: Credential domains and URI requirements.
    context: Task authentication resolution.
    credentials: Matchers, lookup, stores and credential type descriptors.
    endpoints: Cloud/Server endpoint models and their registry.
    config: XDG-aware configuration and persistence.
    app: Typer application and CLI entry point.
"""

__version__ = "0.1.0"
