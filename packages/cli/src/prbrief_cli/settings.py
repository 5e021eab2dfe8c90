"""Config loading shared by the commands that run a review."""

from __future__ import annotations

import click


def resolve_config(ctx: click.Context, cli_overrides: dict | None = None) -> dict:
    """Load config, attach the GitHub token and check the model credentials.

    Raises click.UsageError for anything the user has to fix before a review
    can start.
    """
    from prbrief_cli.auth import require_model_key, resolve_github_token
    from prbrief_core.config import load_config, validate_config

    config_path = (ctx.obj or {}).get("config_path", ".prbrief.yml")
    config = load_config(config_path, cli_overrides=cli_overrides)

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token

    try:
        validate_config(config)
    except ValueError as e:
        raise click.UsageError(str(e))
    require_model_key(config)
    return config
