"""handle-event command: review the pull request a webhook payload describes.

Inside GitHub Actions the payload of the triggering event is written to
$GITHUB_EVENT_PATH and its name to $GITHUB_EVENT_NAME, so the command needs
no arguments there.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console

from prbrief_cli.settings import resolve_config
from prbrief_core.events import parse_pull_request_event
from prbrief_core.gh.pull_request import get_repo
from prbrief_core.pipeline import build_runtime, handle_change_set_event

console = Console()


@click.command("handle-event")
@click.option(
    "--event-path",
    envvar="GITHUB_EVENT_PATH",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the webhook payload JSON. Defaults to $GITHUB_EVENT_PATH.",
)
@click.option(
    "--event-name",
    envvar="GITHUB_EVENT_NAME",
    default="pull_request",
    show_default=True,
    help="Webhook event name. Defaults to $GITHUB_EVENT_NAME.",
)
@click.option("--shadow", "-s", is_flag=True, help="Print the review instead of posting it.")
@click.pass_context
def event_cmd(ctx, event_path: str, event_name: str, shadow: bool):
    """Review the pull request from a pull_request webhook payload."""
    config = resolve_config(ctx)

    try:
        payload = json.loads(Path(event_path).read_text())
    except json.JSONDecodeError as e:
        raise click.UsageError(f"{event_path} is not valid JSON: {e}")

    event = parse_pull_request_event(event_name, payload, config.get("trigger_actions", ["opened"]))
    if event is None:
        console.print(f"[dim]Nothing to review for {event_name} / {payload.get('action')!r}.[/dim]")
        return

    runtime = build_runtime(config, get_repo(event.repo, token=config["github_token"]))
    outcome = handle_change_set_event(event, runtime, auto_confirm=True, shadow=shadow)

    skipped_draft = event.draft and not runtime.review_draft_prs
    if outcome is None and not skipped_draft:
        # Already logged by the pipeline; a non-zero exit marks the CI step failed.
        ctx.exit(1)
