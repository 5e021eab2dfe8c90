"""review command: summarise and review one pull request by number."""

from __future__ import annotations

import click
from rich.console import Console

from prbrief_cli.settings import resolve_config
from prbrief_core.errors import ContextFetchFatal, ModelUnavailable
from prbrief_core.gh.pull_request import get_pull, get_pull_requests, get_repo
from prbrief_core.models import ChangeSetEvent, ReviewMode
from prbrief_core.pipeline import build_runtime, review_change_set

console = Console()


def _choose_pull_request(repo) -> int | None:
    """Show the open pull requests and ask for one. None when there are none."""
    open_prs = list(get_pull_requests(repo))
    if not open_prs:
        console.print("[yellow]No open pull requests in this repository.[/yellow]")
        return None
    console.print(f"\n{len(open_prs)} open pull request(s):")
    for pr in open_prs:
        console.print(f"  [bold]#{pr.number}[/bold]  {pr.title}")
    return click.prompt("\nPull request to review", type=int)


@click.command("review")
@click.option("--repo", required=True, help="Repository as OWNER/NAME.")
@click.option("--pr", "pr_number", type=int, default=None, help="Pull request number; prompts when omitted.")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in ReviewMode]),
    default=None,
    help="summary, analysis (per-file sections) or inline (line comments). Overrides .prbrief.yml.",
)
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="Model provider. Overrides .prbrief.yml.",
)
@click.option("--guidelines", "guidelines_path", default=None, help="Markdown file with team review rules.")
@click.option("--yes", "-y", is_flag=True, help="Post without asking.")
@click.option("--shadow", "-s", is_flag=True, help="Print the review here instead of posting it.")
@click.pass_context
def review_cmd(ctx, repo, pr_number, mode, model, guidelines_path, yes, shadow):
    """Summarise and review a GitHub pull request.

    \b
    Environment:
      GITHUB_TOKEN        token with pull request write access (or `gh auth login`)
      ANTHROPIC_API_KEY   for --model anthropic
      OPENAI_API_KEY      for --model openai (OPENAI_BASE_URL for compatible APIs)
    """
    config = resolve_config(ctx, cli_overrides={"model": model, "mode": mode, "guidelines": guidelines_path})
    gh_repo = get_repo(repo, token=config["github_token"])

    if pr_number is None:
        pr_number = _choose_pull_request(gh_repo)
        if pr_number is None:
            return

    pr = get_pull(gh_repo, pr_number)
    event = ChangeSetEvent(
        repo=repo,
        number=pr_number,
        title=pr.title or "",
        description=pr.body or "",
        base_ref=pr.base.sha,
        head_ref=pr.head.sha,
        action="manual",
        draft=bool(pr.draft),
    )
    if event.draft and not config.get("review_draft_prs", False):
        console.print("[yellow]Skipping draft PR (set review_draft_prs: true to include drafts).[/yellow]")
        return

    runtime = build_runtime(config, gh_repo)
    try:
        outcome = review_change_set(event, runtime, auto_confirm=yes, shadow=shadow)
    except (ContextFetchFatal, ModelUnavailable) as e:
        raise click.ClickException(str(e))

    if outcome.artifact.extraction_failed:
        console.print("[yellow]The model reply could not be interpreted; the fallback summary was used.[/yellow]")
    usage = outcome.usage
    cost = f" · ~${outcome.cost_usd:.4f}" if outcome.cost_usd is not None else ""
    tokens = f"{usage.prompt_tokens} prompt / {usage.completion_tokens} completion tokens ({usage.total_tokens} total)"
    console.print(f"[dim]{tokens}{cost}[/dim]")
