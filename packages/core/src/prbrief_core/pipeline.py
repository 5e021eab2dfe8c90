"""Core PR review orchestration.

One review runs the stages strictly in order:

    assemble_context → build_prompt → invoke → extract_review
                     → reconcile → render → publish

Listing failures (ContextFetchFatal) and model failures (ModelUnavailable)
abort the review before anything is posted. Everything after the model has
replied degrades instead of failing, so a reply always produces a comment,
even if that comment only says the analysis is unavailable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape

from prbrief_core.config import load_guidelines
from prbrief_core.context import assemble_context
from prbrief_core.errors import ContextFetchFatal, ModelUnavailable, PublishError
from prbrief_core.extractor import extract_review
from prbrief_core.gh.pull_request import GitHubChangeSource, GitHubPublisher
from prbrief_core.models import ChangeSetEvent, RenderedOutput, ReviewMode, ReviewOutcome
from prbrief_core.pricing import estimate_cost
from prbrief_core.prompt import build_prompt
from prbrief_core.providers.anthropic import AnthropicClient
from prbrief_core.providers.base import BaseModelClient
from prbrief_core.providers.openai import OpenAIClient
from prbrief_core.reconciler import reconcile
from prbrief_core.renderer import render

console = Console()
logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReviewRuntime:
    """Process-lifetime collaborators and settings, built once at startup.

    Passed explicitly into every review; nothing in the pipeline reads
    module-level clients or configuration.
    """

    source: object  # list_changed_files / list_messages / get_file_content
    publisher: object  # post_comment / post_review
    model_client: BaseModelClient
    mode: ReviewMode = ReviewMode.ANALYSIS
    max_chars_per_file: int = 20000
    exclude: tuple[str, ...] = ()
    guidelines: str | None = None
    review_draft_prs: bool = False


def get_model_client(config: dict) -> BaseModelClient:
    model = config["model"]
    options = {
        "model": config.get("model_name"),
        "temperature": config.get("temperature"),
        "max_tokens": config.get("max_tokens"),
    }
    if model == "anthropic":
        return AnthropicClient(api_key=config["anthropic_api_key"], **options)
    if model == "openai":
        return OpenAIClient(api_key=config["openai_api_key"], base_url=config.get("openai_base_url"), **options)
    raise ValueError(f"Unknown model provider: {model!r}. Choose 'anthropic' or 'openai'.")


def build_runtime(config: dict, repo) -> ReviewRuntime:
    """Wire the GitHub adapters and the model client for one repository."""
    return ReviewRuntime(
        source=GitHubChangeSource(repo),
        publisher=GitHubPublisher(repo, batch_limit=config.get("batch_limit", 60)),
        model_client=get_model_client(config),
        mode=ReviewMode(config.get("mode", ReviewMode.ANALYSIS.value)),
        max_chars_per_file=config.get("max_chars_per_file", 20000),
        exclude=tuple(config.get("exclude") or ()),
        guidelines=load_guidelines(config),
        review_draft_prs=config.get("review_draft_prs", False),
    )


def print_shadow_output(rendered: RenderedOutput) -> None:
    """Print the rendered review to the terminal without posting to GitHub."""
    console.print("\n[bold]Shadow review (not posted)[/bold]\n")
    console.print(Markdown(rendered.body))
    if not rendered.comments:
        return
    console.print(f"\n[bold]{len(rendered.comments)} inline comment(s)[/bold]\n")
    for c in rendered.comments:
        console.print(f"[bold cyan]{escape(c.path)}[/bold cyan]  line [bold]{c.line}[/bold]")
        console.print(f"  {escape(c.body)}")
        console.print()


def publish(event: ChangeSetEvent, rendered: RenderedOutput, runtime: ReviewRuntime) -> None:
    if runtime.mode.wants_inline_comments:
        runtime.publisher.post_review(event.number, rendered.body, list(rendered.comments))
        console.print(f"[green]Review posted with {len(rendered.comments)} inline comment(s).[/green]")
    else:
        runtime.publisher.post_comment(event.number, rendered.body)
        console.print("[green]Review comment posted.[/green]")


def review_change_set(
    event: ChangeSetEvent,
    runtime: ReviewRuntime,
    auto_confirm: bool = True,
    shadow: bool = False,
) -> ReviewOutcome:
    """Run one review end to end and return what happened.

    Raises ContextFetchFatal or ModelUnavailable; nothing is posted then.
    A failed post is logged and reported as posted=False.
    """
    console.print(f"Reviewing {event.repo}#{event.number}: {escape(event.title)}")

    context = assemble_context(
        runtime.source,
        event.number,
        head_ref=event.head_ref,
        title=event.title,
        description=event.description,
        exclude=runtime.exclude,
    )
    prompt = build_prompt(
        context,
        runtime.mode,
        max_chars_per_file=runtime.max_chars_per_file,
        guidelines=runtime.guidelines,
    )
    logger.debug("Prompt for %s#%d is %d chars", event.repo, event.number, len(prompt))

    reply = runtime.model_client.invoke(prompt)
    cost = estimate_cost(reply.model or runtime.model_client.model, reply.usage)
    if cost is not None:
        logger.info("Estimated cost for %s#%d: $%.4f", event.repo, event.number, cost)

    parsed = extract_review(reply.text)
    artifact = reconcile(parsed, context)
    rendered = render(artifact, runtime.mode)

    outcome_kwargs = dict(
        repo=event.repo,
        number=event.number,
        mode=runtime.mode,
        artifact=artifact,
        rendered=rendered,
        usage=reply.usage,
        cost_usd=cost,
    )

    if shadow:
        print_shadow_output(rendered)
        return ReviewOutcome(**outcome_kwargs, posted=False)

    if not auto_confirm:
        what = f"{len(rendered.comments)} inline comment(s) and a summary" if rendered.comments else "the review"
        answer = input(f"Post {what} to {event.repo}#{event.number}? (y/n): ").strip().lower()
        if answer != "y":
            return ReviewOutcome(**outcome_kwargs, posted=False)

    try:
        publish(event, rendered, runtime)
    except PublishError as e:
        logger.error("%s", e)
        console.print(f"[red]{escape(str(e))}[/red]")
        return ReviewOutcome(**outcome_kwargs, posted=False)

    return ReviewOutcome(**outcome_kwargs, posted=True)


def handle_change_set_event(
    event: ChangeSetEvent,
    runtime: ReviewRuntime,
    auto_confirm: bool = True,
    shadow: bool = False,
) -> ReviewOutcome | None:
    """Entry point for one inbound change-set event.

    Returns None when the event is skipped or the review aborts; the reason
    is logged. There is no retry: a dropped event stays dropped.
    """
    if event.draft and not runtime.review_draft_prs:
        console.print(
            "[yellow]Skipping draft PR. Set review_draft_prs: true in .prbrief.yml to review drafts.[/yellow]"
        )
        return None

    try:
        return review_change_set(event, runtime, auto_confirm=auto_confirm, shadow=shadow)
    except (ContextFetchFatal, ModelUnavailable) as e:
        logger.error("Review of %s#%d aborted: %s", event.repo, event.number, e)
        console.print(f"[red]Review aborted: {escape(str(e))}[/red]")
        return None
