"""CLI entry point for prbrief.

Commands:
  review        review one pull request and post the result
  handle-event  review the pull request described by a webhook payload file
  init          write .prbrief.yml and an optional GitHub Actions workflow
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prbrief_cli.commands.event import event_cmd
from prbrief_cli.commands.init import init_cmd
from prbrief_cli.commands.review import review_cmd


def _configure_logging(verbose: bool) -> None:
    """Send library logs to stderr through rich; DEBUG with -v, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)],
    )
    # PyGithub and the SDK HTTP clients are very chatty at DEBUG.
    for noisy in ("github", "urllib3", "httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


@click.group()
@click.version_option(
    version=importlib.metadata.version("prbrief"),
    prog_name="prbrief",
)
@click.option(
    "--config",
    "config_path",
    default=".prbrief.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRBRIEF_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logs.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """AI pull request summaries and reviews for GitHub."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


main.add_command(review_cmd)
main.add_command(event_cmd)
main.add_command(init_cmd)
