"""init command: one-time setup for a repository.

Writes .prbrief.yml and, on request, a GitHub Actions workflow that runs
`prbrief handle-event` whenever a pull request is opened.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click
import yaml
from rich.console import Console

from prbrief_core.models import ReviewMode

console = Console()

CONFIG_FILE = Path(".prbrief.yml")
WORKFLOW_FILE = Path(".github/workflows/prbrief.yml")

_KEY_ENV = {"anthropic": "ANTHROPIC_API_KEY", "openai": "OPENAI_API_KEY"}

_MODE_HELP = {
    ReviewMode.SUMMARY: "one summary paragraph and suggestions",
    ReviewMode.ANALYSIS: "adds a section per changed file (default)",
    ReviewMode.INLINE: "adds line-anchored review comments",
}

# Doubled braces survive str.format() as the ${{ }} expressions Actions expects.
_WORKFLOW_TEMPLATE = """\
name: prbrief

on:
  pull_request:
    types: [opened]

jobs:
  review:
    runs-on: ubuntu-latest
    permissions:
      contents: read
      pull-requests: write
    steps:
      - uses: actions/checkout@v4
      - uses: actions/setup-python@v5
        with:
          python-version: "3.12"
      - run: pip install "prbrief[{provider}]=={version}"
      - name: Summarise pull request
        run: prbrief handle-event
        env:
          GITHUB_TOKEN: ${{{{ secrets.GITHUB_TOKEN }}}}
          {key_env}: ${{{{ secrets.{key_env} }}}}
"""


@click.command("init")
def init_cmd():
    """Create .prbrief.yml and, optionally, a GitHub Actions workflow."""
    console.print("\n[bold cyan]prbrief init[/bold cyan]\n")

    provider = click.prompt("Model provider", type=click.Choice(list(_KEY_ENV)), default="anthropic")

    console.print("\nReview modes:")
    for m, text in _MODE_HELP.items():
        console.print(f"  [bold]{m.value:<9}[/bold] {text}")
    mode = click.prompt("Mode", type=click.Choice([m.value for m in ReviewMode]), default=ReviewMode.ANALYSIS.value)

    _write_config({"model": provider, "mode": mode})
    console.print(f"[green]Wrote {CONFIG_FILE}[/green]")

    if click.confirm(f"\nAlso write {WORKFLOW_FILE}?", default=True):
        key_env = _KEY_ENV[provider]
        _write_workflow(provider, key_env)
        console.print(f"[green]Wrote {WORKFLOW_FILE}[/green]")
        console.print(f"\n[yellow]Add a [bold]{key_env}[/bold] secret to the repository before the first run.[/yellow]")

    console.print("\n[bold green]Done.[/bold green]")


def _write_config(values: dict) -> None:
    """Merge values into .prbrief.yml; keys the wizard doesn't ask about are kept."""
    current = (yaml.safe_load(CONFIG_FILE.read_text()) or {}) if CONFIG_FILE.exists() else {}
    current.update(values)
    CONFIG_FILE.write_text(yaml.dump(current, default_flow_style=False, sort_keys=False))


def _package_version() -> str:
    try:
        return version("prbrief")
    except PackageNotFoundError:
        return "0.1.0"


def _write_workflow(provider: str, key_env: str) -> None:
    WORKFLOW_FILE.parent.mkdir(parents=True, exist_ok=True)
    WORKFLOW_FILE.write_text(_WORKFLOW_TEMPLATE.format(provider=provider, key_env=key_env, version=_package_version()))
