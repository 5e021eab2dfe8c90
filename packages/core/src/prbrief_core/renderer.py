"""Turn a ReviewArtifact into the text GitHub will show."""

from __future__ import annotations

import re

from prbrief_core.models import AnchoredComment, RenderedOutput, ReviewArtifact, ReviewedFile, ReviewMode

FOOTER = "---\n_Generated by prbrief. This is an automated review: verify suggestions before acting on them._"

_BLANK_RUN_RE = re.compile(r"\n(?:[ \t]*\n)+")


def collapse_blank_lines(text: str) -> str:
    """Reduce every run of blank lines to a single blank line."""
    return _BLANK_RUN_RE.sub("\n\n", text.strip())


def _indent_continuation(text: str) -> str:
    return text.strip().replace("\n", "\n  ")


def _file_section(f: ReviewedFile, show_notes: bool) -> str:
    lines = [f"### `{f.path}`", "", collapse_blank_lines(f.analysis) or "_No analysis provided._"]
    if show_notes and f.unanchored:
        lines += ["", "**Notes on lines outside the diff:**"]
        lines += [f"- Line {c.line}: {_indent_continuation(c.body)}" for c in f.unanchored]
    return "\n".join(lines)


def render_body(artifact: ReviewArtifact, mode: ReviewMode) -> str:
    """Markdown body. Line comments of any kind are listed only in inline mode."""
    parts = ["## PR Summary", collapse_blank_lines(artifact.summary) or "_No summary provided._"]

    if artifact.files:
        parts.append("## File Analysis")
        parts += [_file_section(f, mode.wants_inline_comments) for f in artifact.files]

    parts.append("## Suggestions")
    if artifact.suggestions:
        parts.append("\n".join(f"- {_indent_continuation(s)}" for s in artifact.suggestions))
    else:
        parts.append("_No suggestions._")

    parts.append(FOOTER)
    return "\n\n".join(parts)


def render(artifact: ReviewArtifact, mode: ReviewMode) -> RenderedOutput:
    """Render the artifact for the given mode. Pure and total.

    Aggregate modes (summary, analysis) produce just the body. Inline mode
    also returns every anchored comment for submission as a review.
    """
    body = render_body(artifact, mode)
    comments: tuple[AnchoredComment, ...] = ()
    if mode.wants_inline_comments:
        comments = tuple(artifact.inline_comments())
    return RenderedOutput(body=body, comments=comments)
