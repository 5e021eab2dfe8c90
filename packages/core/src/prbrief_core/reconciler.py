"""Reconcile a parsed review block against the change set it claims to review.

The model may name files that are not in the pull request, or give line
numbers that are not numbers. None of that is an error here: such entries
are dropped and the rest of the review goes ahead.
"""

from __future__ import annotations

import logging

from prbrief_core.models import (
    AnchoredComment,
    ChangeSetContext,
    FileAnalysis,
    ParsedReviewBlock,
    ReviewArtifact,
    ReviewedFile,
)

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY = "Analysis unavailable: the model reply could not be interpreted."


def commentable_lines(patch_text: str) -> set[int] | None:
    """Return the new-file line numbers covered by the patch's hunks.

    Added and context lines are commentable, removed lines are not. Returns
    None when the patch has no parseable @@ header, meaning the caller has
    nothing to check a line number against.
    """
    lines: set[int] = set()
    file_line: int | None = None
    saw_hunk = False

    for line in patch_text.splitlines():
        if line.startswith("@@"):
            try:
                new_file_range = line.split("+")[1].split(" ")[0]
                file_line = int(new_file_range.split(",")[0])
                saw_hunk = True
            except (IndexError, ValueError):
                file_line = None
            continue
        if file_line is None or line.startswith("\\"):
            continue  # outside a hunk, or "\ No newline at end of file"
        if line.startswith("-"):
            continue  # removed line, no new-file line number
        lines.add(file_line)
        file_line += 1

    return lines if saw_hunk else None


def _merge_by_path(analyses: tuple[FileAnalysis, ...]) -> list[FileAnalysis]:
    """Fold repeated entries for the same path into one, keeping first-seen order."""
    merged: dict[str, FileAnalysis] = {}
    for fa in analyses:
        prev = merged.get(fa.path)
        if prev is None:
            merged[fa.path] = fa
            continue
        analysis = "\n\n".join(t for t in (prev.analysis, fa.analysis) if t)
        merged[fa.path] = FileAnalysis(fa.path, analysis, prev.inline_comments + fa.inline_comments)
    return list(merged.values())


def _reconcile_file(fa: FileAnalysis, allowed: set[int] | None) -> ReviewedFile:
    anchored: list[AnchoredComment] = []
    unanchored: list[AnchoredComment] = []
    for c in fa.inline_comments:
        if c.line is None or c.line <= 0:
            logger.debug("Dropping comment on %s with invalid line %r", fa.path, c.raw_line)
            continue
        if not c.body:
            continue
        comment = AnchoredComment(path=fa.path, line=c.line, body=c.body)
        if allowed is not None and c.line not in allowed:
            logger.debug("Line %d of %s is outside the diff; not anchoring", c.line, fa.path)
            unanchored.append(comment)
        else:
            anchored.append(comment)
    return ReviewedFile(path=fa.path, analysis=fa.analysis, comments=tuple(anchored), unanchored=tuple(unanchored))


def _allowed_lines(diff_text: str) -> set[int] | None:
    # A file GitHub sent without a patch has no line a review comment can anchor to.
    if not diff_text.strip():
        return set()
    return commentable_lines(diff_text)


def reconcile(parsed: ParsedReviewBlock, context: ChangeSetContext) -> ReviewArtifact:
    """Build the presentation-ready artifact. Never raises."""
    if parsed.extraction_failed:
        return ReviewArtifact(summary=FALLBACK_SUMMARY, extraction_failed=True)

    known = context.paths()
    unknown = sorted({fa.path for fa in parsed.file_analyses} - known)
    if unknown:
        logger.info("Dropping analyses for paths outside the change set: %s", ", ".join(unknown))

    files = [
        _reconcile_file(fa, _allowed_lines(context.get_file(fa.path).diff_text))
        for fa in _merge_by_path(parsed.file_analyses)
        if fa.path in known
    ]

    return ReviewArtifact(
        summary=parsed.summary,
        files=tuple(files),
        suggestions=tuple(s for s in parsed.suggestions if s.strip()),
        extraction_failed=False,
    )
