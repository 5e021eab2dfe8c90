"""Deterministic prompt construction.

The tag names below are the only contract between the prompt and the
extractor. extractor.py imports them from here, so the instructions the model
reads and the parser that reads the model's answer can never drift apart.
"""

from __future__ import annotations

from prbrief_core.models import ChangeKind, ChangeSetContext, FileChange, ReviewMode

ROOT_TAG = "review"
OPEN_MARKER = f"<{ROOT_TAG}>"
CLOSE_MARKER = f"</{ROOT_TAG}>"

TAG_SUMMARY = "summary"
TAG_FILES = "fileAnalyses"
TAG_FILE = "file"
TAG_PATH = "path"
TAG_ANALYSIS = "analysis"
TAG_COMMENTS = "inlineComments"
TAG_COMMENT = "comment"
TAG_LINE = "line"
TAG_BODY = "body"
TAG_SUGGESTIONS = "suggestions"
TAG_SUGGESTION = "suggestion"

CONTENT_PLACEHOLDER = "[content unavailable]"
NO_DIFF_PLACEHOLDER = "(no diff available)"
NO_COMMITS_PLACEHOLDER = "No commit messages"
TRUNCATION_MARKER = "\n... [truncated]"

SYSTEM_PROMPT = """You are a senior software engineer reviewing a pull request.
Be concise, specific and actionable. Base every statement on the diff and file
contents you are given; do not speculate about code you cannot see."""


def _truncate(text: str, max_chars: int) -> str:
    if max_chars and len(text) > max_chars:
        return text[:max_chars] + TRUNCATION_MARKER
    return text


def _file_section(f: FileChange, max_chars: int) -> str:
    header = f"### `{f.path}` ({f.change_kind.value}, +{f.lines_added}/-{f.lines_removed})"
    lines = [header]
    if f.change_kind is ChangeKind.RENAMED and f.previous_path:
        lines.append(f"Renamed from `{f.previous_path}`")

    diff = _truncate(f.diff_text, max_chars) if f.diff_text else NO_DIFF_PLACEHOLDER
    lines += ["", "#### Diff", "```diff", diff, "```"]

    content = _truncate(f.current_content, max_chars) if f.current_content is not None else CONTENT_PLACEHOLDER
    lines += ["", "#### Current Content", "```", content, "```"]
    return "\n".join(lines)


def _cdata(text: str) -> str:
    return f"<![CDATA[{text}]]>"


def _free_text_tags(mode: ReviewMode) -> list[str]:
    """Tags whose content is prose that may contain &, < or >."""
    tags = [TAG_SUMMARY]
    if mode.wants_file_analyses:
        tags.append(TAG_ANALYSIS)
    if mode.wants_inline_comments:
        tags.append(TAG_BODY)
    tags.append(TAG_SUGGESTION)
    return tags


def _skeleton(mode: ReviewMode) -> str:
    """Example of the block the model must emit, built from the tag constants."""
    summary = _cdata("One paragraph on what the pull request does and its overall quality.")
    out = [OPEN_MARKER, f"  <{TAG_SUMMARY}>{summary}</{TAG_SUMMARY}>"]
    if mode.wants_file_analyses:
        out.append(f"  <{TAG_FILES}>")
        out.append(f"    <{TAG_FILE}>")
        out.append(f"      <{TAG_PATH}>exact/path/of/a/changed/file.ext</{TAG_PATH}>")
        out.append(f"      <{TAG_ANALYSIS}>{_cdata('What changed in this file and any concerns.')}</{TAG_ANALYSIS}>")
        if mode.wants_inline_comments:
            out.append(f"      <{TAG_COMMENTS}>")
            out.append(f"        <{TAG_COMMENT}>")
            out.append(f"          <{TAG_LINE}>42</{TAG_LINE}>")
            out.append(f"          <{TAG_BODY}>{_cdata('Comment about new-file line 42.')}</{TAG_BODY}>")
            out.append(f"        </{TAG_COMMENT}>")
            out.append(f"      </{TAG_COMMENTS}>")
        out.append(f"    </{TAG_FILE}>")
        out.append(f"  </{TAG_FILES}>")
    else:
        out.append(f"  <{TAG_FILES}></{TAG_FILES}>")
    out.append(f"  <{TAG_SUGGESTIONS}>")
    out.append(f"    <{TAG_SUGGESTION}>{_cdata('One concrete improvement.')}</{TAG_SUGGESTION}>")
    out.append(f"  </{TAG_SUGGESTIONS}>")
    out.append(CLOSE_MARKER)
    return "\n".join(out)


def _instructions(mode: ReviewMode) -> str:
    free_text = ", ".join(f"<{tag}>" for tag in _free_text_tags(mode))
    rules = [
        f"- Put your entire structured answer between a single {OPEN_MARKER} and {CLOSE_MARKER} pair.",
        f"- Use exactly these tag names: {TAG_SUMMARY}, {TAG_FILES}, {TAG_SUGGESTIONS} at the top level.",
        f"- Always include <{TAG_SUMMARY}>, <{TAG_FILES}> and <{TAG_SUGGESTIONS}>, even when they are empty.",
        f"- Repeat <{TAG_SUGGESTION}> once per suggestion.",
        f"- Wrap the text of every {free_text} in <![CDATA[ ... ]]>. "
        "Outside CDATA the characters &, < and > break the block.",
    ]
    if mode.wants_file_analyses:
        rules.append(
            f"- Add one <{TAG_FILE}> per changed file. Copy <{TAG_PATH}> exactly from the file headings above."
        )
    else:
        rules.append(f"- Leave <{TAG_FILES}> empty: only the summary and suggestions are wanted.")
    if mode.wants_inline_comments:
        rules.append(
            f"- Inside each <{TAG_FILE}>, list line-specific remarks in <{TAG_COMMENTS}>, one <{TAG_COMMENT}> each."
        )
        rules.append(
            f"- <{TAG_LINE}> is a single integer line number in the new version of the file, "
            "and must be a line shown in the diff."
        )
    rules.append("- Do not use any other tags inside the block.")

    return "\n".join(
        [
            "## Output Format",
            "You may think out loud first, but you must end your answer with a block in this exact format:",
            "",
            _skeleton(mode),
            "",
            "Rules:",
            *rules,
        ]
    )


def build_prompt(
    context: ChangeSetContext,
    mode: ReviewMode,
    *,
    max_chars_per_file: int = 20000,
    guidelines: str | None = None,
) -> str:
    """Render the change set and the output instructions into one prompt.

    Pure: the same context, mode and options always produce the same string.
    """
    sections = [
        "Review the following pull request.",
        f"## Pull Request Title\n{context.title}",
    ]
    if context.description.strip():
        sections.append(f"## Description\n{context.description}")

    if context.commit_messages:
        commits = "\n".join(f"- {m}" for m in context.commit_messages)
    else:
        commits = f"- {NO_COMMITS_PLACEHOLDER}"
    sections.append(f"## Commit Messages\n{commits}")

    if context.files:
        files = "\n\n".join(_file_section(f, max_chars_per_file) for f in context.files)
    else:
        files = "No files changed."
    sections.append(f"## Changed Files\n\n{files}")

    if guidelines:
        sections.append(f"## Review Guidelines\n{guidelines.strip()}")

    sections.append(_instructions(mode))
    return "\n\n".join(sections) + "\n"
