"""Pull the tagged review block out of the model's free-text reply.

Two stages, each usable on its own:

    locate_block()  finds the first <review> ... </review> span by plain
                    substring search. No span, no parse.
    parse_block()   parses only that span as XML and maps it onto a
                    ParsedReviewBlock, raising BlockParseError on any
                    structural problem or missing required field.

extract_review() chains the two and turns every failure into
ParsedReviewBlock.empty(). It never raises.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from prbrief_core.errors import BlockParseError
from prbrief_core.models import FileAnalysis, InlineComment, ParsedReviewBlock
from prbrief_core.prompt import (
    CLOSE_MARKER,
    OPEN_MARKER,
    ROOT_TAG,
    TAG_ANALYSIS,
    TAG_BODY,
    TAG_COMMENT,
    TAG_COMMENTS,
    TAG_FILE,
    TAG_FILES,
    TAG_LINE,
    TAG_PATH,
    TAG_SUGGESTION,
    TAG_SUGGESTIONS,
    TAG_SUMMARY,
)

logger = logging.getLogger(__name__)

_REQUIRED_TAGS = (TAG_SUMMARY, TAG_FILES, TAG_SUGGESTIONS)
_EXCERPT_CHARS = 200


def locate_block(text: str) -> str | None:
    """Return the first OPEN_MARKER..CLOSE_MARKER span, markers included.

    The closing marker is searched for only after the opening one, so a
    stray closing tag earlier in the text can't produce an inverted span.
    """
    start = text.find(OPEN_MARKER)
    if start == -1:
        return None
    end = text.find(CLOSE_MARKER, start + len(OPEN_MARKER))
    if end == -1:
        return None
    return text[start : end + len(CLOSE_MARKER)]


def _text(el: ET.Element | None) -> str:
    if el is None:
        return ""
    return "".join(el.itertext()).strip()


def _parse_line(raw: str) -> int | None:
    try:
        return int(raw.strip())
    except ValueError:
        return None


def _parse_comments(file_el: ET.Element) -> tuple[InlineComment, ...]:
    container = file_el.find(TAG_COMMENTS)
    if container is None:
        return ()
    comments = []
    for comment_el in container.findall(TAG_COMMENT):
        raw_line = _text(comment_el.find(TAG_LINE))
        comments.append(
            InlineComment(
                line=_parse_line(raw_line),
                body=_text(comment_el.find(TAG_BODY)),
                raw_line=raw_line,
            )
        )
    return tuple(comments)


def _parse_files(files_el: ET.Element) -> tuple[FileAnalysis, ...]:
    analyses = []
    for file_el in files_el.findall(TAG_FILE):
        path = _text(file_el.find(TAG_PATH))
        if not path:
            logger.debug("Skipping <%s> entry without a <%s>", TAG_FILE, TAG_PATH)
            continue
        analyses.append(
            FileAnalysis(
                path=path,
                analysis=_text(file_el.find(TAG_ANALYSIS)),
                inline_comments=_parse_comments(file_el),
            )
        )
    return tuple(analyses)


def parse_block(span: str) -> ParsedReviewBlock:
    """Parse a located block. Raises BlockParseError on any violation.

    All three top-level fields must be present. An empty list is fine, but a
    block that has a summary and no <suggestions> element is rejected as a
    whole rather than shown as a confident, incomplete review.
    """
    try:
        root = ET.fromstring(span)
    except ET.ParseError as e:
        raise BlockParseError(f"Malformed review block: {e}") from e

    if root.tag != ROOT_TAG:
        raise BlockParseError(f"Unexpected root element <{root.tag}>")

    elements = {tag: root.find(tag) for tag in _REQUIRED_TAGS}
    missing = [tag for tag, el in elements.items() if el is None]
    if missing:
        raise BlockParseError(f"Review block is missing required field(s): {', '.join(missing)}")

    return ParsedReviewBlock(
        summary=_text(elements[TAG_SUMMARY]),
        file_analyses=_parse_files(elements[TAG_FILES]),
        suggestions=tuple(_text(s) for s in elements[TAG_SUGGESTIONS].findall(TAG_SUGGESTION)),
        extraction_failed=False,
    )


def extract_review(text: str) -> ParsedReviewBlock:
    """Locate and parse the review block, falling back to an empty block."""
    text = text or ""
    span = locate_block(text)
    if span is None:
        logger.warning("No %s...%s block in model reply: %r", OPEN_MARKER, CLOSE_MARKER, text[:_EXCERPT_CHARS])
        return ParsedReviewBlock.empty()
    try:
        return parse_block(span)
    except BlockParseError as e:
        logger.warning("Could not parse review block (%s): %r", e, span[:_EXCERPT_CHARS])
        return ParsedReviewBlock.empty()
