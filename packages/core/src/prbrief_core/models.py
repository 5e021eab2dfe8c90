"""Data model shared by every stage of the review pipeline.

Everything here is a frozen dataclass: a ChangeSetContext is assembled once per
review and read by every later stage, so nothing downstream may mutate it.
Parsed blocks and artifacts are created once, rendered once, then discarded.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ChangeKind(str, Enum):
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"
    RENAMED = "renamed"

    @classmethod
    def from_status(cls, status: str | None) -> ChangeKind:
        """Map a GitHub file status onto the four kinds the prompt knows about.

        GitHub also reports "copied", "changed" and "unchanged"; for review
        purposes those read as modifications.
        """
        try:
            return cls((status or "").lower())
        except ValueError:
            return cls.MODIFIED


class ReviewMode(str, Enum):
    SUMMARY = "summary"  # summary + suggestions only
    ANALYSIS = "analysis"  # plus one analysis section per file
    INLINE = "inline"  # plus line-anchored comments

    @property
    def wants_file_analyses(self) -> bool:
        return self is not ReviewMode.SUMMARY

    @property
    def wants_inline_comments(self) -> bool:
        return self is ReviewMode.INLINE


@dataclass(frozen=True)
class FileChange:
    path: str
    change_kind: ChangeKind
    diff_text: str = ""
    lines_added: int = 0
    lines_removed: int = 0
    current_content: str | None = None
    previous_path: str | None = None

    def __post_init__(self):
        if self.lines_added < 0 or self.lines_removed < 0:
            raise ValueError(f"Line counts for {self.path!r} must be non-negative.")


@dataclass(frozen=True)
class ChangeSetContext:
    """Everything the model is told about one pull request."""

    title: str
    commit_messages: tuple[str, ...] = ()
    files: tuple[FileChange, ...] = ()
    description: str = ""
    head_ref: str = ""

    def __post_init__(self):
        seen: set[str] = set()
        for f in self.files:
            if f.path in seen:
                raise ValueError(f"Duplicate path in change set: {f.path!r}")
            seen.add(f.path)

    def paths(self) -> set[str]:
        return {f.path for f in self.files}

    def get_file(self, path: str) -> FileChange | None:
        for f in self.files:
            if f.path == path:
                return f
        return None


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    cached_tokens: int | None = None

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


@dataclass(frozen=True)
class RawModelReply:
    text: str
    usage: TokenUsage = field(default_factory=TokenUsage)
    model: str = ""


@dataclass(frozen=True)
class InlineComment:
    # None means the model's <line> value was not an integer. The raw text is
    # kept so the reconciler can log what it dropped.
    line: int | None
    body: str
    raw_line: str = ""


@dataclass(frozen=True)
class FileAnalysis:
    path: str
    analysis: str = ""
    inline_comments: tuple[InlineComment, ...] = ()


@dataclass(frozen=True)
class ParsedReviewBlock:
    summary: str = ""
    file_analyses: tuple[FileAnalysis, ...] = ()
    suggestions: tuple[str, ...] = ()
    extraction_failed: bool = False

    @classmethod
    def empty(cls) -> ParsedReviewBlock:
        """The fallback value returned whenever extraction fails."""
        return cls(extraction_failed=True)


@dataclass(frozen=True)
class AnchoredComment:
    path: str
    line: int
    body: str


@dataclass(frozen=True)
class ReviewedFile:
    path: str
    analysis: str = ""
    comments: tuple[AnchoredComment, ...] = ()
    # Valid comments whose line is outside the diff hunks: shown in the body,
    # never submitted as anchored review comments.
    unanchored: tuple[AnchoredComment, ...] = ()


@dataclass(frozen=True)
class ReviewArtifact:
    summary: str
    files: tuple[ReviewedFile, ...] = ()
    suggestions: tuple[str, ...] = ()
    extraction_failed: bool = False

    def inline_comments(self) -> list[AnchoredComment]:
        return [c for f in self.files for c in f.comments]


@dataclass(frozen=True)
class RenderedOutput:
    body: str
    comments: tuple[AnchoredComment, ...] = ()


@dataclass(frozen=True)
class ChangeSetEvent:
    """The subset of a pull_request webhook payload the pipeline needs."""

    repo: str
    number: int
    title: str = ""
    description: str = ""
    base_ref: str = ""
    head_ref: str = ""
    action: str = "opened"
    draft: bool = False


@dataclass(frozen=True)
class ReviewOutcome:
    """Returned by the pipeline entry point so callers can log what happened."""

    repo: str
    number: int
    mode: ReviewMode
    artifact: ReviewArtifact
    rendered: RenderedOutput
    usage: TokenUsage = field(default_factory=TokenUsage)
    cost_usd: float | None = None
    posted: bool = False
