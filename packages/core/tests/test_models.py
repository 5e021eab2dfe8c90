"""Tests for the shared data model."""

import dataclasses

import pytest

from prbrief_core.models import (
    AnchoredComment,
    ChangeKind,
    ChangeSetContext,
    FileChange,
    ParsedReviewBlock,
    ReviewArtifact,
    ReviewedFile,
    ReviewMode,
    TokenUsage,
)


class TestChangeKind:
    @pytest.mark.parametrize("status", ["added", "modified", "removed", "renamed"])
    def test_known_statuses(self, status):
        assert ChangeKind.from_status(status).value == status

    def test_case_insensitive(self):
        assert ChangeKind.from_status("ADDED") is ChangeKind.ADDED


class TestReviewMode:
    def test_summary_wants_nothing_per_file(self):
        assert not ReviewMode.SUMMARY.wants_file_analyses
        assert not ReviewMode.SUMMARY.wants_inline_comments

    def test_analysis_wants_files_only(self):
        assert ReviewMode.ANALYSIS.wants_file_analyses
        assert not ReviewMode.ANALYSIS.wants_inline_comments

    def test_inline_wants_both(self):
        assert ReviewMode.INLINE.wants_file_analyses
        assert ReviewMode.INLINE.wants_inline_comments


class TestChangeSetContext:
    def test_duplicate_paths_rejected(self):
        f = FileChange(path="a.py", change_kind=ChangeKind.MODIFIED)
        with pytest.raises(ValueError, match="Duplicate"):
            ChangeSetContext(title="t", files=(f, f))

    def test_is_immutable(self):
        ctx = ChangeSetContext(title="t")
        with pytest.raises(dataclasses.FrozenInstanceError):
            ctx.title = "changed"

    def test_get_file_missing(self):
        assert ChangeSetContext(title="t").get_file("a.py") is None


def test_negative_line_counts_rejected():
    with pytest.raises(ValueError):
        FileChange(path="a.py", change_kind=ChangeKind.ADDED, lines_added=-1)


def test_total_tokens():
    assert TokenUsage(prompt_tokens=10, completion_tokens=5).total_tokens == 15


def test_empty_block_is_failed():
    block = ParsedReviewBlock.empty()
    assert block.extraction_failed is True
    assert (block.summary, block.file_analyses, block.suggestions) == ("", (), ())


def test_artifact_inline_comments_flattened_in_file_order():
    artifact = ReviewArtifact(
        summary="s",
        files=(
            ReviewedFile("a.py", comments=(AnchoredComment("a.py", 1, "x"),)),
            ReviewedFile("b.py", comments=(AnchoredComment("b.py", 2, "y"),)),
        ),
    )
    assert [c.path for c in artifact.inline_comments()] == ["a.py", "b.py"]
