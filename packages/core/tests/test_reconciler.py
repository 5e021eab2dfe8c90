"""Tests for reconciling a parsed block against the real change set."""

from prbrief_core.models import (
    ChangeKind,
    ChangeSetContext,
    FileAnalysis,
    FileChange,
    InlineComment,
    ParsedReviewBlock,
    ReviewArtifact,
)
from prbrief_core.reconciler import FALLBACK_SUMMARY, commentable_lines, reconcile

# New-file lines 1-3 are covered: " a" = 1, "+b" = 2, " c" = 3.
PATCH = "@@ -1,2 +1,3 @@\n a\n+b\n c"


def _context(*paths: str, patch: str = PATCH) -> ChangeSetContext:
    return ChangeSetContext(
        title="t",
        files=tuple(FileChange(path=p, change_kind=ChangeKind.MODIFIED, diff_text=patch) for p in paths),
    )


def _block(*analyses: FileAnalysis, summary="S", suggestions=("X",)) -> ParsedReviewBlock:
    return ParsedReviewBlock(summary=summary, file_analyses=analyses, suggestions=suggestions)


# ---------------------------------------------------------------------------
# commentable_lines
# ---------------------------------------------------------------------------


class TestCommentableLines:
    def test_single_hunk_covers_added_and_context_lines(self):
        assert commentable_lines(PATCH) == {1, 2, 3}

    def test_removed_lines_do_not_advance_new_file_line(self):
        patch = "@@ -1,3 +1,2 @@\n context\n-removed\n+added"
        assert commentable_lines(patch) == {1, 2}

    def test_multiple_hunks(self):
        patch = "@@ -1,2 +1,2 @@\n a\n+b\n@@ -10,2 +20,2 @@\n c\n+d"
        assert commentable_lines(patch) == {1, 2, 20, 21}

    def test_no_newline_marker_ignored(self):
        patch = "@@ -1 +1 @@\n-old\n+new\n\\ No newline at end of file"
        assert commentable_lines(patch) == {1}

    def test_patch_without_hunk_header_returns_none(self):
        assert commentable_lines("-x\n+y") is None

    def test_empty_patch_returns_none(self):
        assert commentable_lines("") is None

    def test_malformed_hunk_header_does_not_raise(self):
        assert commentable_lines("@@ bad header @@\n+line one") is None


# ---------------------------------------------------------------------------
# reconcile
# ---------------------------------------------------------------------------


class TestReconcile:
    def test_fallback_when_extraction_failed(self):
        artifact = reconcile(ParsedReviewBlock.empty(), _context("a.ts"))
        assert artifact.extraction_failed is True
        assert artifact.summary == FALLBACK_SUMMARY
        assert artifact.summary.strip() != ""
        assert artifact.files == ()
        assert artifact.suggestions == ()

    def test_summary_and_suggestions_pass_through(self):
        artifact = reconcile(_block(summary="Looks good", suggestions=("Add a test",)), _context())
        assert artifact.summary == "Looks good"
        assert artifact.suggestions == ("Add a test",)

    def test_blank_suggestions_dropped(self):
        artifact = reconcile(_block(suggestions=("keep", "  ", "")), _context())
        assert artifact.suggestions == ("keep",)

    def test_unknown_path_omitted_without_error(self):
        block = _block(FileAnalysis("nonexistent.ts", "ghost"), FileAnalysis("a.ts", "real"))
        artifact = reconcile(block, _context("a.ts"))
        assert [f.path for f in artifact.files] == ["a.ts"]

    def test_path_match_is_exact(self):
        artifact = reconcile(_block(FileAnalysis("./a.ts", "x"), FileAnalysis("A.ts", "y")), _context("a.ts"))
        assert artifact.files == ()

    def test_unparseable_line_dropped_rest_of_file_kept(self):
        fa = FileAnalysis(
            "a.ts",
            "analysis text",
            (InlineComment(line=None, body="bad", raw_line="abc"), InlineComment(line=2, body="good")),
        )
        artifact = reconcile(_block(fa), _context("a.ts"))
        reviewed = artifact.files[0]
        assert reviewed.analysis == "analysis text"
        assert [(c.line, c.body) for c in reviewed.comments] == [(2, "good")]

    def test_non_positive_lines_dropped(self):
        fa = FileAnalysis("a.ts", "x", (InlineComment(0, "zero"), InlineComment(-3, "negative")))
        artifact = reconcile(_block(fa), _context("a.ts"))
        assert artifact.files[0].comments == ()
        assert artifact.files[0].unanchored == ()

    def test_empty_body_dropped(self):
        fa = FileAnalysis("a.ts", "x", (InlineComment(2, ""),))
        assert reconcile(_block(fa), _context("a.ts")).files[0].comments == ()

    def test_line_outside_diff_is_demoted(self):
        fa = FileAnalysis("a.ts", "x", (InlineComment(2, "in diff"), InlineComment(50, "outside")))
        reviewed = reconcile(_block(fa), _context("a.ts")).files[0]
        assert [c.line for c in reviewed.comments] == [2]
        assert [c.line for c in reviewed.unanchored] == [50]

    def test_line_trusted_when_diff_has_no_hunks(self):
        fa = FileAnalysis("a.ts", "x", (InlineComment(50, "trusted"),))
        reviewed = reconcile(_block(fa), _context("a.ts", patch="-x\n+y")).files[0]
        assert [c.line for c in reviewed.comments] == [50]

    def test_anchored_comment_carries_file_path(self):
        fa = FileAnalysis("a.ts", "x", (InlineComment(1, "note"),))
        comment = reconcile(_block(fa), _context("a.ts")).inline_comments()[0]
        assert comment.path == "a.ts"

    def test_repeated_path_entries_merged(self):
        block = _block(
            FileAnalysis("a.ts", "first", (InlineComment(1, "one"),)),
            FileAnalysis("a.ts", "second", (InlineComment(2, "two"),)),
        )
        artifact = reconcile(block, _context("a.ts"))
        assert len(artifact.files) == 1
        assert artifact.files[0].analysis == "first\n\nsecond"
        assert [c.line for c in artifact.files[0].comments] == [1, 2]

    def test_empty_context_and_block(self):
        artifact = reconcile(ParsedReviewBlock(), ChangeSetContext(title=""))
        assert isinstance(artifact, ReviewArtifact)
        assert artifact.summary == ""
        assert artifact.files == ()
        assert artifact.suggestions == ()

    def test_order_follows_model_output(self):
        block = _block(FileAnalysis("b.py", "b"), FileAnalysis("a.py", "a"))
        artifact = reconcile(block, _context("a.py", "b.py"))
        assert [f.path for f in artifact.files] == ["b.py", "a.py"]

    def test_file_without_patch_demotes_every_comment(self):
        context = ChangeSetContext(
            title="t",
            files=(FileChange(path="b.ts", change_kind=ChangeKind.RENAMED, diff_text="", previous_path="a.ts"),),
        )
        fa = FileAnalysis("b.ts", "moved", (InlineComment(3, "x"),))
        reviewed = reconcile(_block(fa), context).files[0]
        assert reviewed.comments == ()
        assert [(c.line, c.body) for c in reviewed.unanchored] == [(3, "x")]

    def test_unknown_paths_logged(self, caplog):
        with caplog.at_level("INFO", logger="prbrief_core.reconciler"):
            reconcile(_block(FileAnalysis("ghost.ts", "boo")), _context("a.ts"))
        assert "ghost.ts" in caplog.text
