"""GitHub read/write adapters for the review pipeline (PyGithub).

The pipeline only ever talks to these two classes through three read calls
and two write calls, so tests can swap in any object with the same methods.
"""

from __future__ import annotations

import logging

from github import Github, GithubException

from prbrief_core.errors import FileContentUnavailable, PublishError
from prbrief_core.models import AnchoredComment, ChangeKind, FileChange

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_pull_requests(repo, state: str = "open"):
    return repo.get_pulls(state=state)


def to_file_change(gh_file) -> FileChange:
    """Convert a PyGithub File into a FileChange without content."""
    kind = ChangeKind.from_status(gh_file.status)
    return FileChange(
        path=gh_file.filename,
        change_kind=kind,
        # Binary files and very large diffs come back with patch=None.
        diff_text=gh_file.patch or "",
        lines_added=gh_file.additions or 0,
        lines_removed=gh_file.deletions or 0,
        previous_path=getattr(gh_file, "previous_filename", None) if kind is ChangeKind.RENAMED else None,
    )


class GitHubChangeSource:
    """Read side: changed files, commit messages and file contents."""

    def __init__(self, repo):
        self.repo = repo

    def list_changed_files(self, number: int) -> list[FileChange]:
        pr = self.repo.get_pull(number)
        return [to_file_change(f) for f in pr.get_files()]

    def list_messages(self, number: int) -> list[str]:
        pr = self.repo.get_pull(number)
        return [c.commit.message for c in pr.get_commits()]

    def get_file_content(self, path: str, ref: str) -> str:
        try:
            contents = self.repo.get_contents(path, ref=ref)
        except GithubException as e:
            raise FileContentUnavailable(path, f"GitHub returned {e.status}") from e
        # get_contents returns a list when the path is a directory.
        if isinstance(contents, list):
            raise FileContentUnavailable(path, "path is a directory")
        return contents.decoded_content.decode("utf-8", errors="replace")


class GitHubPublisher:
    """Write side: one issue comment, or one (possibly batched) review."""

    def __init__(self, repo, batch_limit: int = 60):
        self.repo = repo
        self.batch_limit = max(1, batch_limit)

    def post_comment(self, number: int, body: str) -> None:
        try:
            self.repo.get_pull(number).create_issue_comment(body)
        except GithubException as e:
            raise PublishError(f"Could not post comment on #{number}: {e}") from e

    def post_review(self, number: int, body: str, comments: list[AnchoredComment]) -> None:
        """Submit a COMMENT review with line-anchored comments.

        GitHub caps the number of comments per review, so large sets are split
        into batches. Earlier batches carry a progress note; the last batch
        carries the full body.
        """
        api_comments = [{"path": c.path, "line": c.line, "side": "RIGHT", "body": c.body} for c in comments]
        batches = [api_comments[i : i + self.batch_limit] for i in range(0, len(api_comments), self.batch_limit)]
        if not batches:
            batches = [[]]

        try:
            pr = self.repo.get_pull(number)
            posted = 0
            for idx, batch in enumerate(batches):
                posted += len(batch)
                is_last = idx == len(batches) - 1
                batch_body = body if is_last else f"Review in progress ({posted}/{len(api_comments)} comments)..."
                pr.create_review(body=batch_body, event="COMMENT", comments=batch)
        except GithubException as e:
            raise PublishError(f"Could not post review on #{number}: {e}") from e
        logger.debug("Posted review on #%d in %d batch(es)", number, len(batches))
