"""Assemble the immutable ChangeSetContext for one pull request.

The file list and commit messages are required: if either listing fails the
review cannot go ahead and ContextFetchFatal is raised. Per-file contents are
best effort. They are fetched concurrently, pinned to the head ref, and any
failure simply leaves that file without content.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

from prbrief_core.errors import ContextFetchFatal, FileContentUnavailable
from prbrief_core.models import ChangeKind, ChangeSetContext, FileChange
from prbrief_core.utils.paths import is_binary_path, is_excluded

logger = logging.getLogger(__name__)


def _fetch_content(source, path: str, ref: str) -> str | None:
    try:
        return source.get_file_content(path, ref)
    except FileContentUnavailable as e:
        logger.debug("No content for %s at %s: %s", path, ref[:7], e.reason)
    except Exception as e:
        logger.warning("Fetching %s at %s failed, continuing without content: %s", path, ref[:7], e)
    return None


def fetch_contents(source, files: list[FileChange], ref: str) -> dict[str, str | None]:
    """Fetch the content of every given file at ref, one worker per file.

    Every fetch settles before this returns. A failure maps to None for that
    path and never cancels or affects the other fetches.
    """
    if not files:
        return {}
    with ThreadPoolExecutor(max_workers=len(files), thread_name_prefix="prbrief-fetch") as pool:
        futures = {f.path: pool.submit(_fetch_content, source, f.path, ref) for f in files}
        return {path: future.result() for path, future in futures.items()}


def _should_fetch(f: FileChange, skip_content: Callable[[str], bool]) -> bool:
    if f.change_kind is ChangeKind.REMOVED:
        return False
    return not skip_content(f.path)


def assemble_context(
    source,
    change_set_id: int,
    *,
    head_ref: str,
    title: str,
    description: str = "",
    exclude: Iterable[str] = (),
    skip_content: Callable[[str], bool] = is_binary_path,
) -> ChangeSetContext:
    """Build the ChangeSetContext for change_set_id.

    Raises ContextFetchFatal when the file list or the commit list cannot be
    retrieved. Never raises for a single file's content.
    """
    try:
        listed = list(source.list_changed_files(change_set_id))
    except Exception as e:
        raise ContextFetchFatal(f"Could not list changed files for #{change_set_id}: {e}") from e

    try:
        messages = list(source.list_messages(change_set_id))
    except Exception as e:
        raise ContextFetchFatal(f"Could not list commits for #{change_set_id}: {e}") from e

    patterns = list(exclude)
    kept = [f for f in listed if not is_excluded(f.path, patterns)]
    if len(kept) < len(listed):
        logger.info("Excluded %d file(s) by pattern", len(listed) - len(kept))

    to_fetch = [f for f in kept if _should_fetch(f, skip_content)]
    contents = fetch_contents(source, to_fetch, head_ref)

    files = tuple(replace(f, current_content=contents.get(f.path)) for f in kept)
    missing = sum(1 for f in to_fetch if contents.get(f.path) is None)
    logger.info(
        "Assembled #%d: %d file(s), %d commit(s), %d content fetch(es) unavailable",
        change_set_id,
        len(files),
        len(messages),
        missing,
    )

    return ChangeSetContext(
        title=title,
        commit_messages=tuple(messages),
        files=files,
        description=description,
        head_ref=head_ref,
    )
