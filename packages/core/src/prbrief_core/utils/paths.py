"""Path filters applied while assembling a change set."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable

# Content for these is never fetched: it would be bytes the model can't read,
# or (for lock files) thousands of lines of generated noise.
BINARY_EXTENSIONS = frozenset(
    {
        ".png",
        ".jpg",
        ".jpeg",
        ".gif",
        ".ico",
        ".webp",
        ".bmp",
        ".pdf",
        ".woff",
        ".woff2",
        ".ttf",
        ".eot",
        ".otf",
        ".mp3",
        ".mp4",
        ".wav",
        ".zip",
        ".tar",
        ".gz",
        ".7z",
        ".jar",
        ".so",
        ".dylib",
        ".exe",
        ".lock",
    }
)


def is_binary_path(path: str) -> bool:
    lowered = path.lower()
    return any(lowered.endswith(ext) for ext in BINARY_EXTENSIONS)


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    """Return True if path matches any exclude pattern.

    A pattern matches as an fnmatch glob against the full path or the basename
    ("*.lock" matches "web/yarn.lock"), or as a directory name anywhere in the
    tree ("migrations/" matches "app/migrations/0001.py").
    """
    basename = path.rsplit("/", 1)[-1]
    for pattern in patterns:
        if fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(basename, pattern):
            return True
        prefix = pattern.rstrip("/") + "/"
        if path.startswith(prefix) or f"/{prefix}" in path:
            return True
    return False
