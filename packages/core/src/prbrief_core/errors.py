"""Error taxonomy for the review pipeline.

Failures before the model has returned any text (listing the change set,
calling the model) abort the review. Failures in interpreting the reply are
recovered inside the extractor and reconciler and never reach the caller.
"""

from __future__ import annotations


class PrbriefError(Exception):
    """Base class for every error raised by prbrief_core."""


class ContextFetchFatal(PrbriefError):
    """The file list or commit list for a change set could not be retrieved."""


class FileContentUnavailable(PrbriefError):
    """A single file's content could not be fetched at the head ref.

    Tolerated by the context assembler: the file is kept with no content.
    """

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}" if reason else path)


class ModelUnavailable(PrbriefError):
    """The model call could not be completed (network, auth, quota)."""


class BlockParseError(PrbriefError):
    """The tagged review block is malformed or missing a required field."""


class PublishError(PrbriefError):
    """Posting the rendered review back to the pull request failed."""
