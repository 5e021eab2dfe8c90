"""Inbound pull_request webhook payloads."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from prbrief_core.models import ChangeSetEvent

logger = logging.getLogger(__name__)


def parse_pull_request_event(
    event_name: str | None,
    payload: dict,
    trigger_actions: Iterable[str] = ("opened",),
) -> ChangeSetEvent | None:
    """Return a ChangeSetEvent for a pull_request event we should review.

    Returns None for any other event type, for actions not in trigger_actions,
    and for payloads that lack the repository or pull request fields.
    """
    if event_name not in ("pull_request", "pull_request_target"):
        logger.debug("Ignoring %r event", event_name)
        return None

    action = payload.get("action")
    if action not in set(trigger_actions):
        logger.debug("Ignoring pull_request action %r", action)
        return None

    pr = payload.get("pull_request") or {}
    repo = payload.get("repository") or {}
    full_name = repo.get("full_name")
    if not full_name:
        owner = (repo.get("owner") or {}).get("login")
        name = repo.get("name")
        full_name = f"{owner}/{name}" if owner and name else None

    number = pr.get("number", payload.get("number"))
    if not full_name or number is None:
        logger.warning("pull_request payload is missing repository or number; ignoring")
        return None

    return ChangeSetEvent(
        repo=full_name,
        number=int(number),
        title=pr.get("title") or "",
        description=pr.get("body") or "",
        base_ref=(pr.get("base") or {}).get("sha", ""),
        head_ref=(pr.get("head") or {}).get("sha", ""),
        action=action,
        draft=bool(pr.get("draft", False)),
    )
