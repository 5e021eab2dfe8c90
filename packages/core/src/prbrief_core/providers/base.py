"""Base model client implementing the Template Method pattern.

All providers share the same call shape:
    invoke() → _call_api()   ← only this differs per provider
             → RawModelReply (text + token usage)

Subclasses implement two things only:
  - __init__: validate and store the SDK client
  - _call_api: make one raw API call and return a RawModelReply

invoke() makes exactly one attempt. Every SDK exception is re-raised as
ModelUnavailable with the original chained as __cause__.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from prbrief_core.errors import ModelUnavailable
from prbrief_core.models import RawModelReply
from prbrief_core.prompt import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

_MAX_TOKENS = 4096


class BaseModelClient(ABC):
    MODEL: str = ""
    TEMPERATURE: float = 0.2
    MAX_TOKENS: int = _MAX_TOKENS

    def __init__(self, model: str | None = None, temperature: float | None = None, max_tokens: int | None = None):
        self.model = model or self.MODEL
        self.temperature = self.TEMPERATURE if temperature is None else temperature
        self.max_tokens = max_tokens or self.MAX_TOKENS

    def invoke(self, prompt: str) -> RawModelReply:
        """Send one prompt and return the model's free-text reply."""
        try:
            reply = self._call_api(SYSTEM_PROMPT, prompt)
        except Exception as e:
            logger.error("%s call to %s failed: %s", self.__class__.__name__, self.model, e)
            raise ModelUnavailable(f"{self.model} is unavailable: {e}") from e

        logger.info(
            "%s replied: %d prompt token(s), %d completion token(s)",
            reply.model or self.model,
            reply.usage.prompt_tokens,
            reply.usage.completion_tokens,
        )
        return reply

    @abstractmethod
    def _call_api(self, system_prompt: str, user_prompt: str) -> RawModelReply:
        """Make a single API call and return the reply with usage.

        This is the only method subclasses must implement. It should raise
        on failure; invoke() converts the exception.
        """
