from __future__ import annotations

from prbrief_core.models import RawModelReply, TokenUsage
from prbrief_core.providers.base import BaseModelClient


class AnthropicClient(BaseModelClient):
    MODEL = "claude-sonnet-4-20250514"
    # A little above the OpenAI default: review prose reads better, and the
    # tagged block is still followed reliably.
    TEMPERATURE = 0.3

    def __init__(self, api_key: str, **kwargs):
        try:
            from anthropic import Anthropic
        except ImportError:
            raise ImportError(
                "The 'anthropic' package is required for this provider. "
                "Install it with: pip install 'prbrief[anthropic]'"
            )
        super().__init__(**kwargs)
        self.client = Anthropic(api_key=api_key)

    def _call_api(self, system_prompt: str, user_prompt: str) -> RawModelReply:
        # anthropic is optional; __init__ already checked it is importable.
        from anthropic.types import TextBlock

        response = self.client.messages.create(
            model=self.model,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )
        text = "".join(block.text for block in response.content if isinstance(block, TextBlock))

        # Anthropic reports cache reads separately from input_tokens; fold
        # them in so prompt_tokens always means "everything we sent".
        cached = getattr(response.usage, "cache_read_input_tokens", None) or 0
        usage = TokenUsage(
            prompt_tokens=response.usage.input_tokens + cached,
            completion_tokens=response.usage.output_tokens,
            cached_tokens=cached or None,
        )
        return RawModelReply(text=text.strip(), usage=usage, model=response.model or self.model)
