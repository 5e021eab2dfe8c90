from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from prbrief_core.models import RawModelReply, TokenUsage
from prbrief_core.providers.base import BaseModelClient

# Reasoning models reject temperature and take max_completion_tokens instead.
_REASONING_PREFIXES = ("o1", "o3", "o4")


class OpenAIClient(BaseModelClient):
    """OpenAI chat completions, or any compatible endpoint via base_url.

    Setting base_url (OPENAI_BASE_URL) points the same client at OpenRouter,
    DeepSeek or Groq, with model set to that service's model id.
    """

    MODEL = "gpt-4o"
    TEMPERATURE = 0.2

    def __init__(self, api_key: str, base_url: str | None = None, **kwargs):
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. "
                "Install it with: pip install 'prbrief[openai]'"
            )
        super().__init__(**kwargs)
        self.client = _OpenAI(api_key=api_key, base_url=base_url) if base_url else _OpenAI(api_key=api_key)

    def _is_reasoning_model(self) -> bool:
        return self.model.startswith(_REASONING_PREFIXES)

    def _call_api(self, system_prompt: str, user_prompt: str) -> RawModelReply:
        params: dict = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        if self._is_reasoning_model():
            params["max_completion_tokens"] = self.max_tokens
        else:
            params["temperature"] = self.temperature
            params["max_tokens"] = self.max_tokens

        response = self.client.chat.completions.create(**params)

        usage = TokenUsage()
        if response.usage is not None:
            details = getattr(response.usage, "prompt_tokens_details", None)
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                cached_tokens=getattr(details, "cached_tokens", None),
            )
        text = response.choices[0].message.content or ""
        return RawModelReply(text=text.strip(), usage=usage, model=response.model or self.model)
