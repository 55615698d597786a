from dataclasses import dataclass
from typing import Protocol, runtime_checkable

DEFAULT_CHAT_MODEL = "deepseek/deepseek-chat-v3-0324:free"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class UpstreamStatusError(Exception):
    """The completion endpoint could not be reached or answered non-2xx.

    ``body`` is the raw upstream payload, kept for server-side logs only.
    """

    def __init__(self, status_code: int, body: str = ""):
        super().__init__(f"Upstream returned {status_code}")
        self.status_code = status_code
        self.body = body


@dataclass(frozen=True)
class GenerationConfig:
    """Sampling settings sent with every chat completion request."""

    model: str = DEFAULT_CHAT_MODEL
    temperature: float = 0.7
    max_tokens: int = 300
    top_p: float = 1
    frequency_penalty: float = 0
    presence_penalty: float = 0

    def payload(self, messages: list[dict]) -> dict:
        return {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "frequency_penalty": self.frequency_penalty,
            "presence_penalty": self.presence_penalty,
        }


@runtime_checkable
class ChatProvider(Protocol):
    """Protocol for chat completion providers."""

    async def complete(
        self, messages: list[dict], api_key: str, config: GenerationConfig
    ) -> dict:
        """Send one chat completion request and return the decoded body.

        Raises UpstreamStatusError on transport failure or non-2xx status.
        """
        ...


def get_chat_provider(
    provider: str,
    **kwargs,
) -> ChatProvider:
    """Factory to create a chat provider by name."""
    if provider == "openrouter":
        from src.engine.providers.openrouter_provider import OpenRouterProvider

        return OpenRouterProvider(
            base_url=kwargs.get("base_url", DEFAULT_BASE_URL),
            site_url=kwargs.get("site_url", "http://localhost:3000"),
            app_title=kwargs.get("app_title", "Portfolio Assistant"),
            timeout=kwargs.get("timeout", 30.0),
        )
    elif provider == "openai":
        from src.engine.providers.openai_provider import OpenAIChatProvider

        return OpenAIChatProvider(
            base_url=kwargs.get("base_url", DEFAULT_BASE_URL),
            timeout=kwargs.get("timeout", 30.0),
        )
    else:
        raise ValueError(f"Unknown chat provider: {provider}")
