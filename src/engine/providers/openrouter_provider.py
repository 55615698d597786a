from typing import Optional

import httpx

from src.engine.providers.llm import GenerationConfig, UpstreamStatusError
from src.utils.logger import get_logger

logger = get_logger(__name__)


class OpenRouterProvider:
    """Chat completions over plain HTTP against an OpenRouter-style endpoint."""

    def __init__(
        self,
        base_url: str = "https://openrouter.ai/api/v1",
        site_url: str = "http://localhost:3000",
        app_title: str = "Portfolio Assistant",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.site_url = site_url
        self.app_title = app_title
        self.timeout = timeout
        self._transport = transport

    async def complete(
        self, messages: list[dict], api_key: str, config: GenerationConfig
    ) -> dict:
        headers = {
            "Authorization": f"Bearer {api_key}",
            "HTTP-Referer": self.site_url,
            "X-Title": self.app_title,
            "Content-Type": "application/json",
        }
        logger.debug("openrouter.request", model=config.model, messages=len(messages))
        async with httpx.AsyncClient(transport=self._transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/chat/completions",
                    json=config.payload(messages),
                    headers=headers,
                    timeout=self.timeout,
                )
            except httpx.TimeoutException as e:
                raise UpstreamStatusError(504, str(e)) from e
            except httpx.TransportError as e:
                raise UpstreamStatusError(502, str(e)) from e

            if not response.is_success:
                raise UpstreamStatusError(response.status_code, response.text)
            return response.json()
