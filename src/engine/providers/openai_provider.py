import openai
from openai import AsyncOpenAI

from src.engine.providers.llm import GenerationConfig, UpstreamStatusError
from src.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAIChatProvider:
    """Chat completions through the OpenAI SDK.

    Works against any OpenAI-compatible base URL. The SDK's own retries are
    disabled so each call makes exactly one attempt.
    """

    def __init__(
        self,
        base_url: str = "https://openrouter.ai/api/v1",
        timeout: float = 30.0,
    ):
        self.base_url = base_url
        self.timeout = timeout

    def _client(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self.base_url,
            timeout=self.timeout,
            max_retries=0,
        )

    async def complete(
        self, messages: list[dict], api_key: str, config: GenerationConfig
    ) -> dict:
        client = self._client(api_key)
        logger.debug("openai.request", model=config.model, messages=len(messages))
        try:
            response = await client.chat.completions.create(**config.payload(messages))
        except openai.APITimeoutError as e:
            raise UpstreamStatusError(504, str(e)) from e
        except openai.APIConnectionError as e:
            raise UpstreamStatusError(502, str(e)) from e
        except openai.APIStatusError as e:
            logger.warning("openai.request_failed", status_code=e.status_code)
            raise UpstreamStatusError(e.status_code, e.response.text) from e
        finally:
            await client.close()
        return response.model_dump()
