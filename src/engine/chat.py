from typing import Optional, Sequence

from src.engine.context import DEFAULT_EMAIL, build_context
from src.engine.providers.llm import ChatProvider, GenerationConfig, UpstreamStatusError
from src.models.chat import ChatTurn
from src.models.portfolio import Profile
from src.utils.logger import get_logger

logger = get_logger(__name__)

HISTORY_WINDOW = 5


class ChatError(Exception):
    """A chat turn that ended without a reply.

    ``message`` is safe to show the caller; ``status_code`` is the HTTP status
    to answer with.
    """

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingMessageError(ChatError):
    status_code = 400

    def __init__(self):
        super().__init__("Message is required")


class MissingApiKeyError(ChatError):
    status_code = 400

    def __init__(self):
        super().__init__(
            "OpenRouter API key is not configured. "
            "Please add your API key in the portfolio settings."
        )


class UpstreamError(ChatError):
    def __init__(self, status_code: int):
        super().__init__("Failed to get response from AI service", status_code)


class InvalidUpstreamResponseError(ChatError):
    def __init__(self):
        super().__init__("Invalid response from AI service")


class InternalChatError(ChatError):
    def __init__(self):
        super().__init__("Internal server error")


def _extract_reply(body: dict) -> str:
    choices = body.get("choices") if isinstance(body, dict) else None
    if not isinstance(choices, list) or not choices or not isinstance(choices[0], dict):
        raise InvalidUpstreamResponseError()
    message = choices[0].get("message")
    if not isinstance(message, dict):
        raise InvalidUpstreamResponseError()
    content = message.get("content")
    if not isinstance(content, str):
        raise InvalidUpstreamResponseError()
    return content


class ChatRelay:
    """Answer one chat turn about a portfolio through a completion provider.

    Each call validates the input, builds a fresh system prompt from the
    profile, sends it with the tail of the conversation and the new message,
    and returns the reply text. Nothing is retried.
    """

    def __init__(
        self,
        provider: ChatProvider,
        config: Optional[GenerationConfig] = None,
        history_window: int = HISTORY_WINDOW,
        default_email: str = DEFAULT_EMAIL,
    ):
        self.provider = provider
        self.config = config or GenerationConfig()
        self.history_window = history_window
        self.default_email = default_email

    def build_messages(
        self, message: str, profile: Profile, history: Sequence[ChatTurn]
    ) -> list[dict]:
        recent = list(history)[-self.history_window:] if self.history_window > 0 else []
        return [
            {"role": "system", "content": build_context(profile, self.default_email)},
            *({"role": turn.role, "content": turn.content} for turn in recent),
            {"role": "user", "content": message},
        ]

    async def reply(
        self,
        message: Optional[str],
        profile: Profile,
        history: Sequence[ChatTurn] = (),
    ) -> str:
        if not message:
            raise MissingMessageError()
        if not profile.open_router_api_key:
            raise MissingApiKeyError()

        try:
            messages = self.build_messages(message, profile, history)
            body = await self.provider.complete(
                messages, profile.open_router_api_key, self.config
            )
            reply = _extract_reply(body)
        except UpstreamStatusError as e:
            logger.error(
                "chat.upstream_failed", status_code=e.status_code, body=e.body
            )
            raise UpstreamError(e.status_code) from e
        except InvalidUpstreamResponseError:
            logger.error("chat.invalid_upstream_response")
            raise
        except Exception as e:
            logger.exception("chat.failed", error=str(e))
            raise InternalChatError() from e

        logger.info(
            "chat.replied",
            username=profile.username,
            history_turns=len(messages) - 2,
        )
        return reply
