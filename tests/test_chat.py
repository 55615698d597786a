import pytest

from src.engine.chat import (
    ChatRelay,
    InternalChatError,
    InvalidUpstreamResponseError,
    MissingApiKeyError,
    MissingMessageError,
    UpstreamError,
)
from src.engine.providers.llm import GenerationConfig, UpstreamStatusError
from src.models.chat import ChatTurn
from src.models.portfolio import Profile


class FakeProvider:
    """Fake chat provider that returns a canned body or raises."""

    def __init__(self, body=None, error=None):
        self._body = body if body is not None else {"choices": [{"message": {"content": "Hello!"}}]}
        self._error = error
        self.calls = []

    async def complete(self, messages, api_key, config):
        self.calls.append((messages, api_key, config))
        if self._error:
            raise self._error
        return self._body


PROFILE = Profile(username="ada", full_name="Ada Lovelace", open_router_api_key="sk-or-test")


def _history(n):
    return [
        ChatTurn(role="user" if i % 2 == 0 else "assistant", content=f"turn {i}")
        for i in range(n)
    ]


@pytest.mark.asyncio
async def test_reply_success():
    provider = FakeProvider()
    relay = ChatRelay(provider)
    assert await relay.reply("Hi", PROFILE) == "Hello!"

    messages, api_key, config = provider.calls[0]
    assert api_key == "sk-or-test"
    assert config == GenerationConfig()
    assert messages[0]["role"] == "system"
    assert "*Ada Lovelace*" in messages[0]["content"]
    assert messages[-1] == {"role": "user", "content": "Hi"}


@pytest.mark.asyncio
async def test_history_bounded_to_last_five():
    provider = FakeProvider()
    relay = ChatRelay(provider)
    await relay.reply("new question", PROFILE, _history(8))

    messages = provider.calls[0][0]
    non_system = [m for m in messages if m["role"] != "system"]
    assert len(non_system) == 6
    assert [m["content"] for m in non_system] == [
        "turn 3", "turn 4", "turn 5", "turn 6", "turn 7", "new question",
    ]


@pytest.mark.asyncio
async def test_short_history_kept_whole():
    provider = FakeProvider()
    await ChatRelay(provider).reply("q", PROFILE, _history(2))
    assert len(provider.calls[0][0]) == 4


@pytest.mark.asyncio
async def test_missing_message():
    provider = FakeProvider()
    relay = ChatRelay(provider)
    for message in (None, ""):
        with pytest.raises(MissingMessageError) as exc:
            await relay.reply(message, PROFILE)
        assert exc.value.status_code == 400
    assert provider.calls == []


@pytest.mark.asyncio
async def test_message_checked_before_api_key():
    relay = ChatRelay(FakeProvider())
    with pytest.raises(MissingMessageError):
        await relay.reply("", Profile())


@pytest.mark.asyncio
async def test_missing_api_key():
    relay = ChatRelay(FakeProvider())
    with pytest.raises(MissingApiKeyError) as exc:
        await relay.reply("Hi", Profile(open_router_api_key=""))
    assert exc.value.status_code == 400
    assert "API key is not configured" in exc.value.message


@pytest.mark.asyncio
async def test_upstream_status_forwarded():
    relay = ChatRelay(FakeProvider(error=UpstreamStatusError(503, "busy")))
    with pytest.raises(UpstreamError) as exc:
        await relay.reply("Hi", PROFILE)
    assert exc.value.status_code == 503
    assert exc.value.message == "Failed to get response from AI service"
    assert "busy" not in exc.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"choices": []},
        {},
        {"choices": [{}]},
        {"choices": [{"message": None}]},
        {"choices": "nope"},
        {"choices": [{"message": {"role": "assistant"}}]},
        {"choices": [{"message": {"content": None}}]},
        {"choices": [{"message": {"content": ["Hello"]}}]},
    ],
)
async def test_invalid_upstream_body(body):
    relay = ChatRelay(FakeProvider(body=body))
    with pytest.raises(InvalidUpstreamResponseError) as exc:
        await relay.reply("Hi", PROFILE)
    assert exc.value.status_code == 500
    assert exc.value.message == "Invalid response from AI service"


@pytest.mark.asyncio
async def test_unexpected_error_is_internal():
    relay = ChatRelay(FakeProvider(error=ValueError("bad json")))
    with pytest.raises(InternalChatError) as exc:
        await relay.reply("Hi", PROFILE)
    assert exc.value.status_code == 500
    assert exc.value.message == "Internal server error"


@pytest.mark.asyncio
async def test_custom_config_and_default_email():
    provider = FakeProvider()
    relay = ChatRelay(
        provider,
        config=GenerationConfig(model="test/model"),
        history_window=1,
        default_email="hello@example.com",
    )
    await relay.reply("Hi", PROFILE, _history(3))
    messages, _, config = provider.calls[0]
    assert config.model == "test/model"
    assert len(messages) == 3
    assert "- Email: hello@example.com" in messages[0]["content"]
