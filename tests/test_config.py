from src.config import Settings


def test_settings_defaults():
    s = Settings(_env_file=None)
    assert s.database_url is None
    assert s.chat_provider == "openrouter"
    assert s.chat_model == "deepseek/deepseek-chat-v3-0324:free"
    assert s.chat_base_url == "https://openrouter.ai/api/v1"
    assert s.chat_history_window == 5
    assert s.context_default_email == "Not specified"
    assert s.log_level == "info"
    assert s.api_port == 8080


def test_settings_overrides():
    s = Settings(
        _env_file=None,
        database_url="postgresql+asyncpg://u:p@localhost/db",
        chat_provider="openai",
        chat_model="openai/gpt-4o-mini",
        chat_timeout=5,
        log_level="debug",
        api_port=9090,
    )
    assert s.chat_provider == "openai"
    assert s.chat_model == "openai/gpt-4o-mini"
    assert s.chat_timeout == 5.0
    assert s.api_port == 9090


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("CONTEXT_DEFAULT_EMAIL", "contact@example.com")
    monkeypatch.setenv("API_TOKEN", "secret")
    s = Settings(_env_file=None)
    assert s.context_default_email == "contact@example.com"
    assert s.api_token == "secret"
