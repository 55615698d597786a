from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # Database
    database_url: Optional[str] = None

    # Chat completion provider
    chat_provider: str = "openrouter"
    chat_model: str = "deepseek/deepseek-chat-v3-0324:free"
    chat_base_url: str = "https://openrouter.ai/api/v1"
    chat_timeout: float = 30.0
    chat_history_window: int = 5

    # Sent upstream as HTTP-Referer / X-Title
    site_url: str = "http://localhost:3000"
    app_title: str = "Portfolio Assistant"

    # Placeholder shown in the assistant context when a profile has no email
    context_default_email: str = "Not specified"

    # API
    api_port: int = 8080
    api_token: Optional[str] = None
    log_level: str = "info"

    model_config = {"env_file": ".env", "case_sensitive": False}
