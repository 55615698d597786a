from contextlib import asynccontextmanager

import uvicorn

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.api import health, chat, portfolio
from src.config import Settings
from src.engine.chat import ChatError, ChatRelay
from src.engine.providers.llm import GenerationConfig, get_chat_provider
from src.engine.storage import PortfolioStorage
from src.utils.db import get_pool, ensure_schema, close_pool
from src.utils.logger import setup_logging, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: load settings from environment
    settings = Settings()
    setup_logging(settings.log_level)
    logger.info("portfolio_assistant.starting")

    app.state.api_token = settings.api_token

    provider = get_chat_provider(
        settings.chat_provider,
        base_url=settings.chat_base_url,
        site_url=settings.site_url,
        app_title=settings.app_title,
        timeout=settings.chat_timeout,
    )
    app.state.chat_relay = ChatRelay(
        provider,
        config=GenerationConfig(model=settings.chat_model),
        history_window=settings.chat_history_window,
        default_email=settings.context_default_email,
    )
    logger.info(
        "portfolio_assistant.chat_provider_initialized",
        provider=settings.chat_provider,
        model=settings.chat_model,
    )

    if settings.database_url:
        pool = await get_pool(settings.database_url)
        await ensure_schema(pool)
        app.state.storage = PortfolioStorage(pool)
        logger.info("portfolio_assistant.db_connected")
    else:
        app.state.storage = None
        logger.warning("portfolio_assistant.no_database_url")

    yield

    # Shutdown
    await close_pool()
    logger.info("portfolio_assistant.shutdown")


app = FastAPI(
    title="Portfolio Assistant",
    description="Portfolio storage and an AI assistant that answers questions about it",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("request.invalid", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


app.include_router(health.router)
app.include_router(chat.router, prefix="/v1/chat", tags=["chat"])
app.include_router(portfolio.router, prefix="/v1/portfolio", tags=["portfolio"])


def run() -> None:
    """Serve the app with uvicorn on the configured port."""
    settings = Settings()
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
