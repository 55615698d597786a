from typing import Optional

from fastapi import APIRouter, HTTPException, Request

import asyncpg

from src.engine.chat import ChatRelay
from src.models.chat import ChatRequest, ChatResponse
from src.models.portfolio import Profile
from src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _get_relay(request: Request) -> ChatRelay:
    relay = getattr(request.app.state, "chat_relay", None)
    if relay is None:
        raise HTTPException(status_code=503, detail="Chat service not configured")
    return relay


async def _stored_profile(request: Request, username: str) -> Optional[Profile]:
    """The stored portfolio for ``username`` if it carries a credential."""
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        return None
    try:
        stored = await storage.get_portfolio(username)
    except asyncpg.PostgresError as e:
        logger.error("chat.portfolio_lookup_failed", username=username, error=str(e))
        return None
    if not stored or not stored.get("openRouterApiKey"):
        return None
    return Profile.model_validate(stored)


@router.post("", response_model=ChatResponse)
async def chat(body: ChatRequest, request: Request):
    """Answer one message about a portfolio.

    ChatError raised by the relay is rendered as ``{"error": ...}`` by the
    app-level handler.
    """
    relay = _get_relay(request)
    profile = body.portfolio

    # Public portfolio responses omit the key. A stored key is only ever
    # spent on the stored portfolio, never on caller-supplied content.
    if not profile.open_router_api_key and profile.username:
        stored = await _stored_profile(request, profile.username)
        if stored is not None:
            profile = stored

    reply = await relay.reply(body.message, profile, body.conversation_history)
    return ChatResponse(response=reply)
