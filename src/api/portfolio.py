from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request

import asyncpg

from src.api.deps import get_storage, require_token
from src.models.portfolio import PortfolioEnvelope, PortfolioInit
from src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _public(portfolio: dict) -> dict:
    """Drop the chat credential, keep whether one is set."""
    result = dict(portfolio)
    result["hasApiKey"] = bool(result.pop("openRouterApiKey", None))
    return result


@router.get("/{username}", response_model=PortfolioEnvelope)
async def get_portfolio(username: str, request: Request):
    """Get the public view of a portfolio."""
    if not username or not username.strip():
        raise HTTPException(status_code=400, detail="Username is required")

    storage = get_storage(request)
    try:
        portfolio = await storage.get_portfolio(username)
    except asyncpg.PostgresError as e:
        logger.error("portfolio.get_failed", username=username, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
    if not portfolio:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    return PortfolioEnvelope(portfolio=_public(portfolio))


@router.post(
    "",
    response_model=PortfolioEnvelope,
    dependencies=[Depends(require_token)],
)
async def init_portfolio(body: PortfolioInit, request: Request):
    """Return the user's portfolio, creating an empty one on first use."""
    if not body.username.strip() or not body.email.strip():
        raise HTTPException(status_code=400, detail="User data incomplete")

    storage = get_storage(request)
    try:
        portfolio = await storage.create_portfolio(body.username.strip(), body.email.strip())
    except asyncpg.PostgresError as e:
        logger.error("portfolio.init_failed", username=body.username, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
    logger.info("portfolio.initialized", username=portfolio["username"])
    return PortfolioEnvelope(portfolio=portfolio)


@router.patch(
    "/{username}",
    response_model=PortfolioEnvelope,
    dependencies=[Depends(require_token)],
)
async def update_portfolio(username: str, request: Request, updates: Any = Body(...)):
    """Merge top-level fields into a portfolio."""
    if not isinstance(updates, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")

    storage = get_storage(request)
    try:
        portfolio = await storage.update_portfolio(username, updates)
    except asyncpg.PostgresError as e:
        logger.error("portfolio.update_failed", username=username, error=str(e))
        raise HTTPException(status_code=500, detail="Internal server error")
    if not portfolio:
        raise HTTPException(status_code=404, detail="Portfolio not found")
    logger.info("portfolio.updated", username=username, fields=sorted(updates))
    return PortfolioEnvelope(
        portfolio=portfolio, message="Portfolio updated successfully"
    )
