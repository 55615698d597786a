import secrets

from fastapi import HTTPException, Request

from src.engine.storage import PortfolioStorage


def get_storage(request: Request) -> PortfolioStorage:
    storage = getattr(request.app.state, "storage", None)
    if storage is None:
        raise HTTPException(status_code=503, detail="Database not connected")
    return storage


def require_token(request: Request) -> None:
    """Check the static bearer token when API_TOKEN is set."""
    expected = getattr(request.app.state, "api_token", None)
    if not expected:
        return
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    valid = secrets.compare_digest(token.encode(), expected.encode())
    if scheme.lower() != "bearer" or not valid:
        raise HTTPException(status_code=401, detail="Unauthorized")
