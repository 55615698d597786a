import json
from typing import Optional

import asyncpg

# Keys a client can never overwrite through an update
PROTECTED_KEYS = {"_id", "username", "email", "createdAt", "updatedAt"}


def default_portfolio(username: str, email: str) -> dict:
    """A fresh, empty portfolio document."""
    return {
        "username": username,
        "email": email,
        "fullName": None,
        "country": None,
        "state": None,
        "city": None,
        "profilePicUrl": None,
        "bio": None,
        "openRouterApiKey": None,
        "socialLinks": [],
        "skills": [],
        "projects": [],
        "experiences": [],
        "education": [],
        "certificates": [],
    }


def _row_to_portfolio(row: asyncpg.Record) -> dict:
    data = row["data"]
    if isinstance(data, str):
        data = json.loads(data)
    return {
        **data,
        "username": row["username"],
        "createdAt": row["created_at"].isoformat(),
        "updatedAt": row["updated_at"].isoformat(),
    }


class PortfolioStorage:
    """Portfolio documents in a single JSONB table keyed by lowercase username."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def get_portfolio(self, username: str) -> Optional[dict]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                SELECT username, data, created_at, updated_at
                FROM portfolios WHERE username = $1
                """,
                username.lower(),
            )
            return _row_to_portfolio(row) if row else None

    async def create_portfolio(self, username: str, email: str) -> dict:
        """Return the user's portfolio, creating an empty one if needed."""
        username = username.lower()
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                INSERT INTO portfolios (username, data)
                VALUES ($1, $2::jsonb)
                ON CONFLICT (username) DO NOTHING
                """,
                username,
                json.dumps(default_portfolio(username, email)),
            )
            row = await conn.fetchrow(
                """
                SELECT username, data, created_at, updated_at
                FROM portfolios WHERE username = $1
                """,
                username,
            )
            return _row_to_portfolio(row)

    async def update_portfolio(self, username: str, updates: dict) -> Optional[dict]:
        """Shallow-merge ``updates`` into the stored document.

        Returns the updated portfolio, or None if the user has none.
        """
        allowed = {k: v for k, v in updates.items() if k not in PROTECTED_KEYS}
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                """
                UPDATE portfolios
                SET data = data || $2::jsonb, updated_at = NOW()
                WHERE username = $1
                RETURNING username, data, created_at, updated_at
                """,
                username.lower(),
                json.dumps(allowed),
            )
            return _row_to_portfolio(row) if row else None
