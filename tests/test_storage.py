import json
from datetime import datetime, timezone

from src.engine.storage import PROTECTED_KEYS, _row_to_portfolio, default_portfolio


def test_default_portfolio_is_empty():
    doc = default_portfolio("ada", "ada@example.com")
    assert doc["username"] == "ada"
    assert doc["email"] == "ada@example.com"
    assert doc["openRouterApiKey"] is None
    for key in ("socialLinks", "skills", "projects", "experiences", "education", "certificates"):
        assert doc[key] == []


def test_protected_keys():
    assert {"_id", "username", "email"} <= PROTECTED_KEYS


def test_row_to_portfolio_decodes_json_and_timestamps():
    created = datetime(2026, 1, 1, tzinfo=timezone.utc)
    row = {
        "username": "ada",
        "data": json.dumps({"bio": "Engineer", "username": "stale"}),
        "created_at": created,
        "updated_at": created,
    }
    doc = _row_to_portfolio(row)
    assert doc["bio"] == "Engineer"
    assert doc["username"] == "ada"
    assert doc["createdAt"] == "2026-01-01T00:00:00+00:00"
