"""
Pytest configuration and fixtures for Culina tests.
"""

import asyncio
import copy
import os
import uuid
from typing import Any

import pytest

# Set test environment before importing culina modules
os.environ["CULINA_ENV"] = "development"
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "test-service-key")
os.environ.setdefault("AI_GATEWAY_API_KEY", "test-gateway-key")

from culina.config import Settings
from culina.generation.pipeline import GenerationPipeline


def run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


def make_settings(**overrides) -> Settings:
    values = {
        "supabase_url": "https://test.supabase.co",
        "supabase_service_role_key": "test-service-key",
        "ai_gateway_api_key": "test-gateway-key",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


# ---------------------------------------------------------------------------
# In-memory PostgREST-style store
# ---------------------------------------------------------------------------

TABLE_DEFAULTS: dict[str, dict[str, Any]] = {
    "user_ai_usage": {"generation_count": 0, "monthly_limit": 5},
    "user_subscription": {"subscription_tier": "free", "max_saved_recipes": 10},
    "recipes": {"is_public": False},
}

CHILD_TABLES = ("recipe_ingredients", "recipe_steps")


class FakeResponse:
    def __init__(self, data: Any, count: int | None = None):
        self.data = data
        self.count = count


class FakeQuery:
    """Fluent builder mimicking supabase-py's table() API."""

    def __init__(self, db: "FakeSupabase", table: str):
        self._db = db
        self._table = table
        self._op = "select"
        self._filters: list[tuple[str, Any]] = []
        self._payload: Any = None
        self._on_conflict: list[str] = []
        self._single = False

    def select(self, *columns, count=None):
        return self

    def insert(self, rows):
        self._op, self._payload = "insert", rows
        return self

    def update(self, values):
        self._op, self._payload = "update", values
        return self

    def upsert(self, row, on_conflict: str = ""):
        self._op, self._payload = "upsert", row
        self._on_conflict = [c.strip() for c in on_conflict.split(",") if c.strip()]
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def limit(self, n):
        return self

    def maybe_single(self):
        self._single = True
        return self

    def _matches(self, row: dict) -> bool:
        return all(row.get(col) == value for col, value in self._filters)

    def execute(self):
        self._db.calls.append((self._table, self._op))
        failure = self._db.failures.get((self._table, self._op))
        if failure is not None:
            raise failure

        rows = self._db.tables.setdefault(self._table, [])

        if self._op == "select":
            found = [copy.deepcopy(r) for r in rows if self._matches(r)]
            if self._single:
                return FakeResponse(found[0]) if found else None
            return FakeResponse(found, count=len(found))

        if self._op == "insert":
            payload = self._payload if isinstance(self._payload, list) else [self._payload]
            keep = self._db.partial_inserts.get(self._table, len(payload))
            created = [self._db.add_row(self._table, row) for row in payload[:keep]]
            return FakeResponse(created)

        if self._op == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(copy.deepcopy(self._payload))
                    updated.append(copy.deepcopy(row))
            return FakeResponse(updated)

        if self._op == "upsert":
            for row in rows:
                if all(row.get(c) == self._payload.get(c) for c in self._on_conflict):
                    row.update(copy.deepcopy(self._payload))
                    return FakeResponse([copy.deepcopy(row)])
            return FakeResponse([self._db.add_row(self._table, self._payload)])

        if self._op == "delete":
            removed = [r for r in rows if self._matches(r)]
            self._db.tables[self._table] = [r for r in rows if not self._matches(r)]
            if self._table == "recipes":
                ids = {r["id"] for r in removed}
                for child in CHILD_TABLES:
                    self._db.tables[child] = [
                        r for r in self._db.tables.get(child, []) if r["recipe_id"] not in ids
                    ]
            return FakeResponse(removed)

        raise AssertionError(f"unsupported op {self._op}")


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self._db = db
        self._name = name
        self._params = params

    def execute(self):
        self._db.calls.append((self._name, "rpc"))
        failure = self._db.failures.get((self._name, "rpc"))
        if failure is not None:
            raise failure
        return FakeResponse(getattr(self._db, f"_rpc_{self._name}")(**self._params))


class FakeSupabase:
    """
    Minimal in-memory stand-in for the Supabase client.

    Supports the query shapes the pipeline uses plus the quota RPCs, with
    hooks to make a given (table, op) raise or return fewer rows.
    """

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.partial_inserts: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        return FakeRpc(self, name, params)

    def fail(self, table: str, op: str, exc: Exception | None = None) -> None:
        self.failures[(table, op)] = exc or RuntimeError(f"{table} {op} failed")

    def add_row(self, table: str, row: dict) -> dict:
        stored = {**TABLE_DEFAULTS.get(table, {}), **copy.deepcopy(row)}
        stored.setdefault("id", str(uuid.uuid4()))
        self.tables.setdefault(table, []).append(stored)
        return copy.deepcopy(stored)

    def rows(self, table: str, **filters) -> list[dict]:
        return [
            r for r in self.tables.get(table, [])
            if all(r.get(k) == v for k, v in filters.items())
        ]

    # -- database functions ---------------------------------------------------

    def _rpc_reserve_generation(self, p_user_id, p_month, p_free_limit=5, p_pro_limit=999999):
        existing = self.rows("user_ai_usage", user_id=p_user_id, month=p_month)
        if existing:
            row = existing[0]
            if row["generation_count"] < row["monthly_limit"]:
                row["generation_count"] += 1
                return True
            return False
        pro = self.rows("user_subscription", user_id=p_user_id, subscription_tier="pro")
        self.add_row(
            "user_ai_usage",
            {
                "user_id": p_user_id,
                "month": p_month,
                "generation_count": 1,
                "monthly_limit": p_pro_limit if pro else p_free_limit,
            },
        )
        return True

    def _rpc_release_generation(self, p_user_id, p_month):
        for row in self.rows("user_ai_usage", user_id=p_user_id, month=p_month):
            if row["generation_count"] > 0:
                row["generation_count"] -= 1
        return None


class StubCompletion:
    """Completion client double. Yields to the event loop like a real network call."""

    def __init__(self, text: str = "", error: Exception | None = None):
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.calls.append((system_prompt, user_prompt))
        await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        return self.text


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def sample_recipe_payload() -> dict:
    """Well-formed model output: 3 ingredients, 4 steps."""
    return {
        "title": "Velouté de potimarron",
        "description": "Une soupe douce et veloutée pour l'automne",
        "prep_time_minutes": 15,
        "cook_time_minutes": 30,
        "servings": 4,
        "difficulty": "easy",
        "cuisine_type": "Française",
        "chef_tip": "Ajoutez une pointe de muscade au moment de servir.",
        "nutritional_info": {"calories": 220, "protein": 5, "carbs": 30, "fat": 9},
        "ingredients": [
            {"name": "Potimarron", "quantity": 1000, "unit": "g", "order_index": 0},
            {"name": "Oignon", "quantity": 1, "unit": "pièce", "order_index": 1},
            {"name": "Crème fraîche", "quantity": 10, "unit": "cl", "order_index": 2},
        ],
        "steps": [
            {"step_number": 1, "instruction": "Épluchez et coupez le potimarron en dés."},
            {"step_number": 2, "instruction": "Faites revenir l'oignon émincé."},
            {"step_number": 3, "instruction": "Ajoutez le potimarron, couvrez d'eau et cuisez 30 minutes."},
            {"step_number": 4, "instruction": "Mixez avec la crème et servez chaud."},
        ],
    }


@pytest.fixture
def fenced_recipe_text(sample_recipe_payload) -> str:
    import json

    return f"```json\n{json.dumps(sample_recipe_payload, ensure_ascii=False, indent=2)}\n```"


@pytest.fixture
def sample_user_preferences() -> dict:
    return {
        "user_id": "user-1",
        "dietary_restrictions": ["végétarien"],
        "allergies": ["arachides", "noix"],
    }


@pytest.fixture
def make_pipeline(fake_db):
    """Build a pipeline over the fake store with a stubbed completion client."""

    def _make(completion: StubCompletion, **setting_overrides) -> GenerationPipeline:
        return GenerationPipeline.from_settings(
            make_settings(**setting_overrides), fake_db, completion=completion
        )

    return _make
