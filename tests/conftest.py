from __future__ import annotations

import os
from pathlib import Path

import pytest

# IMPORTANT: this runs at import time (before api.db is imported by tests)
BASE = Path(os.getenv("PYTEST_TMP_BASE", "/tmp")) / "fieldgate_pytest"
STATE = BASE / "state"
STATE.mkdir(parents=True, exist_ok=True)

os.environ.setdefault("FG_ENV", "dev")

# Force db to writable location for tests (bypasses /var/lib defaults)
os.environ["FG_STATE_DIR"] = str(STATE)
os.environ["FG_DB_URL"] = f"sqlite:///{(STATE / 'fieldgate.db').as_posix()}"
os.environ.pop("FG_MISSION_CONFIG_PATH", None)

from engine.context import EngineContext  # noqa: E402
from tests._harness import FixedClock, build_app_factory  # noqa: E402

CATALOG = [
    {
        "id": "m-plaza",
        "title": "Plaza",
        "instruction": "Report sidewalk damage near the plaza.",
        "target": {"lat": 6.7500, "lng": 125.3560},
        "boundary_radius": 20,
        "required_count": 2,
        "suggested_category": "Broken Sidewalk",
        "zoom": 19,
    },
    {
        "id": "m-market",
        "title": "Market",
        "instruction": "Mark clogged drains.",
        "target": {"lat": 6.7531, "lng": 125.3574},
        "required_count": 3,
        "suggested_category": "Clogged Drain",
    },
]


@pytest.fixture
def catalog():
    return [dict(m) for m in CATALOG]


@pytest.fixture
def ctx(catalog) -> EngineContext:
    c = EngineContext(clock=FixedClock())
    c.store.load_catalog(catalog)
    return c


@pytest.fixture
def build_app(catalog):
    """
    Fixture returns a callable:
        app = build_app(catalog=[...], min_description_length=10)
    """
    return build_app_factory(default_catalog=catalog)
