"""Mission catalog source: a JSON file on disk, or the built-in field-test set."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

from loguru import logger

from engine.missions import load_catalog_file

DEFAULT_CATALOG: List[Dict[str, Any]] = [
    {
        "id": "mission-001",
        "title": "City Hall Plaza",
        "instruction": "Report any road or sidewalk damage around the plaza entrance.",
        "target": {"lat": 6.7500, "lng": 125.3560},
        "boundary_radius": 20,
        "required_count": 2,
        "suggested_category": "Road Damage",
        "zoom": 19,
    },
    {
        "id": "mission-002",
        "title": "Public Market Drainage",
        "instruction": "Mark clogged or overflowing drains along the market road.",
        "target": {"lat": 6.7531, "lng": 125.3574},
        "boundary_radius": 30,
        "required_count": 3,
        "suggested_category": "Clogged Drain",
        "zoom": 18,
    },
    {
        "id": "mission-003",
        "title": "Rizal Avenue Streetlights",
        "instruction": "Tag streetlights that are out or flickering.",
        "target": {"lat": 6.7489, "lng": 125.3541},
        "required_count": 2,
        "suggested_category": "Streetlight",
    },
]


def load_catalog_records(path: Optional[str] = None) -> List[Dict[str, Any]]:
    path = (path if path is not None else os.getenv("FG_MISSION_CONFIG_PATH") or "").strip()
    if not path:
        return [dict(m) for m in DEFAULT_CATALOG]

    if not os.path.exists(path):
        logger.warning("mission_config_missing", extra={"path": path})
        return [dict(m) for m in DEFAULT_CATALOG]

    records = load_catalog_file(path)
    logger.info("mission_config_read", extra={"path": path, "missions": len(records)})
    return records
