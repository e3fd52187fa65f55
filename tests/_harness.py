from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from engine.geofence import offset_point
from engine.types import GeoPoint


class FixedClock:
    """Deterministic clock that ticks one second per call."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self.now = start or datetime(2025, 11, 17, 8, 30, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


def _set_env(*, min_description_length: int, export_prefix: str) -> None:
    """
    Centralized, deterministic test env.
    Tests MUST NOT rely on user's shell env.
    """
    os.environ["FG_LOG_LEVEL"] = "WARNING"
    os.environ["FG_MIN_DESCRIPTION_LENGTH"] = str(min_description_length)
    os.environ["FG_EXPORT_PREFIX"] = export_prefix
    os.environ.pop("FG_MISSION_CONFIG_PATH", None)


def build_app_factory(default_catalog: List[Dict[str, Any]]) -> Callable[..., Any]:
    """
    Returns a callable:
        app = build_app(catalog=[...], min_description_length=10)
    """

    def _build(
        catalog: Optional[List[Dict[str, Any]]] = None,
        *,
        min_description_length: int = 10,
        export_prefix: str = "fieldgate_data",
    ):
        _set_env(min_description_length=min_description_length, export_prefix=export_prefix)

        from api.config.settings import load_settings
        from api.main import build_app

        return build_app(load_settings(), catalog=catalog if catalog is not None else default_catalog)

    return _build


def point_at(center: GeoPoint, north_m: float = 0.0, east_m: float = 0.0) -> GeoPoint:
    return offset_point(center, north_m=north_m, east_m=east_m)


def point_json(p: GeoPoint) -> dict:
    return {"lat": p.lat, "lng": p.lng}
