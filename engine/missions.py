from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError as PydanticValidationError

from engine.errors import CatalogError, MissionNotFound
from engine.types import (
    DEFAULT_BOUNDARY_RADIUS_M,
    Mission,
    MissionProgress,
    MissionStatus,
)

MissionRecord = Union[Mission, Mapping[str, Any]]

# owned by the store; whatever a catalog carries here is discarded
_PROGRESS_FIELDS = ("status", "entries_collected", "entriesCollected")


def _catalog_fields(record: MissionRecord) -> Dict[str, Any]:
    raw = record.model_dump() if isinstance(record, Mission) else dict(record)
    for key in _PROGRESS_FIELDS:
        raw.pop(key, None)
    # 0 / null / "" radius means "use the default"
    if not raw.get("boundary_radius"):
        raw.pop("boundary_radius", None)
    return raw


def _progress(mission: Mission, transition: Optional[str] = None) -> MissionProgress:
    percent = (mission.entries_collected / mission.required_count) * 100.0
    return MissionProgress(
        mission_id=mission.id,
        title=mission.title,
        status=mission.status,
        entries_collected=mission.entries_collected,
        required_count=mission.required_count,
        percent=round(percent, 2),
        transition=transition,
    )


class MissionStore:
    """Mission catalog plus per-mission progress accounting."""

    def __init__(self, default_radius_m: float = DEFAULT_BOUNDARY_RADIUS_M) -> None:
        self.default_radius_m = float(default_radius_m)
        self._missions: Dict[str, Mission] = {}
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def load_catalog(self, missions: Iterable[MissionRecord]) -> None:
        """
        Replace the catalog. Progress fields are reset on every mission no
        matter what the input carries.
        """
        catalog: Dict[str, Mission] = {}
        for i, record in enumerate(missions):
            try:
                mission = Mission.model_validate(_catalog_fields(record))
            except (PydanticValidationError, TypeError, ValueError) as e:
                raise CatalogError(
                    f"Invalid mission record at position {i}",
                    details={"position": i, "error": str(e)},
                ) from e

            if mission.id in catalog:
                raise CatalogError(
                    f"Duplicate mission id: {mission.id}",
                    details={"mission_id": mission.id},
                )

            catalog[mission.id] = mission.model_copy(
                update={
                    "status": MissionStatus.PENDING,
                    "entries_collected": 0,
                    "boundary_radius": mission.boundary_radius or self.default_radius_m,
                }
            )

        self._missions = catalog
        self._loaded = True
        logger.info("mission_catalog_loaded", extra={"missions": len(catalog)})

    def find(self, mission_id: str) -> Mission:
        mission = self._missions.get(mission_id)
        if mission is None:
            raise MissionNotFound(mission_id)
        return mission

    def get(self, mission_id: str) -> Optional[Mission]:
        return self._missions.get(mission_id)

    def all(self) -> List[Mission]:
        return list(self._missions.values())

    def completed_count(self) -> int:
        return sum(1 for m in self._missions.values() if m.is_completed)

    def progress(self, mission_id: str) -> MissionProgress:
        return _progress(self.find(mission_id))

    def record_submission(self, mission_id: str) -> MissionProgress:
        mission = self.find(mission_id)
        mission.entries_collected += 1

        transition = None
        if mission.entries_collected >= mission.required_count and not mission.is_completed:
            mission.status = MissionStatus.COMPLETED
            transition = "completed"
            logger.info("mission_completed", extra={"mission_id": mission.id})

        return _progress(mission, transition)

    def reverse_submission(self, mission_id: str) -> MissionProgress:
        mission = self.find(mission_id)
        mission.entries_collected = max(0, mission.entries_collected - 1)

        transition = None
        if mission.is_completed and mission.entries_collected < mission.required_count:
            mission.status = MissionStatus.PENDING
            transition = "reopened"
            logger.info("mission_reopened", extra={"mission_id": mission.id})

        return _progress(mission, transition)

    def __len__(self) -> int:
        return len(self._missions)

    def __contains__(self, mission_id: object) -> bool:
        return mission_id in self._missions


def load_catalog_file(path: Union[str, Path]) -> List[Dict[str, Any]]:
    """Read a JSON array of mission records."""
    with open(path, "r", encoding="utf-8") as handle:
        payload = json.load(handle)

    if not isinstance(payload, list):
        raise CatalogError(
            "Mission catalog must be a JSON array",
            details={"path": str(path)},
        )
    return payload


__all__ = ["MissionStore", "load_catalog_file"]
