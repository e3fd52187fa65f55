from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel

from engine.ledger import EntryLedger
from engine.missions import MissionStore
from engine.types import Entry, MissionStatus

DEFAULT_EXPORT_PREFIX = "fieldgate_data"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# The three top-level members and every field name below are the exported
# file's contract. Add fields, never rename.


class ExportInfo(BaseModel):
    exported_at: str
    total_entries: int
    missions_completed: int
    total_missions: int


class MissionSummary(BaseModel):
    id: str
    title: str
    status: MissionStatus
    entries_collected: int
    required_count: int


class ExportDocument(BaseModel):
    export_info: ExportInfo
    mission_summary: List[MissionSummary]
    collected_data: List[Entry]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class ExportSerializer:
    """Read-only view over the store and ledger that assembles export documents."""

    def __init__(
        self,
        store: MissionStore,
        ledger: EntryLedger,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.ledger = ledger
        self._clock = clock

    def snapshot(self, exported_at: Optional[datetime] = None) -> ExportDocument:
        exported_at = exported_at or self._clock()
        missions = self.store.all()
        entries = list(self.ledger.all())

        return ExportDocument(
            export_info=ExportInfo(
                exported_at=_iso(exported_at),
                total_entries=len(entries),
                missions_completed=sum(1 for m in missions if m.is_completed),
                total_missions=len(missions),
            ),
            mission_summary=[
                MissionSummary(
                    id=m.id,
                    title=m.title,
                    status=m.status,
                    entries_collected=m.entries_collected,
                    required_count=m.required_count,
                )
                for m in missions
            ],
            collected_data=entries,
        )


def to_json(document: ExportDocument) -> str:
    return json.dumps(document.to_dict(), indent=2, ensure_ascii=False)


def export_filename(exported_at: datetime, prefix: str = DEFAULT_EXPORT_PREFIX) -> str:
    """`<prefix>_2025-01-31T08-15-00.json`; colons and dots are not filename-safe."""
    stamp = exported_at.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"{prefix}_{stamp}.json"


__all__ = [
    "DEFAULT_EXPORT_PREFIX",
    "ExportInfo",
    "MissionSummary",
    "ExportDocument",
    "ExportSerializer",
    "to_json",
    "export_filename",
]
