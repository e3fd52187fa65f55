from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from engine.errors import CatalogNotLoaded, NoActiveMission
from engine.export import DEFAULT_EXPORT_PREFIX, ExportSerializer
from engine.history import HistoryManager
from engine.ledger import EntryLedger, new_entry_id
from engine.measure import MeasurementPath
from engine.missions import MissionStore
from engine.types import DEFAULT_BOUNDARY_RADIUS_M, MIN_DESCRIPTION_LENGTH, GeoPoint, Mission


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Session:
    """Who is collecting and where they are working right now."""

    user_id: Optional[str] = None
    user_name: Optional[str] = None
    active_mission_id: Optional[str] = None
    placement: Optional[GeoPoint] = None
    placement_constrained: bool = False

    @property
    def identified(self) -> bool:
        return bool(self.user_id and self.user_name)

    def clear_placement(self) -> None:
        self.placement = None
        self.placement_constrained = False


@dataclass
class EngineContext:
    """
    All engine state for one collecting session. Every command receives the
    context explicitly; nothing lives in module globals.
    """

    default_radius_m: float = DEFAULT_BOUNDARY_RADIUS_M
    min_description_length: int = MIN_DESCRIPTION_LENGTH
    export_prefix: str = DEFAULT_EXPORT_PREFIX
    clock: Callable[[], datetime] = _utcnow
    id_factory: Callable[[], str] = new_entry_id

    store: MissionStore = field(init=False)
    ledger: EntryLedger = field(init=False)
    history: HistoryManager = field(init=False)
    exporter: ExportSerializer = field(init=False)
    measurement: MeasurementPath = field(init=False)
    session: Session = field(init=False)
    # one command at a time, even when handlers run on a thread pool
    lock: threading.RLock = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.store = MissionStore(default_radius_m=self.default_radius_m)
        self.ledger = EntryLedger(
            min_description_length=self.min_description_length,
            id_factory=self.id_factory,
            clock=self.clock,
        )
        self.history = HistoryManager(self.ledger, self.store)
        self.exporter = ExportSerializer(self.store, self.ledger, clock=self.clock)
        self.measurement = MeasurementPath()
        self.session = Session()
        self.lock = threading.RLock()

    def require_catalog(self) -> None:
        if not self.store.loaded:
            raise CatalogNotLoaded()

    def active_mission(self) -> Mission:
        self.require_catalog()
        if self.session.active_mission_id is None:
            raise NoActiveMission()
        return self.store.find(self.session.active_mission_id)

    @property
    def catalog_locked(self) -> bool:
        return (
            self.session.active_mission_id is not None
            or len(self.ledger) > 0
            or self.history.can_undo
            or self.history.can_redo
        )


__all__ = ["Session", "EngineContext"]
