from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

DEFAULT_BOUNDARY_RADIUS_M = 20.0
MIN_DESCRIPTION_LENGTH = 10


class MissionStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class GeoPoint(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)

    model_config = {"frozen": True}


class Mission(BaseModel):
    """
    A predefined survey target. Read-only fields come from the catalog;
    `status` and `entries_collected` are owned by the MissionStore.
    """

    id: str
    title: str
    instruction: str = ""
    target: GeoPoint
    boundary_radius: Optional[float] = Field(default=None, gt=0.0)
    required_count: int = Field(..., gt=0)
    # a subcategory name, mapped to its category by engine.taxonomy
    suggested_category: str = "Others"
    zoom: Optional[int] = None  # display hint only

    status: MissionStatus = MissionStatus.PENDING
    entries_collected: int = Field(default=0, ge=0)

    model_config = {"extra": "ignore"}

    @property
    def radius_m(self) -> float:
        return float(self.boundary_radius or DEFAULT_BOUNDARY_RADIUS_M)

    @property
    def is_completed(self) -> bool:
        return self.status == MissionStatus.COMPLETED


class MissionProgress(BaseModel):
    mission_id: str
    title: str
    status: MissionStatus
    entries_collected: int
    required_count: int
    percent: float
    # set only on the mutation that flipped the status
    transition: Optional[Literal["completed", "reopened"]] = None


class EntryCandidate(BaseModel):
    """Everything needed to mint an Entry; validated by the ledger, not here."""

    mission_id: str
    mission_title: str = ""
    latitude: float
    longitude: float
    description: str = ""
    category: str = "Others"
    subcategory: str = "Others"
    priority: Priority = Priority.LOW
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    device_info: Optional[Dict[str, Any]] = None


class Entry(BaseModel):
    """
    One collected record. Aliases are the export field names and must not change.
    """

    id: str
    user_id: Optional[str] = None
    user_name: Optional[str] = None

    mission_id: str = Field(..., alias="_mission_id")
    mission_title: str = Field("", alias="_mission_title")
    entry_number: int = Field(..., ge=1, alias="_entry_number")

    description: str = Field(..., alias="descriptive_su")

    latitude: float
    longitude: float

    category: str
    subcategory: str

    department_r: List[str] = Field(default_factory=list)
    preferred_departments: List[str] = Field(default_factory=list)
    workflow_status: str = "new"
    priority: Priority = Priority.LOW
    status: str = "pending"
    confirmation_status: str = "pending"
    is_duplicate: bool = False
    confirmed_by_citizen: bool = False
    all_responders_confirmed: bool = False

    submitted_at: datetime
    updated_at: datetime
    last_activity_at: datetime

    device_info: Optional[Dict[str, Any]] = Field(default=None, alias="_device_info")
    collected_at: datetime = Field(..., alias="_collected_at")

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def point(self) -> GeoPoint:
        return GeoPoint(lat=self.latitude, lng=self.longitude)


class PlacementOutcome(BaseModel):
    status: Literal["accepted", "constrained", "rejected"]
    requested: GeoPoint
    point: Optional[GeoPoint] = None
    distance_m: float
    radius_m: float
    hint: str = ""


class HistoryDepth(BaseModel):
    undo_depth: int = 0
    redo_depth: int = 0


__all__ = [
    "DEFAULT_BOUNDARY_RADIUS_M",
    "MIN_DESCRIPTION_LENGTH",
    "MissionStatus",
    "Priority",
    "GeoPoint",
    "Mission",
    "MissionProgress",
    "EntryCandidate",
    "Entry",
    "PlacementOutcome",
    "HistoryDepth",
]
