"""
Visual handles the display layer renders for engine state.

Each handle kind is its own model tagged by `kind`, so collaborators switch on
the tag instead of inspecting object types.
"""

from __future__ import annotations

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from engine.types import Entry, GeoPoint, Mission

POPUP_SUMMARY_CHARS = 50


class EntryMarker(BaseModel):
    kind: Literal["entry_marker"] = "entry_marker"
    entry_id: str
    point: GeoPoint
    title: str = ""
    summary: str = ""
    priority: str = ""
    submitted_at: Optional[str] = None


class PlacementPin(BaseModel):
    kind: Literal["placement_pin"] = "placement_pin"
    point: GeoPoint
    constrained: bool = False


class BoundaryCircle(BaseModel):
    kind: Literal["boundary"] = "boundary"
    mission_id: str
    center: GeoPoint
    radius_m: float
    zoom: Optional[int] = None


class MeasurePoint(BaseModel):
    kind: Literal["measure_point"] = "measure_point"
    index: int
    point: GeoPoint


class MeasureLabel(BaseModel):
    kind: Literal["measure_label"] = "measure_label"
    point: GeoPoint
    text: str


VisualHandle = Annotated[
    Union[EntryMarker, PlacementPin, BoundaryCircle, MeasurePoint, MeasureLabel],
    Field(discriminator="kind"),
]


class DisplayEvent(BaseModel):
    op: Literal["add", "remove", "move"]
    handle: VisualHandle


def _summary(text: str) -> str:
    if len(text) > POPUP_SUMMARY_CHARS:
        return text[:POPUP_SUMMARY_CHARS] + "..."
    return text


def entry_marker(entry: Entry) -> EntryMarker:
    return EntryMarker(
        entry_id=entry.id,
        point=entry.point,
        title=f"{entry.category} → {entry.subcategory}",
        summary=_summary(entry.description),
        priority=entry.priority.value,
        submitted_at=entry.submitted_at.isoformat(),
    )


def boundary_circle(mission: Mission) -> BoundaryCircle:
    return BoundaryCircle(
        mission_id=mission.id,
        center=mission.target,
        radius_m=mission.radius_m,
        zoom=mission.zoom,
    )


def add(handle) -> DisplayEvent:
    return DisplayEvent(op="add", handle=handle)


def remove(handle) -> DisplayEvent:
    return DisplayEvent(op="remove", handle=handle)


def move(handle) -> DisplayEvent:
    return DisplayEvent(op="move", handle=handle)


__all__ = [
    "EntryMarker",
    "PlacementPin",
    "BoundaryCircle",
    "MeasurePoint",
    "MeasureLabel",
    "VisualHandle",
    "DisplayEvent",
    "entry_marker",
    "boundary_circle",
    "add",
    "remove",
    "move",
]
