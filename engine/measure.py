from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from engine.display import MeasureLabel, MeasurePoint, VisualHandle
from engine.errors import IndexOutOfRange
from engine.geofence import path_length
from engine.types import GeoPoint


def format_distance(meters: float) -> str:
    if meters < 1000:
        return f"{meters:.1f} m"
    return f"{meters / 1000:.2f} km"


class MeasurementView(BaseModel):
    points: List[GeoPoint] = Field(default_factory=list)
    total_m: float = 0.0
    label: Optional[str] = None
    handles: List[VisualHandle] = Field(default_factory=list)


class MeasurementPath:
    """Free-form polyline for measuring distances on the map."""

    def __init__(self) -> None:
        self._points: List[GeoPoint] = []

    def _check(self, index: int) -> None:
        if not 0 <= index < len(self._points):
            raise IndexOutOfRange(index, len(self._points))

    def add(self, point: GeoPoint) -> int:
        self._points.append(point)
        return len(self._points) - 1

    def move(self, index: int, point: GeoPoint) -> None:
        self._check(index)
        self._points[index] = point

    def remove(self, index: int) -> GeoPoint:
        self._check(index)
        return self._points.pop(index)

    def clear(self) -> None:
        self._points.clear()

    @property
    def points(self) -> List[GeoPoint]:
        return list(self._points)

    @property
    def total_m(self) -> float:
        return path_length(self._points)

    def view(self) -> MeasurementView:
        handles: List[VisualHandle] = [
            MeasurePoint(index=i, point=p) for i, p in enumerate(self._points)
        ]

        label = None
        total = self.total_m
        if len(self._points) >= 2:
            label = format_distance(total)
            handles.append(MeasureLabel(point=self._points[-1], text=f"Distance: {label}"))

        return MeasurementView(points=self.points, total_m=total, label=label, handles=handles)

    def __len__(self) -> int:
        return len(self._points)


__all__ = ["MeasurementPath", "MeasurementView", "format_distance"]
