from __future__ import annotations

from typing import Any, Dict, List, Optional


class EngineError(Exception):
    """
    Base for every failure the engine reports back to its caller.

    `kind` is the stable discriminator surfaced in command results; callers
    branch on it rather than on the Python class.
    """

    kind: str = "engine_error"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    def as_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "details": self.details}


class ValidationError(EngineError):
    kind = "validation_error"

    def __init__(self, errors: List[Dict[str, str]]) -> None:
        message = "; ".join(e["message"] for e in errors) or "Invalid input"
        super().__init__(message, details={"errors": list(errors)})
        self.errors = list(errors)


class BoundaryViolation(EngineError):
    """A placement outside the geofence. Carries the rejected outcome for re-display."""

    kind = "boundary_violation"

    def __init__(self, message: str, *, placement: Optional[Any] = None, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, details=details)
        self.placement = placement


class MissionNotFound(EngineError):
    kind = "mission_not_found"

    def __init__(self, mission_id: str) -> None:
        super().__init__(f"Mission not found: {mission_id}", details={"mission_id": mission_id})
        self.mission_id = mission_id


class IndexOutOfRange(EngineError):
    kind = "index_out_of_range"

    def __init__(self, index: int, size: int) -> None:
        super().__init__(
            f"Index {index} out of range for size {size}",
            details={"index": index, "size": size},
        )


class DuplicateEntry(EngineError):
    kind = "duplicate_entry"


class NothingToUndo(EngineError):
    kind = "nothing_to_undo"

    def __init__(self) -> None:
        super().__init__("Nothing to undo!")


class NothingToRedo(EngineError):
    kind = "nothing_to_redo"

    def __init__(self) -> None:
        super().__init__("Nothing to redo!")


class NoActiveMission(EngineError):
    kind = "no_active_mission"

    def __init__(self) -> None:
        super().__init__("No mission is active")


class NoPlacement(EngineError):
    kind = "no_placement"

    def __init__(self) -> None:
        super().__init__("Please place a pin on the map first")


class CatalogNotLoaded(EngineError):
    kind = "catalog_not_loaded"

    def __init__(self) -> None:
        super().__init__("Mission catalog has not been loaded")


class CatalogLocked(EngineError):
    kind = "catalog_locked"


class CatalogError(EngineError):
    kind = "catalog_error"


__all__ = [
    "EngineError",
    "ValidationError",
    "BoundaryViolation",
    "MissionNotFound",
    "IndexOutOfRange",
    "DuplicateEntry",
    "NothingToUndo",
    "NothingToRedo",
    "NoActiveMission",
    "NoPlacement",
    "CatalogNotLoaded",
    "CatalogLocked",
    "CatalogError",
]
