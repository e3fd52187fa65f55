# engine/__init__.py
from __future__ import annotations

from .commands import CommandResult, dispatch, parse_command
from .context import EngineContext, Session
from .errors import EngineError
from .export import ExportDocument, ExportSerializer, export_filename, to_json
from .geofence import constrain_to_boundary, distance, is_within_boundary, path_length
from .history import HistoryAction, HistoryManager
from .ledger import EntryLedger
from .missions import MissionStore, load_catalog_file
from .types import Entry, GeoPoint, Mission, MissionProgress, MissionStatus, Priority

__all__ = [
    "CommandResult",
    "dispatch",
    "parse_command",
    "EngineContext",
    "Session",
    "EngineError",
    "ExportDocument",
    "ExportSerializer",
    "export_filename",
    "to_json",
    "constrain_to_boundary",
    "distance",
    "is_within_boundary",
    "path_length",
    "HistoryAction",
    "HistoryManager",
    "EntryLedger",
    "MissionStore",
    "load_catalog_file",
    "Entry",
    "GeoPoint",
    "Mission",
    "MissionProgress",
    "MissionStatus",
    "Priority",
]
