"""
Discrete engine commands and their synchronous dispatch.

Display collaborators turn clicks, drags and key presses into one of the
command models below and hand it to `dispatch`. Every command runs to
completion under the context lock and comes back as a `CommandResult`:
either `ok=True` with whatever the command produced, or `ok=False` with an
`error.kind` naming the failure. Failed commands leave state untouched.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable, Dict, List, Literal, Mapping, Optional, Union

from loguru import logger
from pydantic import BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from engine import display
from engine.context import EngineContext
from engine.display import DisplayEvent, PlacementPin
from engine.errors import (
    BoundaryViolation,
    CatalogLocked,
    EngineError,
    NoPlacement,
    ValidationError,
)
from engine.export import ExportDocument, export_filename
from engine.geofence import constrain_to_boundary, distance, is_within_boundary
from engine.ledger import validate_description
from engine.measure import MeasurementView
from engine.taxonomy import category_for, is_valid_pair, subcategories_for
from engine.types import (
    Entry,
    EntryCandidate,
    GeoPoint,
    HistoryDepth,
    MissionProgress,
    PlacementOutcome,
    Priority,
)

# Kinds that mean a collaborator broke the contract rather than a user mistake.
DEFECT_KINDS = {"mission_not_found", "index_out_of_range", "duplicate_entry"}


# --- Commands ---------------------------------------------------------------

class LoadCatalog(BaseModel):
    type: Literal["load_catalog"] = "load_catalog"
    missions: List[Dict[str, Any]]


class Identify(BaseModel):
    type: Literal["identify"] = "identify"
    user_id: str = ""
    user_name: str = ""


class SelectMission(BaseModel):
    type: Literal["select_mission"] = "select_mission"
    mission_id: str


class LeaveMission(BaseModel):
    type: Literal["leave_mission"] = "leave_mission"


class PlaceAttempt(BaseModel):
    type: Literal["place_attempt"] = "place_attempt"
    point: GeoPoint
    # tap: outside is rejected; drag: outside is pulled back onto the edge
    mode: Literal["tap", "drag"] = "tap"


class Submit(BaseModel):
    type: Literal["submit"] = "submit"
    description: str = ""
    category: Optional[str] = None
    subcategory: Optional[str] = None
    priority: Priority = Priority.LOW
    point: Optional[GeoPoint] = None
    device_info: Optional[Dict[str, Any]] = None


class Undo(BaseModel):
    type: Literal["undo"] = "undo"


class Redo(BaseModel):
    type: Literal["redo"] = "redo"


class ExportRequest(BaseModel):
    type: Literal["export_request"] = "export_request"


class MeasureAdd(BaseModel):
    type: Literal["measure_add"] = "measure_add"
    point: GeoPoint


class MeasureMove(BaseModel):
    type: Literal["measure_move"] = "measure_move"
    index: int
    point: GeoPoint


class MeasureRemove(BaseModel):
    type: Literal["measure_remove"] = "measure_remove"
    index: int


class MeasureClear(BaseModel):
    type: Literal["measure_clear"] = "measure_clear"


Command = Annotated[
    Union[
        LoadCatalog,
        Identify,
        SelectMission,
        LeaveMission,
        PlaceAttempt,
        Submit,
        Undo,
        Redo,
        ExportRequest,
        MeasureAdd,
        MeasureMove,
        MeasureRemove,
        MeasureClear,
    ],
    Field(discriminator="type"),
]

_COMMAND_ADAPTER: TypeAdapter = TypeAdapter(Command)


def parse_command(data: Mapping[str, Any]):
    try:
        return _COMMAND_ADAPTER.validate_python(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(
            [
                {"field": ".".join(str(p) for p in err["loc"]) or "command", "message": err["msg"]}
                for err in e.errors()
            ]
        ) from e


# --- Results ----------------------------------------------------------------

class CommandError(BaseModel):
    kind: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class CommandResult(BaseModel):
    ok: bool = True
    command: str
    error: Optional[CommandError] = None
    hint: Optional[str] = None

    placement: Optional[PlacementOutcome] = None
    entry: Optional[Entry] = None
    progress: Optional[MissionProgress] = None
    missions: Optional[List[MissionProgress]] = None
    history: HistoryDepth = Field(default_factory=HistoryDepth)
    export: Optional[ExportDocument] = None
    filename: Optional[str] = None
    measurement: Optional[MeasurementView] = None

    display: List[DisplayEvent] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def _fmt_radius(radius_m: float) -> str:
    return f"{radius_m:g}m radius"


# --- Handlers ---------------------------------------------------------------

def _load_catalog(ctx: EngineContext, cmd: LoadCatalog) -> CommandResult:
    if ctx.catalog_locked:
        raise CatalogLocked("Mission catalog cannot be replaced once collection has started")

    ctx.store.load_catalog(cmd.missions)
    return CommandResult(
        command=cmd.type,
        missions=[ctx.store.progress(m.id) for m in ctx.store.all()],
    )


def _identify(ctx: EngineContext, cmd: Identify) -> CommandResult:
    user_id = cmd.user_id.strip()
    user_name = cmd.user_name.strip()

    errors = []
    if not user_id:
        errors.append({"field": "user_id", "message": "Tester ID is required"})
    if not user_name:
        errors.append({"field": "user_name", "message": "Full name is required"})
    if errors:
        raise ValidationError(errors)

    ctx.session.user_id = user_id
    ctx.session.user_name = user_name
    logger.info("operator_identified", extra={"user_id": user_id})
    return CommandResult(command=cmd.type)


def _clear_view(ctx: EngineContext) -> List[DisplayEvent]:
    """Display events that take down the active mission's boundary and pin."""
    events: List[DisplayEvent] = []
    session = ctx.session
    if session.placement is not None:
        events.append(display.remove(PlacementPin(point=session.placement)))
    if session.active_mission_id is not None:
        mission = ctx.store.get(session.active_mission_id)
        if mission is not None:
            events.append(display.remove(display.boundary_circle(mission)))
    return events


def _select_mission(ctx: EngineContext, cmd: SelectMission) -> CommandResult:
    ctx.require_catalog()
    mission = ctx.store.find(cmd.mission_id)

    events = _clear_view(ctx)
    ctx.session.active_mission_id = mission.id
    ctx.session.clear_placement()
    events.append(display.add(display.boundary_circle(mission)))

    logger.info("mission_selected", extra={"mission_id": mission.id})
    return CommandResult(
        command=cmd.type,
        progress=ctx.store.progress(mission.id),
        hint=f"Tap within the highlighted area ({_fmt_radius(mission.radius_m)}) to place a pin.",
        display=events,
    )


def _leave_mission(ctx: EngineContext, cmd: LeaveMission) -> CommandResult:
    events = _clear_view(ctx)
    ctx.session.active_mission_id = None
    ctx.session.clear_placement()
    return CommandResult(command=cmd.type, display=events)


def _rejected(point: GeoPoint, distance_m: float, radius_m: float) -> BoundaryViolation:
    hint = f"Please place the pin within the marked area ({_fmt_radius(radius_m)})"
    outcome = PlacementOutcome(
        status="rejected",
        requested=point,
        point=None,
        distance_m=distance_m,
        radius_m=radius_m,
        hint=hint,
    )
    return BoundaryViolation(
        hint,
        placement=outcome,
        details={"distance_m": round(distance_m, 3), "radius_m": radius_m},
    )


def _place_attempt(ctx: EngineContext, cmd: PlaceAttempt) -> CommandResult:
    mission = ctx.active_mission()
    radius = mission.radius_m
    d = distance(cmd.point, mission.target)

    if d <= radius:
        outcome = PlacementOutcome(
            status="accepted",
            requested=cmd.point,
            point=cmd.point,
            distance_m=d,
            radius_m=radius,
            hint="Pin placed! Fill out the form and click Submit.",
        )
    elif cmd.mode == "drag":
        outcome = PlacementOutcome(
            status="constrained",
            requested=cmd.point,
            point=constrain_to_boundary(cmd.point, mission.target, radius),
            distance_m=d,
            radius_m=radius,
            hint="Marker constrained to boundary",
        )
    else:
        raise _rejected(cmd.point, d, radius)

    had_pin = ctx.session.placement is not None
    ctx.session.placement = outcome.point
    ctx.session.placement_constrained = outcome.status == "constrained"

    pin = PlacementPin(point=outcome.point, constrained=ctx.session.placement_constrained)
    return CommandResult(
        command=cmd.type,
        placement=outcome,
        hint=outcome.hint,
        display=[display.move(pin) if had_pin else display.add(pin)],
    )


def _classify(cmd: Submit, suggested: str) -> tuple[str, str]:
    if cmd.category is None and cmd.subcategory is None:
        return category_for(suggested), suggested
    if cmd.subcategory is None:
        category = cmd.category
        if is_valid_pair(category, suggested):
            return category, suggested
        return category, subcategories_for(category)[0]
    if cmd.category is None:
        return category_for(cmd.subcategory), cmd.subcategory
    return cmd.category, cmd.subcategory


def _submit(ctx: EngineContext, cmd: Submit) -> CommandResult:
    mission = ctx.active_mission()
    session = ctx.session

    point = cmd.point or session.placement
    if point is None:
        raise NoPlacement()

    d = distance(point, mission.target)
    if not is_within_boundary(point, mission.target, mission.radius_m):
        raise _rejected(point, d, mission.radius_m)

    category, subcategory = _classify(cmd, mission.suggested_category)

    errors = []
    try:
        validate_description(cmd.description, ctx.ledger.min_description_length)
    except ValidationError as e:
        errors.extend(e.errors)
    if not is_valid_pair(category, subcategory):
        errors.append(
            {
                "field": "subcategory",
                "message": f"Subcategory '{subcategory}' does not belong to category '{category}'",
            }
        )
    if errors:
        raise ValidationError(errors)

    step = ctx.history.submit(
        EntryCandidate(
            mission_id=mission.id,
            mission_title=mission.title,
            latitude=point.lat,
            longitude=point.lng,
            description=cmd.description,
            category=category,
            subcategory=subcategory,
            priority=cmd.priority,
            user_id=session.user_id,
            user_name=session.user_name,
            device_info=cmd.device_info,
        )
    )

    events: List[DisplayEvent] = []
    if session.placement is not None:
        events.append(display.remove(PlacementPin(point=session.placement)))
    session.clear_placement()
    events.append(display.add(display.entry_marker(step.entry)))

    progress = step.progress
    if progress.transition == "completed":
        # completed missions hand the operator back to the mission list
        events.append(display.remove(display.boundary_circle(mission)))
        session.active_mission_id = None
        hint = f'Mission "{mission.title}" completed!'
    else:
        hint = f"Entry {progress.entries_collected}/{progress.required_count} saved!"

    return CommandResult(
        command=cmd.type,
        entry=step.entry,
        progress=progress,
        hint=hint,
        display=events,
    )


def _undo(ctx: EngineContext, cmd: Undo) -> CommandResult:
    step = ctx.history.undo()
    return CommandResult(
        command=cmd.type,
        entry=step.entry,
        progress=step.progress,
        hint="Entry undone!",
        display=[display.remove(display.entry_marker(step.entry))],
    )


def _redo(ctx: EngineContext, cmd: Redo) -> CommandResult:
    step = ctx.history.redo()
    return CommandResult(
        command=cmd.type,
        entry=step.entry,
        progress=step.progress,
        hint="Entry redone!",
        display=[display.add(display.entry_marker(step.entry))],
    )


def _export_request(ctx: EngineContext, cmd: ExportRequest) -> CommandResult:
    exported_at = ctx.clock()
    document = ctx.exporter.snapshot(exported_at)
    total = document.export_info.total_entries
    return CommandResult(
        command=cmd.type,
        export=document,
        filename=export_filename(exported_at, ctx.export_prefix),
        hint=f"Exported {total} entries" if total else "No data collected yet!",
    )


def _measure_add(ctx: EngineContext, cmd: MeasureAdd) -> CommandResult:
    index = ctx.measurement.add(cmd.point)
    return CommandResult(
        command=cmd.type,
        measurement=ctx.measurement.view(),
        display=[display.add(display.MeasurePoint(index=index, point=cmd.point))],
    )


def _measure_move(ctx: EngineContext, cmd: MeasureMove) -> CommandResult:
    ctx.measurement.move(cmd.index, cmd.point)
    return CommandResult(
        command=cmd.type,
        measurement=ctx.measurement.view(),
        display=[display.move(display.MeasurePoint(index=cmd.index, point=cmd.point))],
    )


def _measure_remove(ctx: EngineContext, cmd: MeasureRemove) -> CommandResult:
    point = ctx.measurement.remove(cmd.index)
    return CommandResult(
        command=cmd.type,
        measurement=ctx.measurement.view(),
        hint="Measurement point removed",
        display=[display.remove(display.MeasurePoint(index=cmd.index, point=point))],
    )


def _measure_clear(ctx: EngineContext, cmd: MeasureClear) -> CommandResult:
    events = [display.remove(h) for h in ctx.measurement.view().handles]
    ctx.measurement.clear()
    return CommandResult(
        command=cmd.type,
        measurement=ctx.measurement.view(),
        hint="Measurements cleared",
        display=events,
    )


_HANDLERS: Dict[str, Callable[[EngineContext, Any], CommandResult]] = {
    "load_catalog": _load_catalog,
    "identify": _identify,
    "select_mission": _select_mission,
    "leave_mission": _leave_mission,
    "place_attempt": _place_attempt,
    "submit": _submit,
    "undo": _undo,
    "redo": _redo,
    "export_request": _export_request,
    "measure_add": _measure_add,
    "measure_move": _measure_move,
    "measure_remove": _measure_remove,
    "measure_clear": _measure_clear,
}


def _failure(ctx: EngineContext, command: str, err: EngineError) -> CommandResult:
    if err.kind in DEFECT_KINDS:
        logger.error("command_contract_violation", extra={"command": command, **err.as_dict()})
    else:
        logger.info("command_rejected", extra={"command": command, "kind": err.kind})

    return CommandResult(
        ok=False,
        command=command,
        error=CommandError(**err.as_dict()),
        placement=getattr(err, "placement", None),
        hint=err.message,
        history=ctx.history.depth(),
    )


def dispatch(ctx: EngineContext, command: Union[BaseModel, Mapping[str, Any]]) -> CommandResult:
    """Run one command against the context and report what happened."""
    if isinstance(command, Mapping):
        name = str(command.get("type") or "unknown")
        try:
            command = parse_command(command)
        except ValidationError as e:
            return _failure(ctx, name, e)

    name = command.type
    handler = _HANDLERS[name]

    with ctx.lock:
        try:
            result = handler(ctx, command)
        except EngineError as e:
            return _failure(ctx, name, e)

        result.history = ctx.history.depth()

    logger.debug("command_dispatched", extra={"command": name})
    return result


__all__ = [
    "LoadCatalog",
    "Identify",
    "SelectMission",
    "LeaveMission",
    "PlaceAttempt",
    "Submit",
    "Undo",
    "Redo",
    "ExportRequest",
    "MeasureAdd",
    "MeasureMove",
    "MeasureRemove",
    "MeasureClear",
    "Command",
    "CommandError",
    "CommandResult",
    "parse_command",
    "dispatch",
]
