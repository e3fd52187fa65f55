from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_engine, respond, run_command
from engine.commands import Identify, LeaveMission, PlaceAttempt, SelectMission
from engine.context import EngineContext

router = APIRouter(prefix="/session", tags=["session"])


@router.get("")
def session_state(ctx: EngineContext = Depends(get_engine)) -> dict[str, Any]:
    with ctx.lock:
        s = ctx.session
        depth = ctx.history.depth()
        return {
            "user_id": s.user_id,
            "user_name": s.user_name,
            "identified": s.identified,
            "active_mission_id": s.active_mission_id,
            "placement": s.placement.model_dump() if s.placement else None,
            "placement_constrained": s.placement_constrained,
            "catalog_loaded": ctx.store.loaded,
            "total_entries": len(ctx.ledger),
            "undo_depth": depth.undo_depth,
            "redo_depth": depth.redo_depth,
        }


@router.post("/identify")
def identify(body: Identify, ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, body))


@router.post("/select")
def select_mission(body: SelectMission, ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, body))


@router.post("/leave")
def leave_mission(ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, LeaveMission()))


@router.post("/place")
def place(body: PlaceAttempt, ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, body))
