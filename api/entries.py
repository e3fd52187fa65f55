from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from api.deps import get_engine, respond, run_command
from engine.commands import Redo, Submit, Undo
from engine.context import EngineContext
from engine.types import HistoryDepth

router = APIRouter(prefix="/entries", tags=["entries"])


@router.get("")
def list_entries(
    mission_id: Optional[str] = Query(None),
    ctx: EngineContext = Depends(get_engine),
) -> dict[str, Any]:
    """Ledger in submission order, using the export field names."""
    with ctx.lock:
        entries = ctx.ledger.all()
        if mission_id:
            entries = tuple(e for e in entries if e.mission_id == mission_id)
        return {
            "items": [e.model_dump(mode="json", by_alias=True) for e in entries],
            "total": len(entries),
        }


@router.post("")
def submit(body: Submit, ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, body))


@router.post("/undo")
def undo(ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, Undo()))


@router.post("/redo")
def redo(ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, Redo()))


@router.get("/history", response_model=HistoryDepth)
def history(ctx: EngineContext = Depends(get_engine)) -> HistoryDepth:
    with ctx.lock:
        return ctx.history.depth()
