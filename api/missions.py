from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_engine
from engine.context import EngineContext
from engine.types import MissionProgress

router = APIRouter(prefix="/missions", tags=["missions"])


def _require_loaded(ctx: EngineContext) -> None:
    if not ctx.store.loaded:
        raise HTTPException(status_code=503, detail="Mission catalog has not been loaded")


@router.get("")
def list_missions(ctx: EngineContext = Depends(get_engine)) -> list[dict[str, Any]]:
    """Catalog in load order, with live progress fields."""
    with ctx.lock:
        _require_loaded(ctx)
        return [m.model_dump(mode="json") for m in ctx.store.all()]


@router.get("/{mission_id}")
def get_mission(mission_id: str, ctx: EngineContext = Depends(get_engine)) -> dict[str, Any]:
    with ctx.lock:
        _require_loaded(ctx)
        mission = ctx.store.get(mission_id)
        if mission is None:
            raise HTTPException(status_code=404, detail="Mission not found")
        return mission.model_dump(mode="json")


@router.get("/{mission_id}/progress", response_model=MissionProgress)
def mission_progress(mission_id: str, ctx: EngineContext = Depends(get_engine)) -> MissionProgress:
    with ctx.lock:
        _require_loaded(ctx)
        if mission_id not in ctx.store:
            raise HTTPException(status_code=404, detail="Mission not found")
        return ctx.store.progress(mission_id)
