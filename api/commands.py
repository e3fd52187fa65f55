from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from api.deps import get_engine, respond, run_command
from engine.context import EngineContext

router = APIRouter(tags=["commands"])


@router.post("/commands")
def command(
    payload: Dict[str, Any] = Body(..., examples=[{"type": "undo"}]),
    ctx: EngineContext = Depends(get_engine),
) -> JSONResponse:
    """
    Generic entry point: any engine command tagged by `type`
    (place_attempt, submit, undo, redo, export_request, measure_*, ...).
    Malformed commands come back as validation_error results.
    """
    return respond(run_command(ctx, payload))
