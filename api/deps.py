from __future__ import annotations

import time
from typing import Any, Mapping, Union

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.metrics import (
    COMMAND_LATENCY_SECONDS,
    COMMANDS_TOTAL,
    LEDGER_ENTRIES,
    PLACEMENT_OUTCOMES,
)
from engine.commands import CommandResult, dispatch
from engine.context import EngineContext

# failure kind -> HTTP status; anything unlisted is a server-side defect
STATUS_BY_KIND: dict[str, int] = {
    "validation_error": 422,
    "boundary_violation": 409,
    "no_active_mission": 409,
    "no_placement": 409,
    "nothing_to_undo": 409,
    "nothing_to_redo": 409,
    "catalog_locked": 409,
    "catalog_error": 422,
    "mission_not_found": 404,
    "index_out_of_range": 404,
    "catalog_not_loaded": 503,
}


def get_engine(request: Request) -> EngineContext:
    ctx = getattr(request.app.state, "engine", None)
    if ctx is None:
        raise HTTPException(status_code=503, detail="engine not initialised")
    return ctx


def run_command(ctx: EngineContext, command: Union[BaseModel, Mapping[str, Any]]) -> CommandResult:
    started = time.perf_counter()
    result = dispatch(ctx, command)
    elapsed = time.perf_counter() - started

    outcome = "ok" if result.ok else (result.error.kind if result.error else "error")
    COMMANDS_TOTAL.labels(result.command, outcome).inc()
    COMMAND_LATENCY_SECONDS.labels(result.command).observe(elapsed)
    if result.placement is not None:
        PLACEMENT_OUTCOMES.labels(result.placement.status).inc()
    LEDGER_ENTRIES.set(len(ctx.ledger))
    return result


def respond(result: CommandResult) -> JSONResponse:
    if result.ok:
        status = 200
    else:
        kind = result.error.kind if result.error else ""
        status = STATUS_BY_KIND.get(kind, 500)
    return JSONResponse(status_code=status, content=result.to_dict())
