from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from api.deps import get_engine, respond, run_command
from engine.commands import MeasureAdd, MeasureClear, MeasureMove, MeasureRemove
from engine.context import EngineContext
from engine.measure import MeasurementView
from engine.types import GeoPoint

router = APIRouter(prefix="/measure", tags=["measure"])


class PointBody(BaseModel):
    point: GeoPoint


@router.get("", response_model=MeasurementView)
def measurement(ctx: EngineContext = Depends(get_engine)) -> MeasurementView:
    with ctx.lock:
        return ctx.measurement.view()


@router.post("/points")
def add_point(body: PointBody, ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, MeasureAdd(point=body.point)))


@router.put("/points/{index}")
def move_point(index: int, body: PointBody, ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, MeasureMove(index=index, point=body.point)))


@router.delete("/points/{index}")
def remove_point(index: int, ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, MeasureRemove(index=index)))


@router.delete("")
def clear(ctx: EngineContext = Depends(get_engine)) -> JSONResponse:
    return respond(run_command(ctx, MeasureClear()))
