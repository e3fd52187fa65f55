from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from api.archive import archive_export, get_archived, list_archived, record_summary
from api.db import get_db
from api.deps import get_engine, run_command
from engine.commands import CommandResult, ExportRequest
from engine.context import EngineContext
from engine.export import to_json

router = APIRouter(prefix="/export", tags=["export"])

MAX_ARCHIVE_PAGE = 100


def _export(ctx: EngineContext) -> CommandResult:
    result = run_command(ctx, ExportRequest())
    if not result.ok or result.export is None:
        # export is a pure read; failing here is a defect
        raise HTTPException(status_code=500, detail=result.hint or "export failed")
    return result


@router.get("")
def download(ctx: EngineContext = Depends(get_engine)) -> Response:
    """The export document as a JSON attachment."""
    result = _export(ctx)
    return Response(
        content=to_json(result.export),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{result.filename}"'},
    )


@router.post("/archive", status_code=201)
def archive(
    ctx: EngineContext = Depends(get_engine),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    result = _export(ctx)
    rec = archive_export(db, document=result.export, filename=result.filename)
    return record_summary(rec)


@router.get("/archive")
def archived(
    limit: int = Query(20, ge=1, le=MAX_ARCHIVE_PAGE),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    items = list_archived(db, limit=limit)
    return {"items": items, "total": len(items)}


@router.get("/archive/{archive_id}")
def archived_document(archive_id: int, db: Session = Depends(get_db)) -> dict[str, Any]:
    rec = get_archived(db, archive_id)
    if rec is None:
        raise HTTPException(status_code=404, detail="Export snapshot not found")
    return rec.document
