# api/archive.py
from __future__ import annotations

import time
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from api.db_models import ExportRecord
from api.metrics import EXPORT_ARCHIVE_ERRORS, EXPORTS_ARCHIVED
from engine.export import ExportDocument, to_json


def archive_export(db: Session, *, document: ExportDocument, filename: str) -> ExportRecord:
    started = time.time()
    info = document.export_info
    rec = ExportRecord(
        filename=filename,
        exported_at=info.exported_at,
        total_entries=info.total_entries,
        missions_completed=info.missions_completed,
        total_missions=info.total_missions,
        document_json=to_json(document),
    )

    try:
        db.add(rec)
        db.commit()
        db.refresh(rec)
    except SQLAlchemyError:
        db.rollback()
        EXPORT_ARCHIVE_ERRORS.inc()
        logger.exception("export_archive_failed", extra={"filename": filename})
        raise

    EXPORTS_ARCHIVED.inc()
    logger.info(
        "export_archived",
        extra={
            "archive_id": rec.id,
            "filename": filename,
            "total_entries": info.total_entries,
            "elapsed_ms": int((time.time() - started) * 1000),
        },
    )
    return rec


def record_summary(rec: ExportRecord) -> dict[str, Any]:
    return {
        "id": rec.id,
        "created_at": rec.created_at.isoformat() if rec.created_at else None,
        "filename": rec.filename,
        "exported_at": rec.exported_at,
        "total_entries": rec.total_entries,
        "missions_completed": rec.missions_completed,
        "total_missions": rec.total_missions,
    }


def list_archived(db: Session, *, limit: int = 20) -> list[dict[str, Any]]:
    rows = db.query(ExportRecord).order_by(ExportRecord.id.desc()).limit(limit).all()
    return [record_summary(r) for r in rows]


def get_archived(db: Session, archive_id: int) -> ExportRecord | None:
    return db.query(ExportRecord).filter(ExportRecord.id == archive_id).one_or_none()
