# api/db_models.py
from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, DateTime, Integer, String, Text, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow():
    return datetime.now(timezone.utc)


class ExportRecord(Base):
    """One archived export document (the durable artifact of a session)."""

    __tablename__ = "export_snapshots"

    id = Column(Integer, primary_key=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    filename = Column(String(255), nullable=False, index=True)
    exported_at = Column(String(64), nullable=False)

    total_entries = Column(Integer, nullable=False, default=0)
    missions_completed = Column(Integer, nullable=False, default=0)
    total_missions = Column(Integer, nullable=False, default=0)

    document_json = Column(Text, nullable=False)

    @property
    def document(self) -> dict[str, Any]:
        return json.loads(self.document_json or "{}")
