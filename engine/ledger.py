from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Tuple

from loguru import logger

from engine.errors import DuplicateEntry, IndexOutOfRange, ValidationError
from engine.types import MIN_DESCRIPTION_LENGTH, Entry, EntryCandidate


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_entry_id() -> str:
    return str(uuid.uuid4())


def validate_description(description: Optional[str], min_length: int = MIN_DESCRIPTION_LENGTH) -> str:
    text = (description or "").strip()
    errors: List[Dict[str, str]] = []
    if not text:
        errors.append({"field": "description", "message": "Description is required"})
    elif len(text) < min_length:
        errors.append(
            {
                "field": "description",
                "message": f"Description must be at least {min_length} characters",
            }
        )
    if errors:
        raise ValidationError(errors)
    return text


class EntryLedger:
    """
    Ordered store of collected entries.

    Insertion order is the export order and the index space used by undo/redo.
    """

    def __init__(
        self,
        *,
        min_description_length: int = MIN_DESCRIPTION_LENGTH,
        id_factory: Callable[[], str] = new_entry_id,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.min_description_length = int(min_description_length)
        self._id_factory = id_factory
        self._clock = clock
        self._entries: List[Entry] = []

    def append(self, candidate: EntryCandidate) -> Entry:
        description = validate_description(candidate.description, self.min_description_length)

        now = self._clock()
        entry = Entry(
            id=self._id_factory(),
            user_id=candidate.user_id,
            user_name=candidate.user_name,
            mission_id=candidate.mission_id,
            mission_title=candidate.mission_title,
            entry_number=self.count_for_mission(candidate.mission_id) + 1,
            description=description,
            latitude=candidate.latitude,
            longitude=candidate.longitude,
            category=candidate.category,
            subcategory=candidate.subcategory,
            priority=candidate.priority,
            submitted_at=now,
            updated_at=now,
            last_activity_at=now,
            device_info=candidate.device_info,
            collected_at=now,
        )
        self._entries.append(entry)
        logger.debug(
            "ledger_append",
            extra={"entry_id": entry.id, "mission_id": entry.mission_id, "size": len(self._entries)},
        )
        return entry

    def remove_at(self, index: int) -> Entry:
        if not 0 <= index < len(self._entries):
            raise IndexOutOfRange(index, len(self._entries))
        return self._entries.pop(index)

    def insert_preserving_snapshot(self, entry: Entry, index: Optional[int] = None) -> int:
        """Put a previously removed entry back verbatim. Returns its index."""
        if self.index_of(entry.id) is not None:
            raise DuplicateEntry(
                f"Entry already in ledger: {entry.id}",
                details={"entry_id": entry.id},
            )

        if index is None:
            index = len(self._entries)
        if not 0 <= index <= len(self._entries):
            raise IndexOutOfRange(index, len(self._entries))

        self._entries.insert(index, entry)
        return index

    def index_of(self, entry_id: str) -> Optional[int]:
        for i, e in enumerate(self._entries):
            if e.id == entry_id:
                return i
        return None

    def get(self, index: int) -> Entry:
        if not 0 <= index < len(self._entries):
            raise IndexOutOfRange(index, len(self._entries))
        return self._entries[index]

    def count_for_mission(self, mission_id: str) -> int:
        return sum(1 for e in self._entries if e.mission_id == mission_id)

    def all(self) -> Tuple[Entry, ...]:
        return tuple(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["EntryLedger", "new_entry_id", "validate_description"]
