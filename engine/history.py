from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from loguru import logger

from engine.errors import DuplicateEntry, IndexOutOfRange, NothingToRedo, NothingToUndo
from engine.ledger import EntryLedger
from engine.missions import MissionStore
from engine.types import Entry, EntryCandidate, HistoryDepth, MissionProgress


@dataclass(frozen=True)
class HistoryAction:
    entry_snapshot: Entry
    mission_id: str
    ledger_index: int


@dataclass(frozen=True)
class HistoryStep:
    """What a submit/undo/redo did, for the caller to report."""

    action: HistoryAction
    entry: Entry
    progress: MissionProgress
    depth: HistoryDepth


class HistoryManager:
    """
    Undo/redo over ledger + mission mutations.

    Every submit, undo and redo moves exactly one action between the stacks
    together with its ledger/store change. A fresh submit drops the redo
    stack; nothing else discards an action.
    """

    def __init__(self, ledger: EntryLedger, store: MissionStore) -> None:
        self.ledger = ledger
        self.store = store
        self._undo: List[HistoryAction] = []
        self._redo: List[HistoryAction] = []

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def depth(self) -> HistoryDepth:
        return HistoryDepth(undo_depth=len(self._undo), redo_depth=len(self._redo))

    def undo_actions(self) -> tuple[HistoryAction, ...]:
        return tuple(self._undo)

    def redo_actions(self) -> tuple[HistoryAction, ...]:
        return tuple(self._redo)

    def reset(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def submit(self, candidate: EntryCandidate) -> HistoryStep:
        # resolve before touching the ledger so an unknown mission mutates nothing
        self.store.find(candidate.mission_id)

        entry = self.ledger.append(candidate)
        progress = self.store.record_submission(entry.mission_id)

        action = HistoryAction(
            entry_snapshot=entry,
            mission_id=entry.mission_id,
            ledger_index=len(self.ledger) - 1,
        )
        self._undo.append(action)
        self._redo.clear()

        logger.info(
            "entry_submitted",
            extra={
                "entry_id": entry.id,
                "mission_id": entry.mission_id,
                "entry_number": entry.entry_number,
                "undo_depth": len(self._undo),
            },
        )
        return HistoryStep(action=action, entry=entry, progress=progress, depth=self.depth())

    def _locate(self, action: HistoryAction) -> int:
        """
        Ledger position of the action's entry: the recorded index when it
        still holds the same entry, otherwise looked up by id.
        """
        idx = action.ledger_index
        if 0 <= idx < len(self.ledger) and self.ledger.get(idx).id == action.entry_snapshot.id:
            return idx

        found: Optional[int] = self.ledger.index_of(action.entry_snapshot.id)
        if found is None:
            raise IndexOutOfRange(idx, len(self.ledger))
        logger.warning(
            "history_index_drift",
            extra={"entry_id": action.entry_snapshot.id, "recorded": idx, "found": found},
        )
        return found

    def undo(self) -> HistoryStep:
        if not self._undo:
            raise NothingToUndo()

        action = self._undo[-1]
        index = self._locate(action)
        self.store.find(action.mission_id)

        self._undo.pop()
        entry = self.ledger.remove_at(index)
        progress = self.store.reverse_submission(action.mission_id)
        self._redo.append(action)

        logger.info(
            "entry_undone",
            extra={
                "entry_id": entry.id,
                "mission_id": action.mission_id,
                "undo_depth": len(self._undo),
                "redo_depth": len(self._redo),
            },
        )
        return HistoryStep(action=action, entry=entry, progress=progress, depth=self.depth())

    def redo(self) -> HistoryStep:
        if not self._redo:
            raise NothingToRedo()

        action = self._redo[-1]
        self.store.find(action.mission_id)
        if self.ledger.index_of(action.entry_snapshot.id) is not None:
            raise DuplicateEntry(
                f"Entry already in ledger: {action.entry_snapshot.id}",
                details={"entry_id": action.entry_snapshot.id},
            )

        self._redo.pop()
        index = self.ledger.insert_preserving_snapshot(action.entry_snapshot)
        progress = self.store.record_submission(action.mission_id)

        redone = HistoryAction(
            entry_snapshot=action.entry_snapshot,
            mission_id=action.mission_id,
            ledger_index=index,
        )
        self._undo.append(redone)

        logger.info(
            "entry_redone",
            extra={
                "entry_id": action.entry_snapshot.id,
                "mission_id": action.mission_id,
                "undo_depth": len(self._undo),
                "redo_depth": len(self._redo),
            },
        )
        return HistoryStep(
            action=redone,
            entry=action.entry_snapshot,
            progress=progress,
            depth=self.depth(),
        )


__all__ = ["HistoryAction", "HistoryStep", "HistoryManager"]
