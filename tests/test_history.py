import pytest

from engine.errors import (
    DuplicateEntry,
    IndexOutOfRange,
    MissionNotFound,
    NothingToRedo,
    NothingToUndo,
    ValidationError,
)
from engine.history import HistoryManager
from engine.ledger import EntryLedger
from engine.missions import MissionStore
from engine.types import EntryCandidate, MissionStatus
from tests._harness import FixedClock


def _candidate(mission_id="m-plaza", description="Cracked slab near bench") -> EntryCandidate:
    return EntryCandidate(
        mission_id=mission_id,
        mission_title="Plaza",
        latitude=6.75,
        longitude=125.356,
        description=description,
        category="Infrastructure",
        subcategory="Broken Sidewalk",
    )


@pytest.fixture
def history(catalog) -> HistoryManager:
    store = MissionStore()
    store.load_catalog(catalog)
    return HistoryManager(EntryLedger(clock=FixedClock()), store)


def _assert_counts_match_ledger(history: HistoryManager) -> None:
    for m in history.store.all():
        assert m.entries_collected == history.ledger.count_for_mission(m.id)
        assert m.is_completed == (m.entries_collected >= m.required_count)


def test_submit_appends_records_and_pushes_undo(history):
    step = history.submit(_candidate())

    assert len(history.ledger) == 1
    assert step.progress.entries_collected == 1
    assert step.action.ledger_index == 0
    assert step.action.entry_snapshot == step.entry
    assert history.depth().undo_depth == 1
    assert history.depth().redo_depth == 0
    _assert_counts_match_ledger(history)


def test_invalid_submit_mutates_nothing(history):
    with pytest.raises(ValidationError):
        history.submit(_candidate(description="short"))

    assert len(history.ledger) == 0
    assert history.store.find("m-plaza").entries_collected == 0
    assert not history.can_undo


def test_submit_to_unknown_mission_mutates_nothing(history):
    with pytest.raises(MissionNotFound):
        history.submit(_candidate(mission_id="ghost"))
    assert len(history.ledger) == 0
    assert not history.can_undo


def test_undo_then_redo_restores_identical_entry(history):
    history.submit(_candidate())
    original = history.submit(_candidate(description="Second cracked slab")).entry
    assert history.store.find("m-plaza").status == MissionStatus.COMPLETED

    undone = history.undo()
    assert undone.entry == original
    assert undone.progress.transition == "reopened"
    assert len(history.ledger) == 1
    assert history.depth().redo_depth == 1
    _assert_counts_match_ledger(history)

    redone = history.redo()
    assert redone.entry is original
    assert history.ledger.get(redone.action.ledger_index).id == original.id
    assert redone.progress.transition == "completed"
    assert history.store.find("m-plaza").status == MissionStatus.COMPLETED
    assert history.depth().undo_depth == 2
    assert history.depth().redo_depth == 0
    _assert_counts_match_ledger(history)


def test_new_submit_clears_redo_stack(history):
    history.submit(_candidate())
    history.undo()
    assert history.can_redo

    history.submit(_candidate(mission_id="m-market"))
    assert not history.can_redo
    with pytest.raises(NothingToRedo):
        history.redo()


def test_undo_and_redo_on_empty_stacks(history):
    with pytest.raises(NothingToUndo) as ei:
        history.undo()
    assert ei.value.message == "Nothing to undo!"

    with pytest.raises(NothingToRedo) as ei:
        history.redo()
    assert ei.value.message == "Nothing to redo!"


def test_multiple_undos_unwind_in_reverse_order(history):
    ids = [history.submit(_candidate(mission_id=m)).entry.id for m in ("m-plaza", "m-market", "m-market")]

    assert history.undo().entry.id == ids[2]
    assert history.undo().entry.id == ids[1]
    assert [e.id for e in history.ledger.all()] == [ids[0]]

    assert history.redo().entry.id == ids[1]
    assert history.redo().entry.id == ids[2]
    assert [e.id for e in history.ledger.all()] == ids
    _assert_counts_match_ledger(history)


def test_undo_follows_entry_when_index_drifts(history):
    first = history.submit(_candidate()).entry
    second = history.submit(_candidate(mission_id="m-market")).entry

    # something outside history shifted the ledger
    history.ledger.remove_at(0)
    history.ledger.insert_preserving_snapshot(first)
    assert history.ledger.index_of(second.id) == 0

    step = history.undo()
    assert step.entry.id == second.id
    assert [e.id for e in history.ledger.all()] == [first.id]


def test_undo_with_entry_missing_keeps_state(history):
    step = history.submit(_candidate())
    history.ledger.remove_at(0)

    with pytest.raises(IndexOutOfRange):
        history.undo()
    assert history.depth().undo_depth == 1
    assert history.undo_actions()[-1] == step.action


def test_redo_refuses_duplicate(history):
    entry = history.submit(_candidate()).entry
    history.undo()
    history.ledger.insert_preserving_snapshot(entry)

    with pytest.raises(DuplicateEntry):
        history.redo()
    assert history.depth().redo_depth == 1


def test_reset_clears_both_stacks(history):
    history.submit(_candidate())
    history.submit(_candidate())
    history.undo()
    history.reset()
    assert history.depth().undo_depth == 0
    assert history.depth().redo_depth == 0
