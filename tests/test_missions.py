import json

import pytest

from engine.errors import CatalogError, MissionNotFound
from engine.missions import MissionStore, load_catalog_file
from engine.types import MissionStatus


def _loaded(catalog) -> MissionStore:
    store = MissionStore()
    store.load_catalog(catalog)
    return store


def test_load_resets_progress_fields(catalog):
    catalog[0]["status"] = "completed"
    catalog[0]["entries_collected"] = 7
    store = _loaded(catalog)

    m = store.find("m-plaza")
    assert m.status == MissionStatus.PENDING
    assert m.entries_collected == 0
    assert store.loaded
    assert len(store) == 2
    assert "m-market" in store


@pytest.mark.parametrize(
    "carried",
    [
        {"status": "Completed"},
        {"status": "in_progress"},
        {"status": None},
        {"entries_collected": -2},
        {"entriesCollected": 5, "status": "completed"},
    ],
)
def test_foreign_progress_values_are_reset_not_rejected(catalog, carried):
    catalog[0].update(carried)
    store = _loaded(catalog)

    m = store.find("m-plaza")
    assert m.status == MissionStatus.PENDING
    assert m.entries_collected == 0
    assert len(store) == 2


@pytest.mark.parametrize("radius", [0, None, ""])
def test_falsy_radius_falls_back_to_default(radius):
    store = MissionStore(default_radius_m=25)
    store.load_catalog(
        [{"id": "a", "title": "A", "target": {"lat": 1, "lng": 2}, "required_count": 1, "boundary_radius": radius}]
    )
    assert store.find("a").radius_m == 25
    assert store.find("a").boundary_radius == 25


def test_missing_radius_uses_default():
    store = MissionStore(default_radius_m=35)
    store.load_catalog(
        [{"id": "a", "title": "A", "target": {"lat": 1, "lng": 2}, "required_count": 1}]
    )
    assert store.find("a").radius_m == 35


def test_catalog_order_is_preserved(catalog):
    store = _loaded(catalog)
    assert [m.id for m in store.all()] == ["m-plaza", "m-market"]


def test_duplicate_ids_rejected(catalog):
    store = MissionStore()
    with pytest.raises(CatalogError) as ei:
        store.load_catalog([catalog[0], dict(catalog[0])])
    assert ei.value.details["mission_id"] == "m-plaza"
    assert not store.loaded


@pytest.mark.parametrize(
    "bad",
    [
        {"id": "x", "title": "X", "target": {"lat": 1, "lng": 2}, "required_count": 0},
        {"id": "x", "title": "X", "target": {"lat": 1, "lng": 2}, "required_count": 1, "boundary_radius": -5},
        {"id": "x", "title": "X", "target": {"lat": 91, "lng": 2}, "required_count": 1},
        {"title": "no id", "target": {"lat": 1, "lng": 2}, "required_count": 1},
    ],
)
def test_invalid_records_rejected(bad):
    with pytest.raises(CatalogError) as ei:
        MissionStore().load_catalog([bad])
    assert ei.value.kind == "catalog_error"
    assert ei.value.details["position"] == 0


def test_find_unknown_mission_raises(catalog):
    store = _loaded(catalog)
    with pytest.raises(MissionNotFound) as ei:
        store.find("nope")
    assert ei.value.kind == "mission_not_found"
    assert store.get("nope") is None


def test_record_submission_completes_exactly_at_required_count(catalog):
    store = _loaded(catalog)

    p1 = store.record_submission("m-plaza")
    assert p1.entries_collected == 1
    assert p1.status == MissionStatus.PENDING
    assert p1.transition is None
    assert p1.percent == 50.0

    p2 = store.record_submission("m-plaza")
    assert p2.status == MissionStatus.COMPLETED
    assert p2.transition == "completed"
    assert store.completed_count() == 1

    # stays completed past the target, no second transition
    p3 = store.record_submission("m-plaza")
    assert p3.entries_collected == 3
    assert p3.status == MissionStatus.COMPLETED
    assert p3.transition is None


def test_reverse_submission_reopens_completed_mission(catalog):
    store = _loaded(catalog)
    store.record_submission("m-plaza")
    store.record_submission("m-plaza")

    p = store.reverse_submission("m-plaza")
    assert p.entries_collected == 1
    assert p.status == MissionStatus.PENDING
    assert p.transition == "reopened"
    assert store.completed_count() == 0


def test_reverse_submission_clamps_at_zero(catalog):
    store = _loaded(catalog)
    p = store.reverse_submission("m-market")
    assert p.entries_collected == 0
    assert p.transition is None


def test_progress_is_read_only(catalog):
    store = _loaded(catalog)
    before = store.progress("m-market")
    again = store.progress("m-market")
    assert before == again
    assert before.required_count == 3


def test_load_catalog_file(tmp_path, catalog):
    path = tmp_path / "missions.json"
    path.write_text(json.dumps(catalog), encoding="utf-8")
    assert load_catalog_file(path) == catalog


def test_load_catalog_file_rejects_non_array(tmp_path):
    path = tmp_path / "missions.json"
    path.write_text(json.dumps({"missions": []}), encoding="utf-8")
    with pytest.raises(CatalogError):
        load_catalog_file(path)
