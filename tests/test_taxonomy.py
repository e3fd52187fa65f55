import pytest

from engine.taxonomy import (
    CATEGORY_SUBCATEGORIES,
    category_for,
    is_valid_pair,
    subcategories_for,
)


@pytest.mark.parametrize(
    "sub,category",
    [
        ("Broken Sidewalk", "Infrastructure"),
        ("Clogged Drain", "Sanitation"),
        ("Power Outage", "Utilities"),
        ("Fallen Tree", "Environment"),
        ("Others", "Others"),
        ("Not A Thing", "Others"),
    ],
)
def test_category_for(sub, category):
    assert category_for(sub) == category


def test_every_category_offers_others():
    for category, subs in CATEGORY_SUBCATEGORIES.items():
        assert "Others" in subs, category


def test_subcategories_for_unknown_category_falls_back():
    assert subcategories_for("Nope") == ["Others"]
    assert subcategories_for("Traffic")[0] == "Traffic Light Issue"


def test_subcategories_for_returns_copy():
    subs = subcategories_for("Traffic")
    subs.append("Hovercraft")
    assert "Hovercraft" not in CATEGORY_SUBCATEGORIES["Traffic"]


def test_is_valid_pair():
    assert is_valid_pair("Infrastructure", "Pothole")
    assert is_valid_pair("Sanitation", "Others")
    assert not is_valid_pair("Infrastructure", "Clogged Drain")
    assert not is_valid_pair("Nope", "Others")
