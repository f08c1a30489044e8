from __future__ import annotations

import pytest
from vendorama_search.filters import FilterSet, parse_price_text


def test_active_count_groups_filters():
    filters = FilterSet()
    assert filters.active_count == 0

    filters.set_price_range(10, None)
    filters.on_sale = True
    filters.restricted = True
    assert filters.active_count == 2

    filters.select_top_category(100, "Clothing")
    filters.toggle_sub_location(7)
    assert filters.active_count == 4


def test_price_range_counts_once():
    filters = FilterSet(price_from=5, price_to=50)
    assert filters.active_count == 1


def test_negative_price_rejected():
    with pytest.raises(ValueError):
        FilterSet(price_from=-1)
    with pytest.raises(ValueError):
        FilterSet().set_price_range(None, -5)


def test_new_top_category_clears_sub_selection():
    filters = FilterSet()
    filters.select_top_category(100, "Clothing")
    filters.select_sub_category(1200, "Shoes")
    filters.toggle_sub_category(1201)
    filters.toggle_sub_category(1202)

    filters.select_top_category(200, "Home")

    assert filters.top_category_id == 200
    assert filters.top_category_name == "Home"
    assert filters.sub_category_id is None
    assert filters.sub_category_name is None
    assert filters.sub_category_ids == set()


def test_new_top_location_clears_sub_selection():
    filters = FilterSet()
    filters.select_top_location(1, "Auckland")
    filters.select_sub_location(11, "Ponsonby")
    filters.toggle_sub_location(12)

    filters.select_top_location(2, "Wellington")

    assert filters.sub_location_id is None
    assert filters.sub_location_ids == set()
    assert filters.top_location_name == "Wellington"


def test_toggle_sub_category_adds_and_removes():
    filters = FilterSet()
    filters.toggle_sub_category(5)
    filters.toggle_sub_category(6)
    filters.toggle_sub_category(5)
    assert filters.sub_category_ids == {6}


def test_copy_is_independent():
    filters = FilterSet()
    filters.toggle_sub_category(5)
    clone = filters.copy()
    clone.toggle_sub_category(6)
    clone.on_sale = True
    assert filters.sub_category_ids == {5}
    assert filters.on_sale is False


def test_clear_resets_everything():
    filters = FilterSet(price_from=1, on_sale=True, restricted=True, vendor_category_id=3)
    filters.select_top_location(1)
    filters.clear()
    assert filters == FilterSet()


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        (None, None),
        ("", None),
        ("  ", None),
        ("$1,200", 1200),
        (" 45 ", 45),
        ("abc", None),
    ],
)
def test_parse_price_text(text, expected):
    assert parse_price_text(text) == expected
