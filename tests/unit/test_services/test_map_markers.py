"""Tests for map marker style caching."""

import pytest
from storefront.models.listing import Category
from storefront.services.map_markers import CATEGORY_COLORS, MarkerStyleCache


@pytest.mark.unit
def test_style_is_memoized_per_category():
    cache = MarkerStyleCache()

    first = cache.get(Category.EVENT)

    assert cache.get("event") is first
    assert first.color == CATEGORY_COLORS[Category.EVENT]
    assert len(cache) == 1


@pytest.mark.unit
def test_each_category_gets_its_own_color():
    cache = MarkerStyleCache()

    colors = {cache.get(category).color for category in Category}

    assert len(colors) == 3
    assert len(cache) == 3


@pytest.mark.unit
@pytest.mark.parametrize("label", ["Cultural Sites", "museum", "", None])
def test_unknown_labels_share_the_default_style(label):
    """Test unmapped labels resolve to the cultural marker."""
    cache = MarkerStyleCache()

    assert cache.get(label) is cache.get(Category.CULTURAL)


@pytest.mark.unit
def test_caches_are_independent():
    first, second = MarkerStyleCache(), MarkerStyleCache()

    assert first.get("restaurant") is not second.get("restaurant")
    assert first.get("restaurant") == second.get("restaurant")


@pytest.mark.unit
def test_clear():
    cache = MarkerStyleCache()
    style = cache.get("restaurant")

    cache.clear()

    assert len(cache) == 0
    assert cache.get("restaurant") is not style
    assert style.size == (24, 24)
    assert style.anchor == (12, 12)
