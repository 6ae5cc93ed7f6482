"""Tests for the shared filter predicates and state helpers."""

import pytest

from bookshop_directory.app.core.states import same_state, state_abbrev, state_display_name
from bookshop_directory.app.schemas.bookshop import Bookshop, BookshopFilters
from bookshop_directory.app.storage.base import (
    city_matches,
    county_matches,
    features_match,
    matches_filters,
    state_matches,
)
from bookshop_directory.app.storage.memory import InMemoryStore


def shop(**kwargs):
    values = {"id": 1, "name": "Test Shop"}
    values.update(kwargs)
    return Bookshop(**values)


class TestStates:
    @pytest.mark.parametrize("value", ["CA", "ca", "California", "california", " California "])
    def test_abbrev(self, value):
        assert state_abbrev(value) == "CA"

    def test_unknown_state_is_uppercased(self):
        assert state_abbrev("Ontario") == "ONTARIO"

    def test_display_name(self):
        assert state_display_name("ny") == "New York"
        assert state_display_name("Ontario") == "Ontario"

    def test_same_state_requires_a_value(self):
        assert not same_state("", "")
        assert not same_state(None, "CA")


class TestPredicates:
    def test_state_code_and_name_equivalent(self):
        record = shop(state="CA")
        assert state_matches(record, "CA")
        assert state_matches(record, "California")
        assert state_matches(shop(state="California"), "ca")
        assert not state_matches(record, "OR")

    def test_city_is_case_insensitive_exact(self):
        record = shop(city="San Francisco")
        assert city_matches(record, "san francisco")
        assert not city_matches(record, "San")

    @pytest.mark.parametrize(
        "stored, wanted",
        [
            ("Hampden County", "Hampden"),
            ("Hampden", "Hampden County"),
            ("hampden", "HAMPDEN"),
            ("Los Angeles County", "Angeles"),
        ],
    )
    def test_county_tolerates_suffix_and_containment(self, stored, wanted):
        assert county_matches(shop(county=stored), wanted)

    def test_county_missing_on_record(self):
        assert not county_matches(shop(county=None), "Hampden")
        assert county_matches(shop(county=None), None)

    def test_county_suffix_only_does_not_match_everything(self):
        assert not county_matches(shop(county="Hampden County"), "County")

    def test_features_use_intersection(self):
        record = shop(feature_ids=[1, 3])
        assert features_match(record, [3, 9])
        assert not features_match(record, [2, 4])
        assert features_match(record, [])

    def test_non_live_never_matches(self):
        assert not matches_filters(shop(live=False), BookshopFilters())


class TestStoreFilter:
    @pytest.mark.asyncio
    async def test_ca_and_california_return_same_results(self):
        store = InMemoryStore()

        by_code = await store.filter(BookshopFilters(state="CA"))
        by_name = await store.filter(BookshopFilters(state="California"))

        assert [b.id for b in by_code] == [b.id for b in by_name]
        assert [b.name for b in by_code] == ["City Lights Bookstore"]

    @pytest.mark.asyncio
    async def test_features_filter(self):
        store = InMemoryStore()

        result = await store.filter(BookshopFilters(feature_ids=[5]))

        assert {b.name for b in result} == {"Book People", "Tattered Cover Book Store"}

    @pytest.mark.asyncio
    async def test_combined_criteria(self):
        store = InMemoryStore()

        result = await store.filter(BookshopFilters(state="Oregon", city="portland", feature_ids=[4]))

        assert [b.name for b in result] == ["Powell's Books"]
