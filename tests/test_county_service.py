"""Tests for CountyEnricher."""

from bookshop_directory.app.schemas.bookshop import Bookshop
from bookshop_directory.app.services.county_service import CountyEnricher


def shop(**kwargs):
    values = {"id": 1, "name": "Test Shop"}
    values.update(kwargs)
    return Bookshop(**values)


class TestCountyEnricher:
    def test_fills_missing_county(self):
        enriched = CountyEnricher().enrich(shop(city="Springfield", state="MA"))
        assert enriched.county == "Hampden"

    def test_full_state_name_is_accepted(self):
        enriched = CountyEnricher().enrich(shop(city="Portland", state="Oregon"))
        assert enriched.county == "Multnomah"

    def test_same_city_name_in_different_states(self):
        enricher = CountyEnricher()
        assert enricher.enrich(shop(city="Portland", state="ME")).county == "Cumberland"
        assert enricher.enrich(shop(city="Springfield", state="IL")).county == "Sangamon"

    def test_city_whitespace_is_trimmed(self):
        assert CountyEnricher().enrich(shop(city="  Boston ", state="MA")).county == "Suffolk"

    def test_existing_county_is_kept(self):
        record = shop(city="Boston", state="MA", county="Custom")
        assert CountyEnricher().enrich(record) is record

    def test_miss_returns_record_unchanged(self):
        record = shop(city="Austin", state="TX")
        enriched = CountyEnricher().enrich(record)
        assert enriched is record
        assert enriched.county is None

    def test_missing_city_or_state(self):
        enricher = CountyEnricher()
        assert enricher.enrich(shop(state="MA")).county is None
        assert enricher.enrich(shop(city="Boston")).county is None

    def test_enrich_does_not_mutate_input(self):
        record = shop(city="Seattle", state="WA")
        CountyEnricher().enrich(record)
        assert record.county is None

    def test_enrich_many_and_custom_table(self):
        enricher = CountyEnricher({"IN": {"Goshen": "Elkhart"}})
        records = enricher.enrich_many([shop(id=1, city="Goshen", state="Indiana"), shop(id=2, city="Boston", state="MA")])
        assert [r.county for r in records] == ["Elkhart", None]
