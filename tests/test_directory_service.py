"""Tests for DirectoryService, the composition root."""

import asyncio

import pytest

from bookshop_directory.app.core.errors import BackendUnavailable
from bookshop_directory.app.schemas.bookshop import Bookshop, BookshopCreate, BookshopFilters
from bookshop_directory.app.services.directory_service import DirectoryService
from bookshop_directory.app.storage.memory import InMemoryStore

from tests._support.fakes import FakeStore


@pytest.fixture
def make_service(make_settings):
    def _make(adapter, **overrides):
        return DirectoryService.from_settings(make_settings(**overrides), adapter=adapter)

    return _make


class TestComposition:
    def test_defaults_to_memory_store(self, make_settings):
        service = DirectoryService.from_settings(make_settings())
        assert isinstance(service.adapter, InMemoryStore)
        assert service.backend == "memory"


class TestReads:
    @pytest.mark.asyncio
    async def test_list_is_live_and_enriched(self, make_service):
        service = make_service(InMemoryStore())

        records = await service.list()

        assert len(records) == 6
        assert all(r.live for r in records)
        assert {r.name: r.county for r in records}["Powell's Books"] == "Multnomah"

    @pytest.mark.asyncio
    async def test_get_by_id(self, make_service):
        service = make_service(InMemoryStore())

        assert (await service.get_by_id(1)).county == "San Francisco"
        assert await service.get_by_id(7) is None
        assert await service.get_by_id(12345) is None


class TestGetBySlug:
    @pytest.mark.asyncio
    async def test_duplicate_slug_resolves_to_highest_id(self, make_service, fables_records):
        service = make_service(FakeStore(fables_records))

        record = await service.get_by_slug("fables-books")

        assert record.id == 108
        assert service.index.resolve("fables-books") == 108

    @pytest.mark.asyncio
    async def test_unknown_slug_falls_back_and_returns_none(self, make_service, fables_records):
        store = FakeStore(fables_records)
        service = make_service(store)

        assert await service.get_by_slug("unknown-shop") is None
        # One scan for the index build, one for the direct lookup.
        assert store.list_calls == 2

    @pytest.mark.asyncio
    async def test_record_added_after_build_is_found_and_remembered(self, make_service, fables_records):
        store = FakeStore(fables_records)
        service = make_service(store)
        await service.warm_up()

        store.records.append(Bookshop(id=300, name="New Chapter Books"))
        record = await service.get_by_slug("new-chapter-books")

        assert record.id == 300
        assert service.index.resolve("new-chapter-books") == 300

        calls = store.list_calls
        assert (await service.get_by_slug("new-chapter-books")).id == 300
        assert store.list_calls == calls

    @pytest.mark.asyncio
    async def test_stale_entry_for_renamed_record_is_not_trusted(self, make_service):
        store = FakeStore([Bookshop(id=1, name="Old Name")])
        service = make_service(store)
        await service.warm_up()

        store.records = [Bookshop(id=1, name="New Name")]

        assert await service.get_by_slug("old-name") is None
        assert (await service.get_by_slug("new-name")).id == 1

    @pytest.mark.asyncio
    async def test_stale_entry_for_hidden_record_is_not_trusted(self, make_service):
        store = FakeStore([Bookshop(id=1, name="Fables Books"), Bookshop(id=2, name="Fables Books")])
        service = make_service(store)
        await service.warm_up()

        store.records[1] = Bookshop(id=2, name="Fables Books", live=False)

        record = await service.get_by_slug("fables-books")

        assert record.id == 1
        assert service.index.resolve("fables-books") == 1

    @pytest.mark.asyncio
    async def test_direct_lookup_and_index_hit_return_the_same_detail(self, make_service):
        class TrimmedListStore(FakeStore):
            async def list(self):
                return [r.model_copy(update={"description": None}) for r in await super().list()]

        store = TrimmedListStore()
        service = make_service(store)
        await service.warm_up()
        store.records.append(Bookshop(id=42, name="Fables Books", description="Great shop"))

        first = await service.get_by_slug("fables-books")
        second = await service.get_by_slug("fables-books")

        assert first.description == "Great shop"
        assert first == second

    @pytest.mark.asyncio
    async def test_empty_slug(self, make_service, fables_records):
        store = FakeStore(fables_records)
        service = make_service(store)

        assert await service.get_by_slug("") is None
        assert store.list_calls == 0

    @pytest.mark.asyncio
    async def test_index_timeout_degrades_to_direct_lookup(self, make_service, fables_records):
        class SlowFirstScan(FakeStore):
            async def list(self):
                self.list_calls += 1
                if self.list_calls == 1:
                    await asyncio.sleep(1)
                return await super().list()

        store = SlowFirstScan(fables_records)
        service = make_service(store, initial_load_timeout=0.05)

        record = await service.get_by_slug("powells-books")

        assert record.id == 7


class TestFilter:
    @pytest.mark.asyncio
    async def test_state_representations_match(self, make_service):
        service = make_service(InMemoryStore())

        by_code = await service.filter(BookshopFilters(state="CA"))
        by_name = await service.filter(BookshopFilters(state="California"))

        assert by_code == by_name
        assert [r.name for r in by_code] == ["City Lights Bookstore"]

    @pytest.mark.asyncio
    async def test_county_filter_uses_derived_counties(self, make_service):
        service = make_service(InMemoryStore())

        result = await service.filter(BookshopFilters(county="Multnomah County"))

        assert [r.name for r in result] == ["Powell's Books"]

    @pytest.mark.asyncio
    async def test_county_suffix_either_way(self, make_service):
        store = FakeStore(
            [
                Bookshop(id=1, name="Valley Books", city="Amherst", state="MA", county="Hampden County"),
                Bookshop(id=2, name="Other Books", city="Worcester", state="MA", county="Worcester"),
            ]
        )
        service = make_service(store)

        assert [r.id for r in await service.filter(BookshopFilters(county="Hampden"))] == [1]

    @pytest.mark.asyncio
    async def test_no_criteria_returns_everything_live(self, make_service):
        service = make_service(InMemoryStore())
        assert len(await service.filter(BookshopFilters())) == 6


class TestCountiesAndSlugs:
    @pytest.mark.asyncio
    async def test_counties(self, make_service):
        service = make_service(InMemoryStore())

        assert await service.counties() == ["Denver", "King", "Multnomah", "New York", "San Francisco"]
        assert await service.counties("California") == ["San Francisco"]
        assert await service.counties("TX") == []

    @pytest.mark.asyncio
    async def test_canonical_slugs_agree_with_index(self, make_service, fables_records):
        service = make_service(FakeStore(fables_records))

        slugs = await service.canonical_slugs()

        assert slugs == {"fables-books": 108, "powells-books": 7}
        assert (await service.get_by_slug("fables-books")).id == slugs["fables-books"]


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_is_hidden_until_reviewed(self, make_service):
        service = make_service(InMemoryStore())
        draft = BookshopCreate(name="Fables Books", street="215 W 5th St", city="Goshen", state="IN", zip="46526")

        record = await service.create(draft)

        assert record.live is False
        assert await service.get_by_id(record.id) is None
        assert await service.get_by_slug("fables-books") is None

    @pytest.mark.asyncio
    async def test_create_errors_propagate(self, make_service):
        class BrokenStore(FakeStore):
            async def create(self, draft):
                raise BackendUnavailable("read only")

        service = make_service(BrokenStore())
        draft = BookshopCreate(name="Fables Books", street="215 W 5th St", city="Goshen", state="IN", zip="46526")

        with pytest.raises(BackendUnavailable):
            await service.create(draft)


class TestOpportunisticRefresh:
    @pytest.mark.asyncio
    async def test_reads_do_not_refresh_during_initial_delay(self, make_service, fables_records):
        store = FakeStore(fables_records)
        service = make_service(store, initial_delay_ms=60 * 60 * 1000)

        await service.list()

        assert store.reload_calls == 0

    @pytest.mark.asyncio
    async def test_first_read_after_initial_delay_refreshes(self, make_service, fables_records):
        store = FakeStore(fables_records)
        service = make_service(store, initial_delay_ms=0)

        await service.list()
        await service.list()

        assert store.reload_calls == 1

    @pytest.mark.asyncio
    async def test_failed_refresh_is_not_retried_on_every_read(self, make_service, fables_records):
        store = FakeStore(fables_records)
        store.reload_error = BackendUnavailable("sheet unreachable")
        service = make_service(store, initial_delay_ms=0)

        for _ in range(5):
            assert len(await service.list()) == 3

        assert store.reload_calls == 1
        assert service.refresh.failed_attempts == 1


class TestFeatures:
    @pytest.mark.asyncio
    async def test_features_name_the_ids_on_records(self, make_service):
        service = make_service(InMemoryStore())

        names = {f.id: f.name for f in await service.list_features()}
        powells = next(r for r in await service.list() if r.name == "Powell's Books")

        assert [names[i] for i in powells.feature_ids] == ["Café", "Used Books", "Rare Books"]
        assert (await service.get_feature(8)).name == "Book Club"
        assert await service.get_feature(42) is None

    @pytest.mark.asyncio
    async def test_store_without_catalogue_has_no_features(self, make_service, fables_records):
        service = make_service(FakeStore(fables_records))

        assert await service.list_features() == []
        assert await service.get_feature(1) is None
