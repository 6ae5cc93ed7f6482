"""Tests for SpreadsheetStore against a mocked gspread worksheet."""

import json
import time
from unittest.mock import MagicMock

import gspread
import pytest

from bookshop_directory.app.core.errors import BackendUnavailable, RecordParseError
from bookshop_directory.app.schemas.bookshop import BookshopCreate
from bookshop_directory.app.storage.base import RefreshCapability
from bookshop_directory.app.storage.spreadsheet import (
    SheetLayout,
    SpreadsheetStore,
    parse_feature_sheet,
    parse_row,
    parse_sheet,
)

HEADER = ["ID", "Name", "Street", "City", "State", "Zip", "County", "Hours", "Feature IDs", "Live"]
ROWS = [
    ["1", "City Lights Bookstore", "261 Columbus Ave", "San Francisco", "CA", "94133", "", "", "1,3,6", "TRUE"],
    ["2", "Powell's Books", "1005 W Burnside St", "Portland", "OR", "97209", "Multnomah", '{"Monday": "9-10"}', "2, 3", "yes"],
    ["3", "Hidden Books", "1 Back St", "Salem", "MA", "01970", "", "", "", "FALSE"],
]


def worksheet(values):
    sheet = MagicMock()
    sheet.get_all_values.return_value = values
    return sheet


@pytest.fixture
def sheet():
    return worksheet([HEADER, *ROWS])


@pytest.fixture
def store(make_settings, sheet):
    return SpreadsheetStore(make_settings(initial_load_timeout=2.0), worksheet_factory=lambda: sheet)


class TestSheetParsing:
    def test_header_aliases_and_case(self):
        layout = SheetLayout.from_header(["Bookstore ID", "Store Name", "Address", "Town", "Province", "Zipcode"])

        assert layout.positional is False
        assert layout.columns["id"] == 0
        assert layout.columns["street"] == 2
        assert layout.columns["zip"] == 5

    def test_unrecognised_header_uses_positional_layout(self):
        layout = SheetLayout.from_header(["a", "b", "c"])

        assert layout.positional is True
        assert layout.columns["id"] == 0
        assert layout.columns["live"] == 14

    def test_reordered_columns_parse_identically(self):
        order = [9, 8, 7, 6, 5, 4, 3, 2, 1, 0]
        shuffled = [[row[i] for i in order] for row in [HEADER, *ROWS]]

        _, original = parse_sheet([HEADER, *ROWS])
        _, reordered = parse_sheet(shuffled)

        assert original == reordered

    def test_field_conversion(self):
        _, records = parse_sheet([HEADER, *ROWS])
        by_id = {r.id: r for r in records}

        assert by_id[1].feature_ids == [1, 3, 6]
        assert by_id[1].county is None
        assert by_id[2].feature_ids == [2, 3]
        assert by_id[2].hours == {"Monday": "9-10"}
        assert by_id[2].live is True
        assert by_id[3].live is False

    @pytest.mark.parametrize("text, live", [("no", False), ("FALSE", False), ("0", False), ("", True), ("maybe", True)])
    def test_only_explicit_false_hides(self, text, live):
        layout = SheetLayout.from_header(HEADER)
        record = parse_row(["5", "Shop", "", "", "", "", "", "", "", text], layout, 2)
        assert record.live is live

    def test_free_text_hours_kept(self):
        layout = SheetLayout.from_header(HEADER)
        record = parse_row(["5", "Shop", "", "", "", "", "", "Mon-Fri 9-5", "", ""], layout, 2)
        assert record.hours == "Mon-Fri 9-5"

    def test_bad_row_raises_with_row_number(self):
        layout = SheetLayout.from_header(HEADER)
        with pytest.raises(RecordParseError) as excinfo:
            parse_row(["abc", "Shop"], layout, 7)
        assert excinfo.value.row_number == 7

    def test_malformed_and_blank_rows_are_skipped(self, caplog):
        values = [HEADER, ROWS[0], ["not-an-id", "Broken"], [], ["", "", ""], ["4", ""], ROWS[1]]

        _, records = parse_sheet(values)

        assert [r.id for r in records] == [1, 2]
        assert "row 3" in caplog.text

    def test_empty_sheet(self):
        _, records = parse_sheet([])
        assert records == []


class TestSpreadsheetStore:
    def test_is_refresh_capable(self, store):
        assert store.refresh_capability is RefreshCapability.REFRESH_CAPABLE

    @pytest.mark.asyncio
    async def test_reads_are_live_only_and_cached(self, store, sheet):
        names = [b.name for b in await store.list()]

        assert names == ["City Lights Bookstore", "Powell's Books"]
        assert await store.get_by_id(3) is None
        assert (await store.get_by_id(2)).county == "Multnomah"
        assert (await store.get_by_slug("powells-books")).id == 2
        assert sheet.get_all_values.call_count == 1

    @pytest.mark.asyncio
    async def test_reload_picks_up_changes(self, store, sheet):
        await store.list()
        sheet.get_all_values.return_value = [HEADER, ROWS[0]]

        await store.reload()

        assert [b.id for b in await store.list()] == [1]

    @pytest.mark.asyncio
    async def test_failed_reload_keeps_cache(self, store, sheet):
        await store.list()
        sheet.get_all_values.side_effect = gspread.exceptions.GSpreadException("quota exceeded")

        with pytest.raises(BackendUnavailable):
            await store.reload()

        assert len(await store.list()) == 2

    @pytest.mark.asyncio
    async def test_unavailable_backend_reads_empty(self, make_settings):
        def factory():
            raise BackendUnavailable("no credentials")

        store = SpreadsheetStore(make_settings(), worksheet_factory=factory)

        assert await store.list() == []
        assert await store.get_by_id(1) is None
        assert await store.get_by_slug("city-lights-bookstore") is None

    @pytest.mark.asyncio
    async def test_slow_first_load_times_out(self, make_settings):
        sheet = MagicMock()
        sheet.get_all_values.side_effect = lambda: time.sleep(0.5) or [HEADER, *ROWS]
        store = SpreadsheetStore(make_settings(initial_load_timeout=0.05), worksheet_factory=lambda: sheet)

        assert await store.list() == []

        with pytest.raises(BackendUnavailable, match="timed out"):
            await store.reload()

    @pytest.mark.asyncio
    async def test_create_appends_row_in_header_order(self, store, sheet):
        draft = BookshopCreate(
            name="Fables Books",
            street="215 W 5th St",
            city="Goshen",
            state="IN",
            zip="46526",
            feature_ids=[1, 2],
        )

        record = await store.create(draft)

        assert record.id == 4
        assert record.live is False
        values = sheet.append_row.call_args.args[0]
        assert values == ["4", "Fables Books", "215 W 5th St", "Goshen", "IN", "46526", "", "", "1,2", "FALSE"]
        assert await store.get_by_id(4) is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "header",
        [
            ["ID", "Name", "Street", "City", "State", "Zip"],
            ["Name", "Street", "City", "State", "Zip", "Live"],
        ],
    )
    async def test_create_refuses_sheet_without_id_or_live_column(self, make_settings, header):
        sheet = worksheet([header, ["1", "Shop", "1 Main St", "Goshen", "IN", "46526"]])
        store = SpreadsheetStore(make_settings(), worksheet_factory=lambda: sheet)
        draft = BookshopCreate(name="Draft Books", street="1 Main St", city="Goshen", state="IN", zip="46526")

        with pytest.raises(BackendUnavailable, match="column"):
            await store.create(draft)

        sheet.append_row.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_failure_raises(self, store, sheet):
        sheet.append_row.side_effect = gspread.exceptions.GSpreadException("permission denied")
        draft = BookshopCreate(name="Fables Books", street="215 W 5th St", city="Goshen", state="IN", zip="46526")

        with pytest.raises(BackendUnavailable):
            await store.create(draft)


class TestCredentials:
    def test_missing_configuration(self, make_settings):
        store = SpreadsheetStore(make_settings())
        with pytest.raises(BackendUnavailable):
            store._open_worksheet()

    def test_invalid_json(self, make_settings):
        store = SpreadsheetStore(make_settings(google_sheets_id="sheet", google_credentials="{not json"))
        with pytest.raises(BackendUnavailable, match="valid JSON"):
            store._open_worksheet()

    def test_incomplete_service_account(self, make_settings):
        credentials = json.dumps({"type": "service_account", "client_email": "bot@example.iam.gserviceaccount.com"})
        store = SpreadsheetStore(make_settings(google_sheets_id="sheet", google_credentials=credentials))
        with pytest.raises(BackendUnavailable, match="private_key"):
            store._open_worksheet()


class TestSpreadsheetFeatures:
    FEATURES = [["Feature ID", "Feature Name"], ["2", "Café"], ["1", "Events"], ["x", "Broken"], ["", ""]]

    @pytest.fixture
    def feature_sheet(self):
        return worksheet(self.FEATURES)

    @pytest.fixture
    def store(self, make_settings, sheet, feature_sheet):
        return SpreadsheetStore(
            make_settings(initial_load_timeout=2.0),
            worksheet_factory=lambda: sheet,
            features_worksheet_factory=lambda: feature_sheet,
        )

    def test_headers_fall_back_to_columns_a_and_b(self):
        features = parse_feature_sheet([["Tag", "Label?"], ["4", "Rare Books"]])
        assert [(f.id, f.name) for f in features] == [(4, "Rare Books")]

    @pytest.mark.asyncio
    async def test_list_features_is_cached_and_sorted(self, store, feature_sheet):
        features = await store.list_features()

        assert [(f.id, f.name) for f in features] == [(2, "Café"), (1, "Events")]
        assert (await store.get_feature(1)).name == "Events"
        assert feature_sheet.get_all_values.call_count == 1

    @pytest.mark.asyncio
    async def test_reload_rereads_feature_tab(self, store, feature_sheet):
        await store.list_features()
        feature_sheet.get_all_values.return_value = [["ID", "Name"], ["9", "Poetry"]]

        await store.reload()

        assert [f.name for f in await store.list_features()] == ["Poetry"]

    @pytest.mark.asyncio
    async def test_missing_feature_tab_reads_empty(self, make_settings, sheet):
        def factory():
            raise BackendUnavailable("no Features tab")

        store = SpreadsheetStore(make_settings(), worksheet_factory=lambda: sheet, features_worksheet_factory=factory)

        assert await store.list_features() == []
        assert len(await store.list()) == 2
