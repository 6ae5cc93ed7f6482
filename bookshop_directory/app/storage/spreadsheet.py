"""
Spreadsheet store: bookshops kept in a Google Sheet.

The sheet is read with ``gspread`` using a service account whose JSON
key is supplied in ``GOOGLE_SERVICE_ACCOUNT_CREDENTIALS``.  The column
layout is not hard-coded: the header row is matched against a table of
accepted aliases, so editors may reorder or rename columns (``zipcode``
instead of ``zip``, ``active`` instead of ``live``) without breaking
reads.  If the header row is unrecognisable a fixed positional layout is
assumed instead.

Rows are parsed individually.  A row that cannot be parsed is logged and
skipped; the rest of the sheet still loads.

Reading a sheet is slow and rate limited, so the whole sheet is cached
in memory.  The first load happens lazily and is bounded by
``INITIAL_LOAD_TIMEOUT``; afterwards the cache only changes when the
refresh controller calls ``reload``.  A failed reload keeps the previous
cache.

Feature tags live on a second tab, ``Features`` by default, with an id
and a name column.  They are cached the same way and re-read after
each successful ``reload``.
"""

import asyncio
import functools
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import gspread
from google.auth.exceptions import GoogleAuthError
from google.oauth2.service_account import Credentials
from pydantic import ValidationError

from ..core.config import BackendKind, Settings
from ..core.errors import BackendUnavailable, RecordParseError
from ..core.inflight import SingleFlight
from ..schemas.bookshop import Bookshop, BookshopCreate
from ..schemas.feature import Feature
from .base import RefreshCapability, StorageAdapter, sort_by_name

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]

# Accepted header names per field, matched after lower-casing and
# replacing spaces with underscores.  The first matching column wins.
HEADER_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "bookshop_id", "bookstore_id", "shop_id", "store_id"),
    "name": ("name", "bookshop_name", "bookstore_name", "shop_name", "store_name", "title"),
    "street": ("street", "address", "street_address", "location", "address_line_1"),
    "city": ("city", "town"),
    "state": ("state", "province", "region"),
    "zip": ("zip", "zipcode", "zip_code", "postal_code", "postcode"),
    "county": ("county", "parish", "district"),
    "description": ("description", "desc", "about", "info", "details"),
    "image_url": ("imageurl", "image_url", "image", "img", "photo", "picture"),
    "website": ("website", "url", "web", "site", "homepage", "link"),
    "phone": ("phone", "phone_number", "contact", "tel", "telephone"),
    "hours": ("hours", "opening_hours", "business_hours", "store_hours", "times"),
    "latitude": ("latitude", "lat", "y"),
    "longitude": ("longitude", "lng", "long", "x"),
    "feature_ids": ("featureids", "feature_ids", "features", "tags", "categories"),
    "live": ("live", "active", "published", "visible", "status"),
}

# Column order assumed when fewer than MIN_MAPPED_FIELDS headers match.
POSITIONAL_LAYOUT: Tuple[str, ...] = (
    "id", "name", "street", "city", "state", "zip", "description", "image_url",
    "website", "phone", "hours", "latitude", "longitude", "feature_ids", "live",
)
MIN_MAPPED_FIELDS = 5

_FALSE_VALUES = {"no", "false", "0"}

# Feature tab headers.  Fewer than two matches means columns A and B
# hold the id and the name.
FEATURE_HEADER_ALIASES: Dict[str, Tuple[str, ...]] = {
    "id": ("id", "feature_id", "featureid"),
    "name": ("name", "feature_name", "featurename", "title", "label"),
}


@dataclass
class SheetLayout:
    """Which column holds which field, and how wide a row is."""

    columns: Dict[str, int]
    width: int
    positional: bool = False

    @classmethod
    def from_header(cls, header: Sequence[Any]) -> "SheetLayout":
        names = [str(h or "").strip().lower().replace(" ", "_") for h in header]
        columns: Dict[str, int] = {}
        for field_name, aliases in HEADER_ALIASES.items():
            for index, name in enumerate(names):
                if name in aliases and index not in columns.values():
                    columns[field_name] = index
                    break
        if len(columns) < MIN_MAPPED_FIELDS:
            logger.warning("Only %d sheet headers recognised (%s); using positional layout", len(columns), names)
            columns = {name: index for index, name in enumerate(POSITIONAL_LAYOUT)}
            return cls(columns=columns, width=max(len(names), len(POSITIONAL_LAYOUT)), positional=True)
        logger.debug("Sheet column mapping: %s", columns)
        return cls(columns=columns, width=len(names))


def _cell(row: Sequence[Any], layout: SheetLayout, field_name: str) -> str:
    index = layout.columns.get(field_name)
    if index is None or index >= len(row):
        return ""
    value = row[index]
    return "" if value is None else str(value).strip()


def _parse_feature_ids(text: str) -> List[int]:
    ids: List[int] = []
    for part in text.split(","):
        part = part.strip()
        if part.lstrip("-").isdigit():
            ids.append(int(part))
    return ids


def _parse_hours(text: str) -> Any:
    if not text:
        return None
    try:
        parsed = json.loads(text)
    except ValueError:
        parsed = None
    # Anything but a JSON object is kept as written.
    return parsed if isinstance(parsed, dict) else text


def parse_row(row: Sequence[Any], layout: SheetLayout, row_number: int) -> Optional[Bookshop]:
    """Turn one sheet row into a ``Bookshop``.

    Returns ``None`` for blank rows and raises ``RecordParseError`` for
    rows that cannot be understood.
    """
    id_text = _cell(row, layout, "id")
    if not id_text:
        return None
    try:
        bookshop_id = int(float(id_text))
    except ValueError as exc:
        raise RecordParseError(f"row {row_number}: invalid id {id_text!r}", row_number) from exc

    live_text = _cell(row, layout, "live").lower()
    data: Dict[str, Any] = {
        "id": bookshop_id,
        "name": _cell(row, layout, "name"),
        "street": _cell(row, layout, "street"),
        "city": _cell(row, layout, "city"),
        "state": _cell(row, layout, "state"),
        "zip": _cell(row, layout, "zip"),
        "hours": _parse_hours(_cell(row, layout, "hours")),
        "feature_ids": _parse_feature_ids(_cell(row, layout, "feature_ids")),
        "live": live_text not in _FALSE_VALUES,
    }
    for optional in ("county", "description", "image_url", "website", "phone", "latitude", "longitude"):
        data[optional] = _cell(row, layout, optional) or None
    if not data["name"]:
        raise RecordParseError(f"row {row_number}: bookshop {bookshop_id} has no name", row_number)
    try:
        return Bookshop.model_validate(data)
    except ValidationError as exc:
        raise RecordParseError(f"row {row_number}: {exc}", row_number) from exc


def parse_sheet(values: Sequence[Sequence[Any]]) -> Tuple[SheetLayout, List[Bookshop]]:
    """Parse a full sheet (header row first), skipping bad rows."""
    if not values:
        return SheetLayout.from_header([]), []
    layout = SheetLayout.from_header(values[0])
    bookshops: List[Bookshop] = []
    skipped = 0
    for offset, row in enumerate(values[1:]):
        row_number = offset + 2  # 1-based, after the header
        try:
            bookshop = parse_row(row, layout, row_number)
        except RecordParseError as exc:
            skipped += 1
            logger.warning("Skipping sheet row: %s", exc)
            continue
        if bookshop is not None:
            bookshops.append(bookshop)
    if skipped:
        logger.warning("Skipped %d unparseable rows", skipped)
    return layout, bookshops


def parse_feature_sheet(values: Sequence[Sequence[Any]]) -> List[Feature]:
    """Parse the feature tab (header row first) into ``Feature`` records."""
    if not values:
        return []
    names = [str(h or "").strip().lower().replace(" ", "_") for h in values[0]]
    columns: Dict[str, int] = {}
    for field_name, aliases in FEATURE_HEADER_ALIASES.items():
        for index, name in enumerate(names):
            if name in aliases:
                columns[field_name] = index
                break
    if len(columns) < len(FEATURE_HEADER_ALIASES):
        logger.warning("Feature headers not recognised (%s); using columns A and B", names)
        columns = {"id": 0, "name": 1}
    layout = SheetLayout(columns=columns, width=len(names))

    features: List[Feature] = []
    for offset, row in enumerate(values[1:]):
        id_text = _cell(row, layout, "id")
        name = _cell(row, layout, "name")
        if not id_text and not name:
            continue
        try:
            features.append(Feature(id=int(float(id_text)), name=name))
        except (ValueError, ValidationError) as exc:
            logger.warning("Skipping feature row %d: %s", offset + 2, exc)
    return features


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, dict):
        return json.dumps(value)
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return str(value)


class SpreadsheetStore(StorageAdapter):
    kind = BackendKind.SPREADSHEET
    refresh_capability = RefreshCapability.REFRESH_CAPABLE

    def __init__(
        self,
        settings: Settings,
        worksheet_factory: Optional[Callable[[], Any]] = None,
        features_worksheet_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.sheet_id = settings.google_sheets_id
        self.tab = settings.google_sheets_tab
        self.features_tab = settings.google_sheets_features_tab
        self.load_timeout = settings.initial_load_timeout
        self._credentials_json = settings.google_credentials
        self._worksheet_factory = worksheet_factory or self._open_worksheet
        self._features_worksheet_factory = features_worksheet_factory or functools.partial(
            self._open_worksheet, self.features_tab
        )
        self._worksheet: Any = None
        self._layout: Optional[SheetLayout] = None
        self._all: Optional[List[Bookshop]] = None
        self._flight = SingleFlight()
        self._features: Optional[List[Feature]] = None
        self._features_flight = SingleFlight()

    # ------------------------------------------------------------------
    # Google Sheets access (blocking; always called in a worker thread)
    # ------------------------------------------------------------------
    def _open_worksheet(self, tab: Optional[str] = None) -> Any:
        tab = tab or self.tab
        if not self.sheet_id or not self._credentials_json:
            raise BackendUnavailable("GOOGLE_SHEETS_ID and GOOGLE_SERVICE_ACCOUNT_CREDENTIALS are required")
        try:
            info = json.loads(self._credentials_json)
        except ValueError as exc:
            raise BackendUnavailable("GOOGLE_SERVICE_ACCOUNT_CREDENTIALS must be valid JSON") from exc
        if not info.get("client_email") or not info.get("private_key"):
            raise BackendUnavailable("service account credentials lack client_email or private_key")
        try:
            credentials = Credentials.from_service_account_info(info, scopes=SCOPES)
            client = gspread.authorize(credentials)
            worksheet = client.open_by_key(self.sheet_id).worksheet(tab)
        except (ValueError, OSError, GoogleAuthError, gspread.exceptions.GSpreadException) as exc:
            raise BackendUnavailable(f"cannot open sheet {self.sheet_id}/{tab}: {exc}") from exc
        logger.info("Google Sheets store opened spreadsheet %s, tab %s", self.sheet_id, tab)
        return worksheet

    def _worksheet_handle(self) -> Any:
        if self._worksheet is None:
            self._worksheet = self._worksheet_factory()
        return self._worksheet

    def _fetch_values(self) -> List[List[Any]]:
        worksheet = self._worksheet_handle()
        try:
            return worksheet.get_all_values()
        except (GoogleAuthError, gspread.exceptions.GSpreadException, OSError) as exc:
            raise BackendUnavailable(f"reading sheet failed: {exc}") from exc

    def _fetch_feature_values(self) -> List[List[Any]]:
        worksheet = self._features_worksheet_factory()
        try:
            return worksheet.get_all_values()
        except (GoogleAuthError, gspread.exceptions.GSpreadException, OSError) as exc:
            raise BackendUnavailable(f"reading feature tab failed: {exc}") from exc

    def _append(self, values: List[str]) -> None:
        worksheet = self._worksheet_handle()
        try:
            worksheet.append_row(values, value_input_option="USER_ENTERED")
        except (GoogleAuthError, gspread.exceptions.GSpreadException, OSError) as exc:
            raise BackendUnavailable(f"appending to sheet failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Cache management
    # ------------------------------------------------------------------
    async def _load(self) -> None:
        try:
            values = await asyncio.wait_for(asyncio.to_thread(self._fetch_values), timeout=self.load_timeout)
        except asyncio.TimeoutError as exc:
            raise BackendUnavailable(f"sheet load timed out after {self.load_timeout}s") from exc
        layout, bookshops = parse_sheet(values)
        self._layout, self._all = layout, bookshops
        logger.info("Loaded %d bookshops from Google Sheets", len(bookshops))

    async def _ensure_loaded(self) -> List[Bookshop]:
        if self._all is None:
            await self._flight.run(self._load)
        return self._all or []

    async def _load_features(self) -> None:
        try:
            values = await asyncio.wait_for(asyncio.to_thread(self._fetch_feature_values), timeout=self.load_timeout)
        except asyncio.TimeoutError as exc:
            raise BackendUnavailable(f"feature tab load timed out after {self.load_timeout}s") from exc
        self._features = sort_by_name(parse_feature_sheet(values))
        logger.info("Loaded %d features from Google Sheets", len(self._features))

    async def reload(self) -> None:
        """Re-read the whole sheet; the old cache survives a failure."""
        logger.info("Reloading bookshops from Google Sheets")
        await self._flight.run(self._load)
        # The feature tab is re-read on next use.
        self._features = None

    # ------------------------------------------------------------------
    # Adapter operations
    # ------------------------------------------------------------------
    async def list(self) -> List[Bookshop]:
        try:
            records = await self._ensure_loaded()
        except BackendUnavailable as exc:
            logger.warning("Google Sheets unavailable while listing bookshops: %s", exc)
            return []
        return sort_by_name(b for b in records if b.live)

    async def get_by_id(self, bookshop_id: int) -> Optional[Bookshop]:
        try:
            records = await self._ensure_loaded()
        except BackendUnavailable as exc:
            logger.warning("Google Sheets unavailable while fetching bookshop %s: %s", bookshop_id, exc)
            return None
        for record in records:
            if record.id == bookshop_id and record.live:
                return record
        return None

    async def list_features(self) -> List[Feature]:
        if self._features is None:
            try:
                await self._features_flight.run(self._load_features)
            except BackendUnavailable as exc:
                logger.warning("Google Sheets unavailable while listing features: %s", exc)
                return []
        return list(self._features or [])

    async def create(self, draft: BookshopCreate) -> Bookshop:
        records = await self._ensure_loaded()
        layout = self._layout
        if layout is None:
            raise BackendUnavailable("sheet layout unknown; cannot append")
        # Without these columns the appended row would reload as live or be dropped.
        missing = [name for name in ("id", "live") if name not in layout.columns]
        if missing:
            raise BackendUnavailable(f"sheet has no {'/'.join(missing)} column; cannot append")
        next_id = max((r.id for r in records), default=0) + 1
        record = Bookshop(id=next_id, live=False, **draft.model_dump())
        values = [""] * layout.width
        fields = record.model_dump()
        for field_name, index in layout.columns.items():
            values[index] = _format_cell(fields.get(field_name))
        await asyncio.to_thread(self._append, values)
        self._all = [*records, record]
        logger.info("Appended bookshop '%s' (ID: %s) to Google Sheets pending review", record.name, record.id)
        return record
