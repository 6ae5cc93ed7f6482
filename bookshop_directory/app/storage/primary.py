"""
Primary store: a PostgREST (Supabase) table reached over HTTP.

Rows are read through the REST interface with the ``requests`` library.
The service role key is sent both as ``apikey`` and as a bearer token.
Every read adds ``live=eq.true`` so hidden records never leave the
database, and ``list`` pages through the table with ``offset``/``limit``
because the server caps the number of rows per response.

``requests`` is blocking, so each HTTP call runs in a worker thread via
``asyncio.to_thread`` and the event loop stays free.

Column names are normalised but values are not reinterpreted: the
numeric coordinate columns are preferred over the legacy text ones,
``hours_json`` becomes ``hours`` and ``imageUrl`` becomes ``image_url``.
Provider enrichment columns pass straight through.

The table may carry a ``slug`` column.  ``get_by_slug`` queries it as a
fast path but only trusts a hit whose name still slugifies to the
requested slug; otherwise it falls back to scanning ``list``.

Feature tags come from a separate table, ``features`` by default.  Rows
that only carry a ``slug`` are given a numeric id derived from it.
"""

import asyncio
import json
import logging
import zlib
from typing import Any, Dict, List, Optional, Tuple

import requests
from pydantic import ValidationError

from ..core.config import BackendKind, Settings
from ..core.errors import BackendUnavailable, RecordParseError
from ..core.slugs import pick_canonical
from ..schemas.bookshop import Bookshop, BookshopCreate
from ..schemas.feature import Feature
from .base import RefreshCapability, StorageAdapter
from .pagination import paginate

logger = logging.getLogger(__name__)

# Columns fetched for list views.  Long text and photo/review blobs are
# left to the detail query to keep response sizes down.
LIST_COLUMNS = (
    "id,name,slug,city,state,county,street,zip,latitude,longitude,lat_numeric,lng_numeric,"
    "image_url,website,phone,live,google_rating,google_review_count,google_place_id,feature_ids"
)
DETAIL_COLUMNS = "*"


class PrimaryStore(StorageAdapter):
    kind = BackendKind.PRIMARY
    refresh_capability = RefreshCapability.ALWAYS_CURRENT

    def __init__(self, settings: Settings, session: Optional[requests.Session] = None) -> None:
        self.base_url = settings.supabase_url.rstrip("/")
        self.api_key = settings.supabase_service_key
        self.table = settings.supabase_table
        self.features_table = settings.supabase_features_table
        self.page_size = settings.page_size
        self.max_pages = settings.max_pages
        self.timeout = settings.request_timeout
        self.session = session or requests.Session()
        if not self.configured:
            logger.warning("Primary store is missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY; reads will be empty")

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.api_key)

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        *,
        table: str | None = None,
        params: Dict[str, Any] | None = None,
        json_body: Any | None = None,
        extra_headers: Dict[str, str] | None = None,
    ) -> Tuple[Optional[Any], Optional[Dict[str, Any]]]:
        """Perform an HTTP request against a table endpoint.

        ``table`` defaults to the bookshop table.

        Returns:
            A tuple ``(data, error)``.  ``data`` contains the parsed JSON
            response on success and ``error`` is ``None``.  On failure
            ``data`` is ``None`` and ``error`` is a dictionary with keys
            ``status_code`` and ``message`` describing the issue.
        """
        if not self.configured:
            return None, {"status_code": None, "message": "primary store is not configured"}
        url = f"{self.base_url}/rest/v1/{table or self.table}"
        headers: Dict[str, str] = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
        }
        if extra_headers:
            headers.update(extra_headers)
        try:
            logger.debug("Sending %s request to %s with %s", method, url, params)
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            message = ""
            if exc.response is not None:
                try:
                    err_json = exc.response.json()
                    message = err_json.get("message") or err_json.get("hint") or str(err_json)
                except ValueError:
                    message = exc.response.text
            if not message:
                message = str(exc)
            logger.error("Primary store request failed (%s): %s", status, message)
            return None, {"status_code": status, "message": message}
        except requests.RequestException as exc:
            logger.error("Primary store request failed: %s", exc)
            return None, {"status_code": None, "message": str(exc)}

    async def _select(self, params: Dict[str, Any], table: Optional[str] = None) -> List[Dict[str, Any]]:
        """Run a GET in a worker thread; raise ``BackendUnavailable`` on error."""
        data, error = await asyncio.to_thread(self._request, "GET", table=table, params=params)
        if error:
            raise BackendUnavailable(error["message"])
        return data or []

    # ------------------------------------------------------------------
    # Row normalisation
    # ------------------------------------------------------------------
    @staticmethod
    def _row_to_bookshop(item: Dict[str, Any], row_number: Optional[int] = None) -> Bookshop:
        """Normalise one PostgREST row.

        ``row_number`` is the row's offset in the full result set and is
        attached to any ``RecordParseError``.
        """
        data = dict(item)
        for numeric, legacy in (("lat_numeric", "latitude"), ("lng_numeric", "longitude")):
            value = data.pop(numeric, None)
            if value is None or value == "":
                value = data.get(legacy)
            data[legacy] = None if value in ("", None) else value
        hours = data.pop("hours_json", None)
        if isinstance(hours, str):
            try:
                hours = json.loads(hours)
            except ValueError as exc:
                raise RecordParseError(
                    f"invalid hours_json for bookshop {data.get('id')}: {exc}", row_number
                ) from exc
        if hours is not None:
            data["hours"] = hours
        if not data.get("image_url") and data.get("imageUrl"):
            data["image_url"] = data["imageUrl"]
        try:
            return Bookshop.model_validate(data)
        except ValidationError as exc:
            raise RecordParseError(f"invalid bookshop row {data.get('id')}: {exc}", row_number) from exc

    def _parse_rows(self, rows: List[Dict[str, Any]]) -> List[Bookshop]:
        bookshops: List[Bookshop] = []
        for row_number, row in enumerate(rows):
            try:
                bookshops.append(self._row_to_bookshop(row, row_number))
            except RecordParseError as exc:
                logger.warning("Skipping primary store row at offset %d: %s", exc.row_number, exc)
        return bookshops

    # ------------------------------------------------------------------
    # Adapter operations
    # ------------------------------------------------------------------
    async def _fetch_page(self, offset: int, limit: int) -> List[Dict[str, Any]]:
        return await self._select(
            {
                "select": LIST_COLUMNS,
                "live": "eq.true",
                "order": "name.asc,id.asc",
                "offset": offset,
                "limit": limit,
            }
        )

    async def list(self) -> List[Bookshop]:
        try:
            rows = await paginate(self._fetch_page, self.page_size, self.max_pages)
        except BackendUnavailable as exc:
            logger.warning("Primary store unavailable while listing bookshops: %s", exc)
            return []
        # rows spans every page, so parse errors carry absolute offsets.
        bookshops = [b for b in self._parse_rows(rows) if b.live]
        logger.info("Fetched %d bookshops from primary store (paginated)", len(bookshops))
        return bookshops

    async def get_by_id(self, bookshop_id: int) -> Optional[Bookshop]:
        try:
            rows = await self._select(
                {"select": DETAIL_COLUMNS, "id": f"eq.{bookshop_id}", "live": "eq.true", "limit": 1}
            )
        except BackendUnavailable as exc:
            logger.warning("Primary store unavailable while fetching bookshop %s: %s", bookshop_id, exc)
            return None
        found = [b for b in self._parse_rows(rows) if b.live]
        return found[0] if found else None

    async def get_by_slug(self, slug: str) -> Optional[Bookshop]:
        if not slug:
            return None
        try:
            rows = await self._select({"select": DETAIL_COLUMNS, "slug": f"eq.{slug}", "live": "eq.true"})
        except BackendUnavailable as exc:
            logger.info("Slug column lookup failed for '%s' (%s); scanning all bookshops", slug, exc)
        else:
            hit = pick_canonical((b for b in self._parse_rows(rows) if b.live), slug)
            if hit is not None:
                return hit
            if rows:
                logger.info("Slug column for '%s' disagrees with bookshop names; scanning all bookshops", slug)
        return await super().get_by_slug(slug)

    @staticmethod
    def _row_to_feature(item: Dict[str, Any], row_number: Optional[int] = None) -> Feature:
        data = dict(item)
        # Catalogues keyed by slug get a numeric id that is stable across reads.
        if data.get("id") is None and data.get("slug"):
            data["id"] = zlib.crc32(str(data["slug"]).encode("utf-8")) % 100000
        try:
            return Feature.model_validate(data)
        except ValidationError as exc:
            raise RecordParseError(f"invalid feature row {data.get('id')}: {exc}", row_number) from exc

    async def list_features(self) -> List[Feature]:
        try:
            rows = await self._select({"select": "*", "order": "name.asc"}, table=self.features_table)
        except BackendUnavailable as exc:
            logger.warning("Primary store unavailable while listing features: %s", exc)
            return []
        features: List[Feature] = []
        for row_number, row in enumerate(rows):
            try:
                features.append(self._row_to_feature(row, row_number))
            except RecordParseError as exc:
                logger.warning("Skipping feature row at offset %d: %s", exc.row_number, exc)
        return features

    async def create(self, draft: BookshopCreate) -> Bookshop:
        if not self.configured:
            raise BackendUnavailable("primary store is not configured")
        payload = {**draft.model_dump(), "live": False}
        data, error = await asyncio.to_thread(
            self._request,
            "POST",
            json_body=payload,
            extra_headers={"Prefer": "return=representation"},
        )
        if error:
            raise BackendUnavailable(f"could not create bookshop: {error['message']}")
        rows = data if isinstance(data, list) else [data]
        if not rows or not rows[0]:
            raise BackendUnavailable("primary store returned no row for the created bookshop")
        record = self._row_to_bookshop(rows[0])
        logger.info("Created bookshop '%s' (ID: %s) pending review", record.name, record.id)
        return record
