"""
Storage backends for the bookshop directory.

Three interchangeable adapters implement ``StorageAdapter``: the primary
PostgREST store, the Google Sheets store and an in-memory store.  The
composition root picks one with ``config.select_backend`` and builds it
with ``build_adapter``.
"""

from typing import Optional

from ..core.config import BackendKind, Settings, select_backend
from .base import RefreshCapability, StorageAdapter
from .memory import InMemoryStore
from .primary import PrimaryStore
from .spreadsheet import SpreadsheetStore


def build_adapter(settings: Settings, kind: Optional[BackendKind] = None) -> StorageAdapter:
    kind = kind or select_backend(settings)
    if kind is BackendKind.PRIMARY:
        return PrimaryStore(settings)
    if kind is BackendKind.SPREADSHEET:
        return SpreadsheetStore(settings)
    return InMemoryStore()


__all__ = [
    "InMemoryStore",
    "PrimaryStore",
    "RefreshCapability",
    "SpreadsheetStore",
    "StorageAdapter",
    "build_adapter",
]
