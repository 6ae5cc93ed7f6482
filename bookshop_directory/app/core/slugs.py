"""
Slug generation and the duplicate-slug tie-break.

Every producer and consumer of slugs (the slug index, the direct-match
fallback in the stores, the sitemap feed) goes through ``slugify`` in
this module.  Bookshop names are not unique, so several records may share
a slug; ``canonical_slug_map`` and ``pick_canonical`` apply the one rule
used everywhere: the record with the highest identifier wins.
"""

import re
from typing import Any, Dict, Iterable, Optional, TypeVar

# Word characters are ASCII only; whitespace is any Unicode space.
_STRIP_RE = re.compile(r"[^A-Za-z0-9_\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-{2,}")

T = TypeVar("T")


def slugify(name: Any) -> str:
    """Convert a display name into a URL slug.

    ``"Powell's Books"`` becomes ``"powells-books"``.  Characters other
    than ASCII letters, digits, underscores, whitespace and hyphens are dropped,
    whitespace runs become a single hyphen, repeated hyphens collapse and
    leading/trailing hyphens are removed.  ``None`` and non-strings give
    the empty slug.
    """
    if not isinstance(name, str) or not name:
        return ""
    slug = name.lower()
    slug = _STRIP_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _HYPHENS_RE.sub("-", slug)
    return slug.strip("-").strip()


def matches(candidate_slug: str, record: Any) -> bool:
    """Return True if ``record.name`` slugifies to exactly ``candidate_slug``."""
    return slugify(getattr(record, "name", None)) == candidate_slug


def canonical_slug_map(records: Iterable[Any]) -> Dict[str, int]:
    """Map each slug to the identifier of its canonical record.

    Records are visited in descending id order and the first occurrence
    of a slug is kept, so the highest id always wins regardless of the
    order the store returned them in.  Records whose name produces an
    empty slug are left out.
    """
    mapping: Dict[str, int] = {}
    for record in sorted(records, key=lambda r: r.id, reverse=True):
        slug = slugify(record.name)
        if slug and slug not in mapping:
            mapping[slug] = record.id
    return mapping


def pick_canonical(records: Iterable[T], slug: str) -> Optional[T]:
    """Return the highest-id record whose name slugifies to ``slug``."""
    best: Optional[T] = None
    for record in records:
        if matches(slug, record) and (best is None or record.id > best.id):  # type: ignore[attr-defined]
            best = record
    return best
