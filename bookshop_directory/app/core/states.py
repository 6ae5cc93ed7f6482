"""
US state code / full name helpers.

Stores record a bookshop's state either as a two-letter code (``CA``)
or a full name (``California``).  Comparisons go through
``state_abbrev`` so both spellings are treated as the same state.
"""

from typing import Dict, Optional

STATE_ABBREV_TO_FULL: Dict[str, str] = {
    "AL": "Alabama",
    "AK": "Alaska",
    "AZ": "Arizona",
    "AR": "Arkansas",
    "CA": "California",
    "CO": "Colorado",
    "CT": "Connecticut",
    "DE": "Delaware",
    "DC": "District of Columbia",
    "FL": "Florida",
    "GA": "Georgia",
    "HI": "Hawaii",
    "ID": "Idaho",
    "IL": "Illinois",
    "IN": "Indiana",
    "IA": "Iowa",
    "KS": "Kansas",
    "KY": "Kentucky",
    "LA": "Louisiana",
    "ME": "Maine",
    "MD": "Maryland",
    "MA": "Massachusetts",
    "MI": "Michigan",
    "MN": "Minnesota",
    "MS": "Mississippi",
    "MO": "Missouri",
    "MT": "Montana",
    "NE": "Nebraska",
    "NV": "Nevada",
    "NH": "New Hampshire",
    "NJ": "New Jersey",
    "NM": "New Mexico",
    "NY": "New York",
    "NC": "North Carolina",
    "ND": "North Dakota",
    "OH": "Ohio",
    "OK": "Oklahoma",
    "OR": "Oregon",
    "PA": "Pennsylvania",
    "RI": "Rhode Island",
    "SC": "South Carolina",
    "SD": "South Dakota",
    "TN": "Tennessee",
    "TX": "Texas",
    "UT": "Utah",
    "VT": "Vermont",
    "VA": "Virginia",
    "WA": "Washington",
    "WV": "West Virginia",
    "WI": "Wisconsin",
    "WY": "Wyoming",
}

_FULL_TO_ABBREV: Dict[str, str] = {full.lower(): abbr for abbr, full in STATE_ABBREV_TO_FULL.items()}


def state_abbrev(state: Optional[str]) -> str:
    """Normalise a state to its upper-case two-letter code.

    Unknown full names are returned trimmed and upper-cased so that two
    unknown spellings still compare case-insensitively.
    """
    if not isinstance(state, str):
        return ""
    s = state.strip()
    if not s:
        return ""
    if len(s) == 2:
        return s.upper()
    return _FULL_TO_ABBREV.get(s.lower(), s.upper())


def state_display_name(state: Optional[str]) -> str:
    """Full state name for a code or name; unknown input is returned as is."""
    abbrev = state_abbrev(state)
    return STATE_ABBREV_TO_FULL.get(abbrev, state or "")


def same_state(a: Optional[str], b: Optional[str]) -> bool:
    left = state_abbrev(a)
    return bool(left) and left == state_abbrev(b)
