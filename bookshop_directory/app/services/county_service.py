"""
Best-effort county lookup for bookshops that lack one.

Stores often record only city and state.  The county filter and the
county directory need a county, so it is derived from a static table of
cities that commonly host bookshops.  A miss is normal and leaves the
record as it was.
"""

from typing import Dict, Iterable, List, Optional

from ..core.states import state_abbrev
from ..schemas.bookshop import Bookshop

# state code -> city -> county (without the "County" suffix)
COUNTY_MAPPING: Dict[str, Dict[str, str]] = {
    "CA": {
        "Los Angeles": "Los Angeles",
        "San Francisco": "San Francisco",
        "San Diego": "San Diego",
        "Oakland": "Alameda",
        "Berkeley": "Alameda",
        "Palo Alto": "Santa Clara",
        "San Jose": "Santa Clara",
        "Sacramento": "Sacramento",
        "Fresno": "Fresno",
        "Long Beach": "Los Angeles",
        "Santa Monica": "Los Angeles",
        "Pasadena": "Los Angeles",
        "Santa Barbara": "Santa Barbara",
        "San Luis Obispo": "San Luis Obispo",
        "Santa Cruz": "Santa Cruz",
        "Monterey": "Monterey",
        "Napa": "Napa",
        "Sonoma": "Sonoma",
        "Carmel": "Monterey",
        "Malibu": "Los Angeles",
    },
    "NY": {
        "New York": "New York",
        "Brooklyn": "Kings",
        "Buffalo": "Erie",
        "Rochester": "Monroe",
        "Syracuse": "Onondaga",
        "Albany": "Albany",
        "Yonkers": "Westchester",
        "White Plains": "Westchester",
        "Ithaca": "Tompkins",
        "Queens": "Queens",
        "Bronx": "Bronx",
        "Staten Island": "Richmond",
        "Saratoga Springs": "Saratoga",
        "Poughkeepsie": "Dutchess",
        "Kingston": "Ulster",
        "Hudson": "Columbia",
        "Woodstock": "Ulster",
        "Cold Spring": "Putnam",
    },
    "MA": {
        "Boston": "Suffolk",
        "Cambridge": "Middlesex",
        "Worcester": "Worcester",
        "Springfield": "Hampden",
        "Lowell": "Middlesex",
        "Somerville": "Middlesex",
        "Amherst": "Hampshire",
        "Northampton": "Hampshire",
        "Salem": "Essex",
        "Newburyport": "Essex",
        "Gloucester": "Essex",
        "Rockport": "Essex",
        "Provincetown": "Barnstable",
        "Concord": "Middlesex",
        "Lexington": "Middlesex",
        "Great Barrington": "Berkshire",
        "Lenox": "Berkshire",
        "Williamstown": "Berkshire",
    },
    "ME": {
        "Portland": "Cumberland",
        "Bangor": "Penobscot",
        "Augusta": "Kennebec",
        "Brunswick": "Cumberland",
        "Bar Harbor": "Hancock",
        "Camden": "Knox",
        "Rockland": "Knox",
        "Belfast": "Waldo",
        "Damariscotta": "Lincoln",
        "Boothbay Harbor": "Lincoln",
    },
    "VT": {
        "Burlington": "Chittenden",
        "Montpelier": "Washington",
        "Brattleboro": "Windham",
        "Woodstock": "Windsor",
        "Manchester": "Bennington",
        "Middlebury": "Addison",
        "Stowe": "Lamoille",
    },
    "NH": {
        "Portsmouth": "Rockingham",
        "Hanover": "Grafton",
        "Keene": "Cheshire",
        "Concord": "Merrimack",
        "Manchester": "Hillsborough",
    },
    "CO": {
        "Denver": "Denver",
        "Boulder": "Boulder",
        "Fort Collins": "Larimer",
        "Colorado Springs": "El Paso",
        "Aspen": "Pitkin",
        "Telluride": "San Miguel",
        "Durango": "La Plata",
    },
    "WA": {
        "Seattle": "King",
        "Tacoma": "Pierce",
        "Spokane": "Spokane",
        "Bellingham": "Whatcom",
        "Port Townsend": "Jefferson",
        "Bainbridge Island": "Kitsap",
        "Olympia": "Thurston",
        "Walla Walla": "Walla Walla",
    },
    "OR": {
        "Portland": "Multnomah",
        "Eugene": "Lane",
        "Bend": "Deschutes",
        "Ashland": "Jackson",
        "Hood River": "Hood River",
        "Astoria": "Clatsop",
        "Cannon Beach": "Clatsop",
    },
    "MI": {
        "Ann Arbor": "Washtenaw",
        "Detroit": "Wayne",
        "Grand Rapids": "Kent",
        "Traverse City": "Grand Traverse",
        "Petoskey": "Emmet",
        "Lansing": "Ingham",
    },
    "IL": {
        "Chicago": "Cook",
        "Evanston": "Cook",
        "Oak Park": "Cook",
        "Naperville": "DuPage",
        "Champaign": "Champaign",
        "Urbana": "Champaign",
        "Springfield": "Sangamon",
    },
}


class CountyEnricher:
    """Fill in ``county`` from city and state where the table knows it."""

    def __init__(self, mapping: Optional[Dict[str, Dict[str, str]]] = None) -> None:
        self.mapping = COUNTY_MAPPING if mapping is None else mapping

    def lookup(self, city: Optional[str], state: Optional[str]) -> Optional[str]:
        if not city or not state:
            return None
        cities = self.mapping.get(state_abbrev(state))
        if not cities:
            return None
        return cities.get(city.strip())

    def enrich(self, record: Bookshop) -> Bookshop:
        if record.county:
            return record
        county = self.lookup(record.city, record.state)
        if county is None:
            return record
        return record.model_copy(update={"county": county})

    def enrich_many(self, records: Iterable[Bookshop]) -> List[Bookshop]:
        return [self.enrich(r) for r in records]
