"""
Seed data for the in-memory store.

Six well-known independent bookshops plus one record with ``live``
set to false, which must never show up in any read, and the feature
tags their ``feature_ids`` refer to.
"""

from typing import Any, Dict, List

_DAILY_10_6 = {day: "10:00 AM - 6:00 PM" for day in (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday",
)}

SEED_BOOKSHOPS: List[Dict[str, Any]] = [
    {
        "name": "City Lights Bookstore",
        "street": "261 Columbus Ave",
        "city": "San Francisco",
        "state": "CA",
        "zip": "94133",
        "description": "A landmark independent bookstore and publisher that specializes in world literature, the arts, and progressive politics.",
        "website": "http://www.citylights.com",
        "phone": "(415) 362-8193",
        "hours": _DAILY_10_6,
        "latitude": 37.7982,
        "longitude": -122.4067,
        "feature_ids": [1, 3, 6],
        "live": True,
    },
    {
        "name": "Powell's Books",
        "street": "1005 W Burnside St",
        "city": "Portland",
        "state": "OR",
        "zip": "97209",
        "description": "The world's largest independent bookstore, occupying an entire city block with more than a million new and used books.",
        "website": "http://www.powellsbooks.com",
        "phone": "(503) 228-4651",
        "hours": {
            "Monday": "9:00 AM - 10:00 PM",
            "Tuesday": "9:00 AM - 10:00 PM",
            "Wednesday": "9:00 AM - 10:00 PM",
            "Thursday": "9:00 AM - 10:00 PM",
            "Friday": "9:00 AM - 11:00 PM",
            "Saturday": "9:00 AM - 11:00 PM",
            "Sunday": "9:00 AM - 9:00 PM",
        },
        "latitude": 45.5232,
        "longitude": -122.6819,
        "feature_ids": [2, 3, 4],
        "live": True,
    },
    {
        "name": "The Strand Bookstore",
        "street": "828 Broadway",
        "city": "New York",
        "state": "NY",
        "zip": "10003",
        "description": "Home to 18 miles of books, this New York City landmark features new, used, and rare books.",
        "website": "http://www.strandbooks.com",
        "phone": "(212) 473-1452",
        "latitude": 40.7336,
        "longitude": -73.9908,
        "feature_ids": [1, 4, 7],
        "live": True,
    },
    {
        "name": "Book People",
        "street": "603 N Lamar Blvd",
        "city": "Austin",
        "state": "TX",
        "zip": "78703",
        "description": "Texas' premier independent bookstore, featuring frequent author events and a diverse selection of titles.",
        "website": "http://www.bookpeople.com",
        "phone": "(512) 472-5050",
        "latitude": 30.2752,
        "longitude": -97.7536,
        "feature_ids": [1, 2, 5],
        "live": True,
    },
    {
        "name": "Elliott Bay Book Company",
        "street": "1521 10th Ave",
        "city": "Seattle",
        "state": "WA",
        "zip": "98122",
        "description": "Seattle's iconic independent bookstore with cedar shelves, reading nooks, and over 150,000 titles.",
        "website": "http://www.elliottbaybook.com",
        "phone": "(206) 624-6600",
        "hours": _DAILY_10_6,
        "latitude": 47.6142,
        "longitude": -122.3192,
        "feature_ids": [1, 2, 3, 8],
        "live": True,
    },
    {
        "name": "Tattered Cover Book Store",
        "street": "2526 E Colfax Ave",
        "city": "Denver",
        "state": "CO",
        "zip": "80206",
        "description": "A leading independent bookstore known for its warm atmosphere, knowledgeable staff, and extensive inventory.",
        "website": "http://www.tatteredcover.com",
        "phone": "(303) 322-7727",
        "latitude": 39.7404,
        "longitude": -104.9503,
        "feature_ids": [2, 5, 8],
        "live": True,
    },
    {
        "name": "Inactive Bookstore Example",
        "street": "123 Test St",
        "city": "Test City",
        "state": "CA",
        "zip": "12345",
        "description": "An example of a bookstore that is not displayed because live is false.",
        "latitude": 37.7749,
        "longitude": -122.4194,
        "feature_ids": [1],
        "live": False,
    },
]

# Ids are assigned in list order, starting at 1.
SEED_FEATURES: List[str] = [
    "Events",
    "Café",
    "Used Books",
    "Rare Books",
    "Children's Books",
    "Local Authors",
    "Art Books",
    "Book Club",
]
