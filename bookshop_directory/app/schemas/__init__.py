"""
Pydantic schema definitions for API payloads.

``bookshop`` holds the record returned by every store and the draft
accepted for submissions; ``feature`` holds the feature tag catalogue
entry; ``refresh`` holds the refresh controller's
status and admin request bodies.
"""
