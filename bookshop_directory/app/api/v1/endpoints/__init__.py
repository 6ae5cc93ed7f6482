"""
Endpoint subpackage for API v1.

``bookshops`` serves the public directory reads and submissions;
``features`` serves the feature tag catalogue; ``admin`` exposes the
refresh controller behind an API key.  The routers are aggregated in
``router.py`` at the package level.
"""
