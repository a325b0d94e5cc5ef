"""
techintel.api.routers.search

Technology search API package.

Responsibilities:
- Host search, history, saved-search, recent-search and suggestion endpoints under `/api/search*`.
- Scope every history and saved-search row to the authenticated caller.
"""

# Package marker.
