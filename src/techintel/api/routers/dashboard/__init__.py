"""
techintel.api.routers.dashboard

Dashboard home API package.

Responsibilities:
- Host activity feed, KPI, analytics chart and top-signal endpoints under `/api/dashboard/*`.
"""

# Package marker.
