"""
techintel.api.routers.reports

Report builder API package.

Responsibilities:
- Host report definition, generated version, schedule, template and metrics
  endpoints under `/api/reports/*`.
"""

# Package marker.
