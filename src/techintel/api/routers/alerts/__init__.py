"""
techintel.api.routers.alerts

Alerting API package.

Responsibilities:
- Host alert rule, triggered event, metrics, preference, template and watch-list
  endpoints under `/api/alerts/*`.
"""

# Package marker.
