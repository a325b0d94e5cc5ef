"""
techintel.api.routers.ingestion

Admin-ingestion API package.

Responsibilities:
- Host connector, pipeline run, log, index, secret, template and upload endpoints
  under `/api/admin-ingestion/*`.
"""

# Package marker.
