"""
techintel.api.routers.tech_detail

Technology detail API package.

Responsibilities:
- Host the per-technology views under `/api/tech-detail/{technology_id}/*`.
- Every route requires an authenticated principal (401 otherwise).
"""

# Package marker.
