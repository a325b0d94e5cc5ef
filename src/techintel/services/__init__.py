"""
techintel.services

Service layer: aggregations and workflows that sit between routers and repositories.
"""

# Package marker.
