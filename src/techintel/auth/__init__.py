"""
techintel.auth

Authentication/authorization package.

Responsibilities:
- JWT helpers and validation.
- FastAPI auth dependencies (Principal + RBAC).
"""

# Package marker.
