"""
techintel.api

HTTP API package for the technology-intelligence dashboard.

Responsibilities:
- FastAPI app factory and router modules.
- Shared envelopes, error handlers and dependency wiring.
"""

# Package marker.


# --- Module Notes -----------------------------------------------------------
# Routers parse, query and respond; aggregation logic lives in `techintel.services`.
