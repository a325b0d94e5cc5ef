"""
techintel.observability

Logging and request-context helpers.
"""

# Package marker.
