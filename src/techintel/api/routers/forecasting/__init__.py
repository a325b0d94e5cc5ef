"""
techintel.api.routers.forecasting

Forecasting API package.

Responsibilities:
- Host model catalog, forecast job, result, scenario and schedule endpoints under
  `/api/forecasting/*`.
"""

# Package marker.
