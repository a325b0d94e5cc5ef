"""
techintel.api.routers.onboarding

First-run onboarding API package.

Responsibilities:
- Host wizard progress, checklist, domain, watchlist, connector and catalog-seed
  endpoints under `/api/onboarding/*`.
- Resolve the acting user from `user_id` (query or body), falling back to the default user.
"""

# Package marker.
