"""
techintel.api.__main__

Entrypoint for `python -m techintel.api`.

Responsibilities:
- Load settings and build the app.
- Start uvicorn with logging left to structlog.
"""

from __future__ import annotations

import uvicorn

from techintel.api.app import create_app
from techintel.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
    )


if __name__ == "__main__":
    main()
