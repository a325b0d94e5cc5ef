"""
techintel.services.exports

Technology export payloads.

Responsibilities:
- Serialize row dicts to CSV (header from the first row's keys, None as empty).
- Build the export ticket returned for document formats rendered out of band.
"""

from __future__ import annotations

import csv
import io
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

EXPORT_FORMATS = ("pdf", "pptx", "docx", "json", "csv")


def _cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return str(value)
    return value


def rows_to_csv(rows: Sequence[Mapping[str, Any]]) -> str:
    if not rows:
        return ""
    headers = list(rows[0].keys())
    buf = io.StringIO()
    # QUOTE_MINIMAL quotes cells containing the delimiter or quote char and doubles embedded quotes.
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(row.get(h)) for h in headers])
    return buf.getvalue().rstrip("\n")


def export_ticket(*, technology_id: uuid.UUID, fmt: str, included: Mapping[str, bool]) -> dict[str, Any]:
    export_id = f"export-{uuid.uuid4().hex[:12]}"
    return {
        "message": f"Export initiated for format: {fmt}",
        "export_id": export_id,
        "technology_id": str(technology_id),
        "format": fmt,
        "data_included": dict(included),
        "download_url": f"/api/exports/{export_id}.{fmt}",
    }
