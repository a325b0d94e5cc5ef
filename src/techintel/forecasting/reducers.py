"""
techintel.forecasting.reducers

How the forecast pipeline folds node outputs into the job state.

Responsibilities:
- Keep the step log ordered, one entry per pipeline step.
- Merge per-technology outputs (curves, predictions, metrics) keyed by tech id.

The job service applies the same reducers when it checkpoints, so the row in
`forecast_jobs.state` always matches what the graph itself holds.
"""

from __future__ import annotations

from typing import Any

StepEntry = dict[str, Any]


def append_steps(left: list[StepEntry] | None, right: list[StepEntry] | None) -> list[StepEntry]:
    """
    Append new step entries; a step reported again replaces its earlier entry in place.
    """

    merged = list(left or [])
    positions = {entry.get("step"): i for i, entry in enumerate(merged)}
    for entry in right or []:
        name = entry.get("step")
        if name in positions:
            merged[positions[name]] = entry
        else:
            positions[name] = len(merged)
            merged.append(entry)
    return merged


def merge_by_tech(left: dict[str, Any] | None, right: dict[str, Any] | None) -> dict[str, Any]:
    # A later node's value for a tech id wins.
    return {**(left or {}), **(right or {})}
