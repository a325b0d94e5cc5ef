"""
techintel.forecasting.state

Typed state schema for the forecast job pipeline.

Responsibilities:
- Define the contract between pipeline nodes (inputs/outputs).
- Provide a JSON-serializable shape for checkpointing into `forecast_jobs.state`.
"""

from __future__ import annotations

from typing import Annotated, Any, TypedDict

from techintel.forecasting.reducers import append_steps, merge_by_tech


class ForecastState(TypedDict, total=False):
    # Identifiers
    job_id: str
    model_id: str
    model_version: str

    # Inputs
    tech_ids: list[str]
    tech_names: dict[str, str]
    scenario: str
    parameters: dict[str, Any]
    random_seed: int

    # Resolved scenario settings
    horizon: int
    start_year: int
    adoption_factor: float
    investment_multiplier: float

    # Progress (0-100), checkpointed by the service after every node.
    progress: int

    # Per-technology outputs keyed by tech id
    trl_curve: Annotated[dict[str, list[float]], merge_by_tech]
    adoption_curve: Annotated[dict[str, list[float]], merge_by_tech]
    market_curve: Annotated[dict[str, list[float]], merge_by_tech]
    predictions: Annotated[dict[str, list[dict[str, Any]]], merge_by_tech]
    uncertainty: Annotated[dict[str, dict[str, Any]], merge_by_tech]
    metrics: Annotated[dict[str, dict[str, Any]], merge_by_tech]
    explainability: list[dict[str, Any]]

    # Step log
    steps: Annotated[list[dict[str, Any]], append_steps]
