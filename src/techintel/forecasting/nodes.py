"""
techintel.forecasting.nodes

Forecast pipeline steps.

Responsibilities:
- Resolve scenario parameters into curve settings.
- Produce yearly TRL, adoption-share and market-size curves per technology.
- Attach uncertainty bands, feature importance and headline metrics.

Each node returns a partial update; reducers merge the per-technology dicts.
"""

from __future__ import annotations

from typing import Any

from techintel.forecasting.state import ForecastState

DEFAULT_HORIZON_YEARS = 10
MAX_HORIZON_YEARS = 30

TRL_BASE, TRL_SLOPE, TRL_CAP = 4.0, 0.4, 9.0
ADOPTION_BASE, ADOPTION_SLOPE, ADOPTION_CAP = 5.0, 8.5, 85.0
MARKET_BASE, MARKET_SLOPE, MARKET_CAP = 10.0, 6.2, 78.0
CONFIDENCE_BASE, CONFIDENCE_DECAY, CONFIDENCE_FLOOR = 95.0, 2.0, 75.0

UNCERTAINTY_UPPER, UNCERTAINTY_LOWER, CONFIDENCE_LEVEL = 1.15, 0.85, 95

# Adoption share (%) at which a technology is treated as breaking even.
BREAK_EVEN_ADOPTION = 25.0

FEATURE_IMPORTANCE: list[dict[str, Any]] = [
    {
        "feature": "Patent Filing Rate",
        "importance": 0.35,
        "impact": "positive",
        "description": "Strong increase in patent filings indicates active innovation",
    },
    {
        "feature": "Research Publication Velocity",
        "importance": 0.28,
        "impact": "positive",
        "description": "Rapid growth in peer-reviewed publications",
    },
    {
        "feature": "Venture Capital Investment",
        "importance": 0.22,
        "impact": "positive",
        "description": "Growing VC interest indicates market confidence",
    },
]


def _step(name: str, progress: int, **details: Any) -> dict[str, Any]:
    return {"progress": progress, "steps": [{"step": name, "progress": progress, **details}]}


def _years(state: ForecastState) -> range:
    return range(int(state.get("horizon", DEFAULT_HORIZON_YEARS)) + 1)


async def prepare_node(state: ForecastState) -> dict[str, Any]:
    # One curve (and one result row) per technology, in first-seen order.
    tech_ids = list(dict.fromkeys(t for t in state.get("tech_ids", []) if str(t).strip()))
    if not tech_ids:
        raise ValueError("forecast job has no technologies")

    params = dict(state.get("parameters") or {})
    horizon = int(params.get("horizon", DEFAULT_HORIZON_YEARS))
    if not 1 <= horizon <= MAX_HORIZON_YEARS:
        raise ValueError(f"horizon must be between 1 and {MAX_HORIZON_YEARS} years")

    return {
        "tech_ids": tech_ids,
        "horizon": horizon,
        "start_year": int(params.get("startYear", state.get("start_year", 2025))),
        "adoption_factor": float(params.get("adoptionFactor", 1.0)),
        "investment_multiplier": float(params.get("investmentMultiplier", 1.0)),
        **_step("prepare", 10, technologies=len(tech_ids), horizon=horizon),
    }


async def trl_node(state: ForecastState) -> dict[str, Any]:
    curve = [round(min(TRL_BASE + TRL_SLOPE * i, TRL_CAP), 2) for i in _years(state)]
    return {"trl_curve": {t: curve for t in state["tech_ids"]}, **_step("trl", 25)}


async def adoption_node(state: ForecastState) -> dict[str, Any]:
    factor = state.get("adoption_factor", 1.0)
    curve = [
        round(min(ADOPTION_BASE + ADOPTION_SLOPE * i * factor, ADOPTION_CAP), 2) for i in _years(state)
    ]
    return {"adoption_curve": {t: curve for t in state["tech_ids"]}, **_step("adoption", 40)}


async def market_node(state: ForecastState) -> dict[str, Any]:
    multiplier = state.get("investment_multiplier", 1.0)
    curve = [
        round(min(MARKET_BASE + MARKET_SLOPE * i * multiplier, MARKET_CAP), 2) for i in _years(state)
    ]
    return {"market_curve": {t: curve for t in state["tech_ids"]}, **_step("market", 55)}


async def assemble_node(state: ForecastState) -> dict[str, Any]:
    start_year = state["start_year"]
    predictions: dict[str, list[dict[str, Any]]] = {}
    for tech_id in state["tech_ids"]:
        trl = state["trl_curve"][tech_id]
        adoption = state["adoption_curve"][tech_id]
        market = state["market_curve"][tech_id]
        predictions[tech_id] = [
            {
                "year": start_year + i,
                "date": f"{start_year + i}-01-01",
                "trl": trl[i],
                "adoptionShare": adoption[i],
                "marketSize": market[i],
                "confidence": max(CONFIDENCE_BASE - CONFIDENCE_DECAY * i, CONFIDENCE_FLOOR),
            }
            for i in _years(state)
        ]
    return {"predictions": predictions, **_step("assemble", 70)}


async def explain_node(state: ForecastState) -> dict[str, Any]:
    uncertainty = {
        tech_id: {
            "upper": [round(p["adoptionShare"] * UNCERTAINTY_UPPER, 2) for p in preds],
            "lower": [round(p["adoptionShare"] * UNCERTAINTY_LOWER, 2) for p in preds],
            "confidenceLevel": CONFIDENCE_LEVEL,
        }
        for tech_id, preds in state["predictions"].items()
    }
    return {
        "uncertainty": uncertainty,
        "explainability": [dict(f) for f in FEATURE_IMPORTANCE],
        **_step("explain", 85),
    }


def summarize_predictions(preds: list[dict[str, Any]]) -> dict[str, Any]:
    peak = max(p["adoptionShare"] for p in preds)
    peak_year = next(p["year"] for p in preds if p["adoptionShare"] == peak)
    year5 = preds[min(5, len(preds) - 1)]
    break_even = next((p["year"] for p in preds if p["adoptionShare"] >= BREAK_EVEN_ADOPTION), None)
    return {
        "finalTRL": preds[-1]["trl"],
        "peakAdoption": peak,
        "peakAdoptionYear": peak_year,
        "marketSizeYear5": year5["marketSize"],
        "breakEvenYear": break_even,
        "confidenceScore": round(sum(p["confidence"] for p in preds) / len(preds)),
    }


async def summarize_node(state: ForecastState) -> dict[str, Any]:
    metrics = {tech_id: summarize_predictions(preds) for tech_id, preds in state["predictions"].items()}
    return {"metrics": metrics, **_step("summarize", 100)}


# --- Module Notes -----------------------------------------------------------
# Curves are a deterministic placeholder shaped by the scenario parameters
# (adoptionFactor, investmentMultiplier, horizon); a fitted model would replace
# the trl/adoption/market nodes without changing the state contract.
