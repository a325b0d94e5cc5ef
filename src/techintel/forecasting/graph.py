from __future__ import annotations

from langgraph.graph import END, StateGraph

from techintel.forecasting.nodes import (
    adoption_node,
    assemble_node,
    explain_node,
    market_node,
    prepare_node,
    summarize_node,
    trl_node,
)
from techintel.forecasting.state import ForecastState

PIPELINE = (
    ("prepare", prepare_node),
    ("trl", trl_node),
    ("adoption", adoption_node),
    ("market", market_node),
    ("assemble", assemble_node),
    ("explain", explain_node),
    ("summarize", summarize_node),
)


def build_graph():
    """
    Returns a compiled LangGraph runnable walking the pipeline steps in order.
    """

    graph = StateGraph(ForecastState)
    for name, node in PIPELINE:
        graph.add_node(name, node)

    graph.set_entry_point(PIPELINE[0][0])
    for (current, _), (following, _) in zip(PIPELINE, PIPELINE[1:]):
        graph.add_edge(current, following)
    graph.add_edge(PIPELINE[-1][0], END)

    return graph.compile()
