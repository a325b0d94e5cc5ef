"""
techintel.forecasting

Forecast job pipeline (LangGraph).

Responsibilities:
- Define the pipeline state, reducers, step nodes and compiled graph.
"""

# Package marker.
