"""
techintel

Top-level package for the technology-intelligence dashboard API.

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
