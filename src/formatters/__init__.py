"""
Formatters for landmark results.

Provides different output formats for annotated routes.
"""
from formatters.landmark_summary import LandmarkSummaryFormatter

__all__ = ["LandmarkSummaryFormatter"]
