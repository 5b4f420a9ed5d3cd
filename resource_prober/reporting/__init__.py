"""
Summaries and recommendations for finished probe runs.
"""

from .reporter import Reporter, ProbeSummary

__all__ = ["Reporter", "ProbeSummary"]
