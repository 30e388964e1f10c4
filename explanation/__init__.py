"""
Explanation Builder - Package.

Usage:
    from explanation import ExplanationBuilder

    explanation = ExplanationBuilder().explain(assessment, recommendations, signals)
    print(explanation.summary)
"""

from .builder import ExplanationBuilder, collect_issues, merge_issues
from .types import Explanation, HighlightedIssue, HistoricalComparison


__all__ = [
    "ExplanationBuilder",
    "Explanation",
    "HighlightedIssue",
    "HistoricalComparison",
    "collect_issues",
    "merge_issues",
]
