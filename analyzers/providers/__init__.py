"""Analysis provider clients."""

from .http import HttpAnalysisProvider, HttpTrendFeed

__all__ = ["HttpAnalysisProvider", "HttpTrendFeed"]
