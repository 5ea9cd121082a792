"""Service modules"""
from .aggregator import PortfolioAggregator, RequestTimeoutError
from .tracker import PortfolioTracker
from .yield_analyzer import YieldAnalyzer

__all__ = ["PortfolioAggregator", "PortfolioTracker", "RequestTimeoutError", "YieldAnalyzer"]
