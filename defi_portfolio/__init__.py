"""Multi-chain DeFi portfolio tracker."""

__version__ = "0.1.0"
