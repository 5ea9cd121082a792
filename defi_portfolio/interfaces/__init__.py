"""Protocol interfaces for the portfolio pipeline."""
from .chain import ChainClient
from .price_oracle import PriceOracle
from .protocol_adapter import ProtocolAdapter

__all__ = ["ChainClient", "PriceOracle", "ProtocolAdapter"]
