"""On-chain and off-chain price oracles."""
from .chainlink import AGGREGATOR_V3_ABI, CHAINLINK_FEEDS, ChainlinkOracle
from .pyth import PythOracle

__all__ = ["AGGREGATOR_V3_ABI", "CHAINLINK_FEEDS", "ChainlinkOracle", "PythOracle"]
