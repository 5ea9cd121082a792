"""Protocol adapters and the protocol registry."""
from .base import BaseProtocolAdapter, BranchResult, sanitize_health_factor
from .registry import ProtocolRegistry, build_default_registry

__all__ = [
    "BaseProtocolAdapter",
    "BranchResult",
    "ProtocolRegistry",
    "build_default_registry",
    "sanitize_health_factor",
]
