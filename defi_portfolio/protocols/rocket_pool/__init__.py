from .adapter import RocketPoolAdapter

__all__ = ["RocketPoolAdapter"]
