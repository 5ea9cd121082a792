from .adapter import LidoAdapter

__all__ = ["LidoAdapter"]
