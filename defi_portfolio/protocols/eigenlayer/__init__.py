from .adapter import EigenLayerAdapter

__all__ = ["EigenLayerAdapter"]
