from .adapter import UniswapV3Adapter

__all__ = ["UniswapV3Adapter"]
