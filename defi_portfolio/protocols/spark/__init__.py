from .adapter import SparkAdapter

__all__ = ["SparkAdapter"]
