from .adapter import JitoAdapter, MarinadeAdapter, SolanaLiquidStakingAdapter

__all__ = ["JitoAdapter", "MarinadeAdapter", "SolanaLiquidStakingAdapter"]
