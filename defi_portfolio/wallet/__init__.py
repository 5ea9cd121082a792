from .balance_fetcher import NATIVE_SOL_ADDRESS, WalletBalanceFetcher

__all__ = ["NATIVE_SOL_ADDRESS", "WalletBalanceFetcher"]
