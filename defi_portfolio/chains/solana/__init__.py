from .client import TOKEN_PROGRAM_ID, SolanaClient, aggregate_token_accounts

__all__ = ["TOKEN_PROGRAM_ID", "SolanaClient", "aggregate_token_accounts"]
