from .coin_balance_buckets import CoinBalanceBuckets, to_stored

__all__ = ["CoinBalanceBuckets", "to_stored"]
