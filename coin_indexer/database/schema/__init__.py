from .base import Base
from .coin_balance_buckets import StoredCoinBalanceBucket

__all__ = ["Base", "StoredCoinBalanceBucket"]
