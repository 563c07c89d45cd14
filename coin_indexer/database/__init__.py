from .dbm import DBM
from .schema import Base, StoredCoinBalanceBucket

__all__ = ["Base", "DBM", "StoredCoinBalanceBucket"]
