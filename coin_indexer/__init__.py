"""Coin balance bucket indexer."""

__version__ = "0.1.0"
