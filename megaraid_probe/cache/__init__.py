"""Caches for controller inventory shared within one sweep."""

from .inventory_cache import SweepInventoryCache

__all__ = ['SweepInventoryCache']
