"""
Per-operation fee collection.
"""
from .collector import FeeCollector

__all__ = ["FeeCollector"]
