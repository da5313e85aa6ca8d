"""
Version module for dogsink.

Kept separate so packaging metadata and runtime lookups share one value.
"""

__version__ = "0.3.0"
