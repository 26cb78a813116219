"""Concurrent Overpass infrastructure aggregation and summarisation."""

__version__ = "0.3.0"
