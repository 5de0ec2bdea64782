"""Cached GTFS transit data API."""

__version__ = "0.1.0"
