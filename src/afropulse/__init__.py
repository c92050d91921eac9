"""Afropulse - multi-source African music buzz aggregation."""

__version__ = "0.1.0"
