"""Persistence adapters."""

from afropulse.infrastructure.persistence.json_store import JsonRecordStore

__all__ = ["JsonRecordStore"]
