"""Domain ports (interfaces) for dependency inversion."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any

from afropulse.domain.dtos import SourceRecord, SourceType


# Hey future me, ISourceAdapter is THE contract every source implements (catalog, social,
# web-press). fetch_records() may raise whatever it likes - the aggregation service wraps
# each call with a timeout and turns ANY failure into "this adapter contributed nothing".
# Adapters must NOT share mutable state; each builds its own local list and returns it.
class ISourceAdapter(ABC):
    """Fetches raw records from one external source."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Unique adapter name used in logs, counts and error maps."""
        pass

    @property
    @abstractmethod
    def source_type(self) -> SourceType:
        """Which bucket this adapter's records feed."""
        pass

    @abstractmethod
    async def fetch_records(self) -> Sequence[SourceRecord]:
        """Fetch and map records. Network I/O only, no local state mutation."""
        pass


# The manual override list is just "read array of records" / "write array of records".
# JSON file today; nothing in the core cares where it lives.
class IRecordStore(ABC):
    """Array-of-records persistence contract."""

    @abstractmethod
    def read_records(self) -> list[dict[str, Any]]:
        """Return all stored records (empty list if nothing stored)."""
        pass

    @abstractmethod
    def write_records(self, records: list[dict[str, Any]]) -> None:
        """Replace all stored records."""
        pass


__all__ = ["ISourceAdapter", "IRecordStore"]
