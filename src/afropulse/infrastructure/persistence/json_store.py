"""JSON-file record store (array of objects in one file).

Hey future me - this is deliberately tiny. The only things we persist are small
curated lists (the manual "selected releases" override), so one JSON file per
list is plenty. Writes go through a temp file + replace so a crash mid-write
never leaves a half-written array behind.
"""

import json
import logging
from pathlib import Path
from typing import Any

from afropulse.domain.ports import IRecordStore

logger = logging.getLogger(__name__)


def _atomic_write_json(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)


class JsonRecordStore(IRecordStore):
    """Stores a list of dict records in a single JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    # A missing file is the normal "nothing selected yet" case. A corrupt file is
    # logged and treated as empty - readers must never crash the page over it.
    def read_records(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Could not read records from %s: %s", self.path, e)
            return []
        if not isinstance(raw, list):
            logger.warning("Ignoring %s: expected a JSON array", self.path)
            return []
        return [item for item in raw if isinstance(item, dict)]

    def write_records(self, records: list[dict[str, Any]]) -> None:
        """Replace the stored list. OSError propagates to the caller."""
        _atomic_write_json(self.path, records)
        logger.debug("Wrote %d records to %s", len(records), self.path)
