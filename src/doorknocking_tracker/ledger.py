from __future__ import annotations

import logging
import threading
import uuid
from datetime import datetime, tzinfo
from typing import Callable, Iterable, List, Optional

from .errors import PersistenceError
from .models import ActivityAction, ActivityRecord, DailyCounts
from .storage import KeyValueStore, load_json, save_json

logger = logging.getLogger("dkt.ledger")

STORAGE_KEY = "DoorknockingActivityLog"
CSV_HEADER = ("Record ID", "Timestamp", "Current Location", "Activity Button Pressed")


def escape_csv_field(field: str) -> str:
    if "," in field or '"' in field or "\n" in field:
        return '"' + field.replace('"', '""') + '"'
    return field


def csv_row(fields: Iterable[str]) -> str:
    return ",".join(escape_csv_field(str(f)) for f in fields)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class ActivityLedger:
    """Reverse-chronological log of activity button presses.

    The full list is re-encoded into the key-value store after every
    mutation. A blob that cannot be decoded on startup is discarded and the
    ledger starts empty.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        clock: Callable[[], datetime] = _local_now,
        tz: Optional[tzinfo] = None,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self._store = store
        self._clock = clock
        self._tz = tz
        self._id_factory = id_factory
        self._lock = threading.Lock()
        self._records: List[ActivityRecord] = []
        self._load()

    def _load(self) -> None:
        try:
            raw = load_json(self._store, STORAGE_KEY)
            if raw is None:
                logger.info("no existing activity log found")
                return
            if not isinstance(raw, list):
                raise PersistenceError("activity log must be a JSON list")
            self._records = [ActivityRecord.from_dict(item) for item in raw]
        except PersistenceError as exc:
            logger.error("failed to load activity log: %s", exc.message)
            self._records = []
            return
        logger.info("loaded %s activity records", len(self._records))

    def _save(self) -> None:
        try:
            save_json(self._store, STORAGE_KEY, [r.to_dict() for r in self._records])
        except PersistenceError as exc:
            logger.error("failed to save activity log: %s", exc.message)
            return
        logger.debug("activity log saved with %s records", len(self._records))

    @property
    def records(self) -> List[ActivityRecord]:
        with self._lock:
            return list(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def log_activity(self, location: str, action: ActivityAction) -> ActivityRecord:
        action = ActivityAction.parse(action)
        record = ActivityRecord(
            record_id=self._id_factory(),
            timestamp=self._clock(),
            location_label=location or "",
            action=action,
        )
        with self._lock:
            self._records.insert(0, record)
            self._save()
        logger.info("activity logged: %s", action.value)
        logger.debug("activity %s at %r", record.record_id, record.location_label)
        return record

    def clear_all(self) -> None:
        with self._lock:
            self._records = []
            self._save()
        logger.info("all activities cleared")

    def today_activities(self) -> List[ActivityRecord]:
        today = self._clock().astimezone(self._tz).date()
        with self._lock:
            return [
                r for r in self._records
                if r.local_timestamp(self._tz).date() == today
            ]

    def daily_counts(self) -> DailyCounts:
        today = self.today_activities()
        return DailyCounts(
            total=len(today),
            flyers=sum(1 for r in today if r.action is ActivityAction.FLYER_DROPPED),
            conversations=sum(1 for r in today if r.action is ActivityAction.CONVERSATION_HAD),
            do_not_contact=sum(1 for r in today if r.action is ActivityAction.DO_NOT_CONTACT),
        )

    def to_csv(self) -> str:
        lines = [csv_row(CSV_HEADER)]
        for record in reversed(self.records):
            lines.append(
                csv_row(
                    (
                        record.record_id_text,
                        record.csv_timestamp(self._tz),
                        record.location_label,
                        record.action.value,
                    )
                )
            )
        return "\n".join(lines) + "\n"

    def export_preview(self) -> Optional[str]:
        """Sample line for the export sheet, built from the newest record."""
        records = self.records
        if not records:
            return None
        first = records[0]
        return (
            f"{first.record_id_text[:8]}...,{first.csv_timestamp(self._tz)},"
            f"{first.location_label},{first.action.value}"
        )
