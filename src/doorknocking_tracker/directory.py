from __future__ import annotations

import csv
import io
import logging
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, TypeVar, Union

from .models import PropertyRecord
from .normalize import address_words, lower_address

logger = logging.getLogger("dkt.directory")

T = TypeVar("T")

FIELD_COUNT = 10

SAMPLE_ROWS: List[List[str]] = [
    ["123 Main St", "John Smith", "4", "2.5", "1995", "2400", "0.25 acres", "8", "450000", "2016-03-15"],
    ["456 Oak Ave", "Jane Doe", "3", "2", "2003", "1850", "0.18 acres", "5", "380000", "2019-07-22"],
    ["789 Pine Rd", "Bob Johnson", "5", "3", "1987", "2800", "0.35 acres", "12", "520000", "2012-11-08"],
    ["321 Elm St", "Alice Brown", "2", "1.5", "2010", "1200", "0.12 acres", "3", "295000", "2021-09-30"],
    ["654 Maple Dr", "Charlie Wilson", "4", "3.5", "1999", "2650", "0.28 acres", "7", "485000", "2017-05-12"],
]


def parse_or_default(value: Optional[str], cast: Callable[[str], T], default: T) -> T:
    text = (value or "").strip()
    if not text:
        return default
    try:
        return cast(text)
    except (TypeError, ValueError):
        return default


def build_record(fields: Sequence[str], numeric_default: int = 0) -> Optional[PropertyRecord]:
    """Build a record from the first ten fields; ``None`` if address or owner is blank."""
    if len(fields) < FIELD_COUNT:
        return None
    address = fields[0].strip()
    owner = fields[1].strip()
    if not address or not owner:
        return None
    return PropertyRecord(
        address=address,
        owner_name=owner,
        bedrooms=parse_or_default(fields[2], int, numeric_default),
        bathrooms=parse_or_default(fields[3], float, float(numeric_default)),
        year_built=parse_or_default(fields[4], int, numeric_default),
        square_feet=parse_or_default(fields[5], int, numeric_default),
        lot_size=fields[6].strip(),
        years_owned=parse_or_default(fields[7], int, numeric_default),
        sale_price=parse_or_default(fields[8], int, numeric_default),
        sale_date=fields[9].strip(),
    )


def _legacy_rows(content: str) -> Iterator[List[str]]:
    # Plain comma split with surrounding quotes trimmed; quoted commas are not reassembled.
    for line in content.splitlines()[1:]:
        yield [part.strip('"') for part in line.split(",")]


def _strict_rows(content: str) -> Iterator[List[str]]:
    reader = csv.reader(io.StringIO(content))
    header = True
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as exc:
            # The reader has already consumed the bad line; resume on the next one.
            logger.debug("skipping malformed property row at line %s: %s", reader.line_num, exc)
            header = False
            continue
        if header:
            header = False
            continue
        yield row


def parse_properties(
    content: str,
    *,
    strict: bool = True,
    numeric_default: int = 0,
) -> List[PropertyRecord]:
    rows = _strict_rows(content) if strict else _legacy_rows(content)
    records: List[PropertyRecord] = []
    skipped = 0
    for row in rows:
        record = build_record(row, numeric_default=numeric_default)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.debug("skipped %s malformed property rows", skipped)
    return records


def sample_properties(numeric_default: int = 0) -> List[PropertyRecord]:
    records = []
    for row in SAMPLE_ROWS:
        record = build_record(row, numeric_default=numeric_default)
        if record is not None:
            records.append(record)
    return records


def find_property(records: Sequence[PropertyRecord], query: str) -> Optional[PropertyRecord]:
    """Return the first record whose address matches ``query``.

    An exact case-insensitive match anywhere in the list wins. Otherwise the
    first record (in list order) for which all but at most one of its address
    words contains, or is contained in, some query word is returned. This is
    not a best-match ranking.
    """
    needle = lower_address(query)
    for record in records:
        if lower_address(record.address) == needle:
            return record

    query_words = address_words(query)
    for record in records:
        candidate_words = address_words(record.address)
        matching = sum(
            1
            for word in candidate_words
            if any(q in word or word in q for q in query_words)
        )
        if matching >= max(1, len(candidate_words) - 1):
            return record
    return None


class PropertyDirectory:
    """In-memory property dataset loaded once at startup."""

    def __init__(self, records: Optional[Sequence[PropertyRecord]] = None, source: str = "memory"):
        self._records: List[PropertyRecord] = list(records or [])
        self.source = source

    @classmethod
    def load(
        cls,
        path: Optional[Union[str, Path]] = None,
        *,
        strict: bool = True,
        numeric_default: int = 0,
    ) -> "PropertyDirectory":
        if path is not None:
            csv_path = Path(path)
            try:
                content = csv_path.read_text(encoding="utf-8")
            except FileNotFoundError:
                logger.warning("property dataset %s not found; using sample data", csv_path)
            else:
                records = parse_properties(
                    content, strict=strict, numeric_default=numeric_default
                )
                logger.info("loaded %s properties from %s", len(records), csv_path)
                return cls(records, source=str(csv_path))
        records = sample_properties(numeric_default=numeric_default)
        logger.info("loaded %s sample properties", len(records))
        return cls(records, source="sample")

    @classmethod
    def from_text(cls, content: str, *, strict: bool = True, numeric_default: int = 0) -> "PropertyDirectory":
        return cls(
            parse_properties(content, strict=strict, numeric_default=numeric_default),
            source="text",
        )

    @property
    def properties(self) -> List[PropertyRecord]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[PropertyRecord]:
        return iter(list(self._records))

    def find_property(self, query: str) -> Optional[PropertyRecord]:
        return find_property(self._records, query)
