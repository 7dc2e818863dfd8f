import re
from typing import List, Optional


_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(value: Optional[str]) -> str:
    if value is None:
        return ""
    cleaned = _WHITESPACE_RE.sub(" ", str(value)).strip()
    return cleaned.casefold()


def lower_address(value: Optional[str]) -> str:
    """Lower-case an address without collapsing its spacing."""
    if value is None:
        return ""
    return str(value).lower()


def address_words(value: Optional[str]) -> List[str]:
    return lower_address(value).split()
