from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Any, Dict, Optional

from .errors import PersistenceError, ValidationError
from .normalize import normalize_text

CSV_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DISPLAY_TIMESTAMP_FORMAT = "%m/%d/%y, %I:%M %p"


class ActivityAction(str, Enum):
    """The three activity buttons; values are the exact button labels."""

    FLYER_DROPPED = "Flyer Dropped Off"
    CONVERSATION_HAD = "Conversation Had"
    DO_NOT_CONTACT = "Don't Contact Me Again"

    @classmethod
    def parse(cls, value: Any) -> "ActivityAction":
        if isinstance(value, cls):
            return value
        key = normalize_text(value)
        for action in cls:
            if key in (normalize_text(action.value), action.name.casefold()):
                return action
        alias = _ACTION_ALIASES.get(key.replace("-", "_").replace(" ", "_"))
        if alias is not None:
            return alias
        raise ValidationError(
            f"Unknown activity action: {value!r}",
            details={"allowed": [a.value for a in cls]},
        )


_ACTION_ALIASES = {
    "flyer": ActivityAction.FLYER_DROPPED,
    "flyers": ActivityAction.FLYER_DROPPED,
    "conversation": ActivityAction.CONVERSATION_HAD,
    "conversations": ActivityAction.CONVERSATION_HAD,
    "talk": ActivityAction.CONVERSATION_HAD,
    "dnc": ActivityAction.DO_NOT_CONTACT,
    "do_not_contact": ActivityAction.DO_NOT_CONTACT,
}


@dataclass(frozen=True)
class UserProfile:
    id: str
    email: str
    display_name: str
    avatar_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "avatar_url": self.avatar_url,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "UserProfile":
        if not isinstance(data, dict):
            raise PersistenceError("saved user must be a JSON object")
        try:
            return cls(
                id=str(data["id"]),
                email=str(data["email"]),
                display_name=str(data["display_name"]),
                avatar_url=data.get("avatar_url"),
            )
        except KeyError as exc:
            raise PersistenceError(f"saved user missing field {exc.args[0]!r}") from exc


@dataclass(frozen=True)
class PropertyRecord:
    address: str
    owner_name: str
    bedrooms: int
    bathrooms: float
    year_built: int
    square_feet: int
    lot_size: str
    years_owned: int
    sale_price: int
    sale_date: str

    @property
    def formatted_sale_price(self) -> str:
        return f"${self.sale_price:,}"

    @property
    def formatted_square_feet(self) -> str:
        return f"{self.square_feet:,} sq ft"

    @property
    def bed_bath_text(self) -> str:
        if float(self.bathrooms).is_integer():
            baths = str(int(self.bathrooms))
        else:
            baths = str(self.bathrooms)
        return f"{self.bedrooms} bed, {baths} bath"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "owner_name": self.owner_name,
            "bedrooms": self.bedrooms,
            "bathrooms": self.bathrooms,
            "year_built": self.year_built,
            "square_feet": self.square_feet,
            "lot_size": self.lot_size,
            "years_owned": self.years_owned,
            "sale_price": self.sale_price,
            "sale_date": self.sale_date,
        }


@dataclass(frozen=True)
class ActivityRecord:
    record_id: uuid.UUID
    timestamp: datetime
    location_label: str
    action: ActivityAction

    @property
    def record_id_text(self) -> str:
        return str(self.record_id).upper()

    def local_timestamp(self, tz: Optional[tzinfo] = None) -> datetime:
        return self.timestamp.astimezone(tz)

    def csv_timestamp(self, tz: Optional[tzinfo] = None) -> str:
        return self.local_timestamp(tz).strftime(CSV_TIMESTAMP_FORMAT)

    def display_timestamp(self, tz: Optional[tzinfo] = None) -> str:
        return self.local_timestamp(tz).strftime(DISPLAY_TIMESTAMP_FORMAT)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_id": str(self.record_id),
            "timestamp": self.timestamp.isoformat(),
            "location": self.location_label,
            "action": self.action.value,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "ActivityRecord":
        if not isinstance(data, dict):
            raise PersistenceError("activity record must be a JSON object")
        try:
            timestamp = datetime.fromisoformat(str(data["timestamp"]))
            if timestamp.tzinfo is None:
                timestamp = timestamp.astimezone()
            return cls(
                record_id=uuid.UUID(str(data["record_id"])),
                timestamp=timestamp,
                location_label=str(data["location"]),
                action=ActivityAction(data["action"]),
            )
        except (KeyError, ValueError) as exc:
            raise PersistenceError(f"invalid activity record: {exc}") from exc


@dataclass(frozen=True)
class DailyCounts:
    total: int = 0
    flyers: int = 0
    conversations: int = 0
    do_not_contact: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "flyers": self.flyers,
            "conversations": self.conversations,
            "do_not_contact": self.do_not_contact,
        }
