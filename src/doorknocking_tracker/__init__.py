"""Package initializer for `doorknocking_tracker`."""

from .directory import PropertyDirectory
from .ledger import ActivityLedger
from .models import ActivityAction, ActivityRecord, PropertyRecord, UserProfile

__all__ = [
    "ActivityAction",
    "ActivityLedger",
    "ActivityRecord",
    "PropertyDirectory",
    "PropertyRecord",
    "UserProfile",
]
