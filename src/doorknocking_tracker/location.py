from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from .errors import GeocodingError, LocationPermissionDenied

logger = logging.getLogger("dkt.location")

UNKNOWN_ADDRESS = "Unknown Address"
DENIED_MESSAGE = "Location access denied. Please enable in Settings."


class PermissionStatus(str, Enum):
    NOT_DETERMINED = "not_determined"
    DENIED = "denied"
    RESTRICTED = "restricted"
    AUTHORIZED_WHEN_IN_USE = "authorized_when_in_use"
    AUTHORIZED_ALWAYS = "authorized_always"

    @property
    def is_authorized(self) -> bool:
        return self in (PermissionStatus.AUTHORIZED_WHEN_IN_USE, PermissionStatus.AUTHORIZED_ALWAYS)


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def distance_m(self, other: "Coordinate") -> float:
        r = 6371000.0
        phi1 = math.radians(self.latitude)
        phi2 = math.radians(other.latitude)
        dphi = phi2 - phi1
        dlmb = math.radians(other.longitude - self.longitude)
        a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
        return 2 * r * math.asin(math.sqrt(a))


@dataclass(frozen=True)
class Placemark:
    street_number: Optional[str] = None
    street_name: Optional[str] = None
    locality: Optional[str] = None
    postal_code: Optional[str] = None


class Geocoder(Protocol):
    name: str

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[Placemark]:
        ...


def format_address(placemark: Placemark) -> str:
    parts = [p for p in (placemark.street_number, placemark.street_name) if p]
    if not parts:
        return UNKNOWN_ADDRESS
    return " ".join(parts)


class LocationProbe:
    """Latest device fix and its reverse-geocoded street address."""

    def __init__(self, geocoder: Geocoder, *, distance_filter_m: float = 5.0) -> None:
        self.geocoder = geocoder
        self.distance_filter_m = distance_filter_m
        self.authorization_status = PermissionStatus.NOT_DETERMINED
        self.current_coordinate: Optional[Coordinate] = None
        self.current_address = ""
        self.is_loading = False
        self.is_updating = False
        self.permission_requested = False
        self.error_message: Optional[str] = None
        self._generation = 0

    def request_location(self) -> bool:
        """Start updates if allowed; returns whether updates are running."""
        status = self.authorization_status
        if status is PermissionStatus.NOT_DETERMINED:
            self.permission_requested = True
            logger.info("location permission requested")
            return False
        if status in (PermissionStatus.DENIED, PermissionStatus.RESTRICTED):
            self.error_message = DENIED_MESSAGE
            raise LocationPermissionDenied(DENIED_MESSAGE)
        self._start_updates()
        return True

    def change_authorization(self, status: PermissionStatus) -> None:
        self.authorization_status = PermissionStatus(status)
        logger.info("location authorization changed: %s", self.authorization_status.value)
        if self.authorization_status.is_authorized:
            self._start_updates()
        else:
            self.stop_updates()
            if self.authorization_status is not PermissionStatus.NOT_DETERMINED:
                self.error_message = DENIED_MESSAGE

    def _start_updates(self) -> None:
        self.is_updating = True
        self.is_loading = True
        self.error_message = None

    def stop_updates(self) -> None:
        self.is_updating = False
        self.is_loading = False

    async def update(self, coordinate: Coordinate) -> Optional[str]:
        """Record a new fix and resolve its street address.

        Returns the resolved address, or ``None`` when the fix was filtered,
        the lookup failed, or a newer fix superseded it.
        """
        if not self.authorization_status.is_authorized:
            self.error_message = DENIED_MESSAGE
            raise LocationPermissionDenied(DENIED_MESSAGE)
        if not self.is_updating:
            self._start_updates()
        previous = self.current_coordinate
        if (
            previous is not None
            and self.current_address
            and previous.distance_m(coordinate) < self.distance_filter_m
        ):
            self.is_loading = False
            return None
        self.current_coordinate = coordinate
        generation = self._generation = self._generation + 1
        self.is_loading = True
        try:
            placemark = await self.geocoder.reverse_geocode(coordinate)
        except GeocodingError as exc:
            if generation != self._generation:
                return None
            self.is_loading = False
            self.error_message = f"Failed to get address: {exc.message}"
            logger.warning("reverse geocoding failed: %s", exc.message)
            return None
        if generation != self._generation:
            logger.debug("dropping stale geocode result (generation %s)", generation)
            return None
        self.is_loading = False
        if placemark is None:
            return None
        self.current_address = format_address(placemark)
        self.error_message = None
        logger.debug("resolved address %r", self.current_address)
        return self.current_address

    def fail(self, reason: str) -> None:
        self.is_loading = False
        self.error_message = f"Location error: {reason}"
        logger.warning("location error: %s", reason)

    def to_dict(self) -> dict:
        return {
            "authorization_status": self.authorization_status.value,
            "permission_requested": self.permission_requested,
            "is_updating": self.is_updating,
            "is_loading": self.is_loading,
            "current_address": self.current_address,
            "coordinate": (
                {
                    "latitude": self.current_coordinate.latitude,
                    "longitude": self.current_coordinate.longitude,
                }
                if self.current_coordinate
                else None
            ),
            "error_message": self.error_message,
        }
