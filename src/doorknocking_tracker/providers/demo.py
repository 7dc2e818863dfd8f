from __future__ import annotations

from typing import Dict, Optional, Tuple

from ..errors import AuthenticationError, GeocodingError
from ..location import Coordinate, Placemark
from ..models import UserProfile

DEMO_USER = UserProfile(
    id="demo-user",
    email="canvasser@example.com",
    display_name="Demo Canvasser",
    avatar_url=None,
)

# Fixed fixes near the bundled sample properties.
DEMO_PLACEMARKS: Dict[Tuple[float, float], Placemark] = {
    (39.7392, -104.9903): Placemark("123", "Main St", "Springfield", "80202"),
    (39.7401, -104.9921): Placemark("456", "Oak Ave", "Springfield", "80202"),
    (39.7415, -104.9877): Placemark("789", "Pine Rd", "Springfield", "80203"),
    (39.7368, -104.9950): Placemark("321", "Elm St", "Springfield", "80204"),
    (39.7429, -104.9862): Placemark("654", "Maple Dr", "Springfield", "80203"),
}


class DemoIdentityProvider:
    """Offline identity provider that signs in a fixed profile."""

    name = "demo"

    def __init__(
        self,
        user: Optional[UserProfile] = DEMO_USER,
        *,
        remembered: bool = False,
        reject_reason: Optional[str] = None,
        callback_scheme: str = "doorknocking://",
    ) -> None:
        self.user = user
        self.remembered = remembered
        self.reject_reason = reject_reason
        self.callback_scheme = callback_scheme
        self.sign_out_calls = 0

    async def sign_in(self) -> Optional[UserProfile]:
        if self.reject_reason:
            raise AuthenticationError(self.reject_reason)
        self.remembered = self.user is not None
        return self.user

    async def restore_session(self) -> Optional[UserProfile]:
        if self.reject_reason:
            raise AuthenticationError(self.reject_reason)
        return self.user if self.remembered else None

    def has_previous_sign_in(self) -> bool:
        return self.remembered

    def sign_out(self) -> None:
        self.sign_out_calls += 1
        self.remembered = False

    def handle_callback(self, url: str) -> bool:
        return bool(url) and url.startswith(self.callback_scheme)


class DemoGeocoder:
    """Lookup-table geocoder keyed by coordinates rounded to 4 decimals."""

    name = "demo"

    def __init__(
        self,
        placemarks: Optional[Dict[Tuple[float, float], Placemark]] = None,
        *,
        error: Optional[str] = None,
    ) -> None:
        self.placemarks = dict(DEMO_PLACEMARKS if placemarks is None else placemarks)
        self.error = error

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[Placemark]:
        if self.error:
            raise GeocodingError(self.error)
        key = (round(coordinate.latitude, 4), round(coordinate.longitude, 4))
        return self.placemarks.get(key)
