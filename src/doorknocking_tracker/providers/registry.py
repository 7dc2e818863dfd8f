from __future__ import annotations

from typing import List, Optional

from ..config import Settings, get_settings
from ..location import Geocoder
from ..session import IdentityProvider
from .demo import DemoGeocoder, DemoIdentityProvider
from .nominatim import NominatimGeocoder

_GEOCODERS = ("demo", "nominatim")
_IDENTITY_PROVIDERS = ("demo",)


def list_geocoders() -> List[str]:
    return list(_GEOCODERS)


def get_geocoder(name: Optional[str] = None, settings: Optional[Settings] = None) -> Geocoder:
    settings = settings or get_settings()
    key = (name or settings.geocoder or "demo").strip().lower()
    if key == "demo":
        return DemoGeocoder()
    if key == "nominatim":
        return NominatimGeocoder(url=settings.nominatim_url)
    raise KeyError(f"Unknown geocoder: {name}")


def get_identity_provider(
    name: Optional[str] = None, settings: Optional[Settings] = None
) -> IdentityProvider:
    settings = settings or get_settings()
    key = (name or settings.identity or "demo").strip().lower()
    if key in _IDENTITY_PROVIDERS:
        return DemoIdentityProvider()
    raise KeyError(f"Unknown identity provider: {name}")
