from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from ..errors import GeocodingError
from ..location import Coordinate, Placemark

logger = logging.getLogger("dkt.location")

DEFAULT_URL = "https://nominatim.openstreetmap.org/reverse"
USER_AGENT = "doorknocking-tracker/0.1"


class NominatimGeocoder:
    """Reverse geocoding against an OpenStreetMap Nominatim endpoint."""

    name = "nominatim"

    def __init__(
        self,
        url: str = DEFAULT_URL,
        *,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._transport = transport

    async def reverse_geocode(self, coordinate: Coordinate) -> Optional[Placemark]:
        params = {
            "format": "jsonv2",
            "lat": f"{coordinate.latitude:.6f}",
            "lon": f"{coordinate.longitude:.6f}",
            "addressdetails": "1",
        }
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": USER_AGENT},
            ) as client:
                resp = await client.get(self.url, params=params)
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as exc:
            raise GeocodingError(str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            raise GeocodingError("invalid geocoder response") from exc
        return _placemark_from_payload(payload)


def _placemark_from_payload(payload: Any) -> Optional[Placemark]:
    if not isinstance(payload, dict) or payload.get("error"):
        return None
    address: Dict[str, Any] = payload.get("address") or {}
    locality = (
        address.get("city")
        or address.get("town")
        or address.get("village")
        or address.get("hamlet")
    )
    return Placemark(
        street_number=address.get("house_number"),
        street_name=address.get("road"),
        locality=locality,
        postal_code=address.get("postcode"),
    )
