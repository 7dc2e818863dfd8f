"""Bundled identity and geocoding providers."""

from .registry import get_geocoder, get_identity_provider, list_geocoders

__all__ = ["get_geocoder", "get_identity_provider", "list_geocoders"]
