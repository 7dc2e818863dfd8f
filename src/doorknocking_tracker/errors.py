"""Error taxonomy shared by the managers and the HTTP layer."""

from __future__ import annotations

from typing import Any, Dict, Optional


class TrackerError(Exception):
    """Base exception for the tracker."""

    def __init__(
        self,
        message: str,
        code: str = "TRACKER_ERROR",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": dict(self.details)}


class AuthenticationError(TrackerError):
    """Sign-in or session restore was rejected by the identity provider."""

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class LocationPermissionDenied(TrackerError):
    def __init__(
        self,
        message: str = "Location access denied. Please enable in Settings.",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, code="LOCATION_DENIED", status_code=403, details=details)


class GeocodingError(TrackerError):
    def __init__(self, message: str = "Reverse geocoding failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="GEOCODING_FAILED", status_code=502, details=details)


class NotFoundError(TrackerError):
    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="NOT_FOUND", status_code=404, details=details)


class ValidationError(TrackerError):
    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="VALIDATION_ERROR", status_code=422, details=details)


class PersistenceError(TrackerError):
    """Encoding or decoding a persisted blob failed."""

    def __init__(self, message: str = "Persistence failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="PERSISTENCE_ERROR", status_code=500, details=details)
