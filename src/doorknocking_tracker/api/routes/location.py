from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...errors import ValidationError
from ...location import Coordinate, PermissionStatus
from ...services import TrackerServices
from ..deps import get_services
from ..schemas import FixBody, LocationErrorBody, PermissionBody

router = APIRouter(tags=["location"])


@router.get("/location")
async def get_location(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    return {"ok": True, "location": services.location.to_dict()}


@router.post("/location/request")
async def request_location(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    started = services.location.request_location()
    return {"ok": True, "started": started, "location": services.location.to_dict()}


@router.post("/location/permission")
async def change_permission(
    body: PermissionBody, services: TrackerServices = Depends(get_services)
) -> Dict[str, Any]:
    try:
        status = PermissionStatus(body.status.strip().lower())
    except ValueError:
        raise ValidationError(
            f"Unknown permission status: {body.status!r}",
            details={"allowed": [s.value for s in PermissionStatus]},
        )
    services.location.change_authorization(status)
    return {"ok": True, "location": services.location.to_dict()}


@router.post("/location/fix")
async def report_fix(body: FixBody, services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    address = await services.location.update(Coordinate(body.latitude, body.longitude))
    return {"ok": address is not None, "location": services.location.to_dict()}


@router.post("/location/error")
async def report_error(
    body: LocationErrorBody, services: TrackerServices = Depends(get_services)
) -> Dict[str, Any]:
    services.location.fail(body.reason)
    return {"ok": True, "location": services.location.to_dict()}
