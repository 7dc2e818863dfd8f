from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends

from ...services import TrackerServices
from ..deps import get_services
from ..schemas import CallbackBody

router = APIRouter(tags=["session"])


@router.get("/session")
async def get_session(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    return {"ok": True, "session": services.session.to_dict()}


@router.post("/session/sign-in")
async def sign_in(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    await services.session.sign_in()
    return {"ok": True, "session": services.session.to_dict()}


@router.post("/session/restore")
async def restore(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    user = await services.session.restore_previous_sign_in()
    return {"ok": user is not None, "session": services.session.to_dict()}


@router.post("/session/sign-out")
async def sign_out(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    services.session.sign_out()
    return {"ok": True, "session": services.session.to_dict()}


@router.post("/session/callback")
async def callback(body: CallbackBody, services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    return {"ok": True, "handled": services.session.handle_callback(body.url)}
