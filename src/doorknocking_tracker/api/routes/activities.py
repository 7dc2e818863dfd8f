from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Response

from ...export import EXCLUDED_SHARE_TARGETS, export_filename, write_export
from ...models import ActivityAction, ActivityRecord
from ...services import TrackerServices
from ..deps import get_services
from ..schemas import ActivityRow, DailyStats, LogActivityBody

router = APIRouter(tags=["activities"])


def activity_row(record: ActivityRecord) -> Dict[str, Any]:
    return ActivityRow(
        record_id=record.record_id_text,
        timestamp=record.timestamp.isoformat(),
        display_timestamp=record.display_timestamp(),
        location=record.location_label,
        action=record.action.value,
    ).model_dump()


@router.get("/activities")
def list_activities(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    records = services.ledger.records
    return {
        "ok": True,
        "count": len(records),
        "activities": [activity_row(r) for r in records],
    }


@router.post("/activities")
def log_activity(body: LogActivityBody, services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    action = ActivityAction.parse(body.action)
    location = body.location if body.location is not None else services.location.current_address
    record = services.ledger.log_activity(location, action)
    return {
        "ok": True,
        "activity": activity_row(record),
        "stats": DailyStats(**services.ledger.daily_counts().to_dict()).model_dump(),
    }


@router.delete("/activities")
def clear_activities(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    services.ledger.clear_all()
    return {"ok": True, "count": 0}


@router.get("/activities/stats")
def daily_stats(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    return {"ok": True, "stats": DailyStats(**services.ledger.daily_counts().to_dict()).model_dump()}


@router.get("/activities/export")
def export_csv(services: TrackerServices = Depends(get_services)) -> Response:
    filename = export_filename()
    return Response(
        content=services.ledger.to_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/activities/export")
def export_file(services: TrackerServices = Depends(get_services)) -> Dict[str, Any]:
    path = write_export(services.ledger, services.settings.export_dir)
    return {
        "ok": True,
        "path": str(path),
        "filename": path.name,
        "count": len(services.ledger),
        "preview": services.ledger.export_preview(),
        "excluded_share_targets": list(EXCLUDED_SHARE_TARGETS),
    }
