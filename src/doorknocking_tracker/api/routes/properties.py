from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from ...errors import NotFoundError, ValidationError
from ...models import PropertyRecord
from ...services import TrackerServices
from ..deps import get_services
from ..schemas import PropertyCard, PropertySearchBody

router = APIRouter(tags=["properties"])


def property_card(record: PropertyRecord) -> Dict[str, Any]:
    return PropertyCard(
        **record.to_dict(),
        formatted_sale_price=record.formatted_sale_price,
        formatted_square_feet=record.formatted_square_feet,
        bed_bath_text=record.bed_bath_text,
    ).model_dump()


@router.get("/properties")
def list_properties(
    limit: Optional[int] = None, services: TrackerServices = Depends(get_services)
) -> Dict[str, Any]:
    records = services.directory.properties
    if limit is not None:
        records = records[: max(0, limit)]
    return {
        "ok": True,
        "count": len(services.directory),
        "source": services.directory.source,
        "properties": [property_card(r) for r in records],
    }


@router.post("/properties/search")
def search_property(
    body: PropertySearchBody, services: TrackerServices = Depends(get_services)
) -> Dict[str, Any]:
    address = body.address if body.address is not None else services.location.current_address
    if not (address or "").strip():
        raise ValidationError("address is required")
    record = services.directory.find_property(address)
    if record is None:
        raise NotFoundError(
            "No Property Found",
            details={"address": address},
        )
    return {"ok": True, "query": address, "property": property_card(record)}
