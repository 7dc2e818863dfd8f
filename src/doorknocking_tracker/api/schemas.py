from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CallbackBody(BaseModel):
    url: str


class PermissionBody(BaseModel):
    status: str


class FixBody(BaseModel):
    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class LocationErrorBody(BaseModel):
    reason: str


class PropertySearchBody(BaseModel):
    address: Optional[str] = None


class LogActivityBody(BaseModel):
    action: str
    location: Optional[str] = None


class PropertyCard(BaseModel):
    address: str
    owner_name: str
    bedrooms: int
    bathrooms: float
    year_built: int
    square_feet: int
    lot_size: str
    years_owned: int
    sale_price: int
    sale_date: str
    formatted_sale_price: str
    formatted_square_feet: str
    bed_bath_text: str


class ActivityRow(BaseModel):
    record_id: str
    timestamp: str
    display_timestamp: str
    location: str
    action: str


class DailyStats(BaseModel):
    total: int = 0
    flyers: int = 0
    conversations: int = 0
    do_not_contact: int = 0
