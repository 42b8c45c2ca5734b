from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

TRANSPORT_PATTERN = "^(bus|train|launch|plane)$"


class TicketCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    origin: str = Field(alias="from", min_length=1, max_length=120)
    destination: str = Field(alias="to", min_length=1, max_length=120)
    transport_type: str = Field(alias="transportType", pattern=TRANSPORT_PATTERN)
    price: float = Field(gt=0)
    quantity: int = Field(ge=1)
    departure_at: datetime = Field(alias="departureDateTime")
    perks: List[str] = []
    image: Optional[str] = None

    class Config:
        populate_by_name = True


class TicketUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    origin: Optional[str] = Field(default=None, alias="from", min_length=1, max_length=120)
    destination: Optional[str] = Field(default=None, alias="to", min_length=1, max_length=120)
    transport_type: Optional[str] = Field(default=None, alias="transportType", pattern=TRANSPORT_PATTERN)
    price: Optional[float] = Field(default=None, gt=0)
    departure_at: Optional[datetime] = Field(default=None, alias="departureDateTime")
    perks: Optional[List[str]] = None
    image: Optional[str] = None

    class Config:
        populate_by_name = True


def ticket_out(t) -> dict:
    return {
        "id": t.id,
        "title": t.title,
        "from": t.origin,
        "to": t.destination,
        "transportType": t.transport_type,
        "price": float(t.price),
        "quantity": t.quantity,
        "departureDateTime": t.departure_at.isoformat() if t.departure_at else None,
        "perks": [p for p in (t.perks or "").split(",") if p],
        "image": t.image,
        "vendorEmail": t.vendor_email,
        "vendorName": t.vendor_name,
        "verificationStatus": t.verification_status,
        "isAdvertised": t.is_advertised,
        "isHidden": t.is_hidden,
        "createdAt": t.created_at.isoformat() if t.created_at else None,
    }
