from datetime import datetime, timezone
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session

from easyticket.api.deps import require_roles
from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import get_db
from easyticket.models.user import User
from easyticket.repositories.bookings import BookingRepository
from easyticket.repositories.tickets import TicketRepository
from easyticket.schemas.tickets import TicketCreate, TicketUpdate, ticket_out

router = APIRouter()

def _naive_utc(dt: datetime) -> datetime:
    # Columns store naive UTC
    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt

@router.get("/approved")
def list_approved_tickets(
    db: Session = Depends(get_db),
    origin: str | None = Query(None, alias="from"),
    destination: str | None = Query(None, alias="to"),
    transport: str | None = Query(None, description="bus | train | launch | plane"),
    sort: str = Query("departure_asc", pattern="^(price_asc|price_desc|departure_asc|newest)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(9, ge=1, le=100, alias="pageSize"),
):
    """Approved, visible tickets with route/transport search, sorting and pagination."""
    items, total = TicketRepository(DocumentGateway(db)).search_approved(
        origin=origin,
        destination=destination,
        transport_type=transport,
        sort=sort,
        page=page,
        page_size=page_size,
    )
    return {
        "items": [ticket_out(t) for t in items],
        "total": total,
        "page": page,
        "pageSize": page_size,
        "pages": (total + page_size - 1) // page_size if total else 1,
    }

@router.get("/advertised")
def list_advertised_tickets(db: Session = Depends(get_db)):
    return [ticket_out(t) for t in TicketRepository(DocumentGateway(db)).list_advertised()]

@router.get("/latest")
def list_latest_tickets(limit: int = Query(8, ge=1, le=50), db: Session = Depends(get_db)):
    return [ticket_out(t) for t in TicketRepository(DocumentGateway(db)).list_latest(limit)]

@router.get("/{ticket_id}")
def get_ticket(ticket_id: int, db: Session = Depends(get_db)):
    t = TicketRepository(DocumentGateway(db)).get_public(ticket_id)
    if not t:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return ticket_out(t)

@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_ticket(payload: TicketCreate, db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    """Vendor submits a listing; it stays hidden from buyers until an admin approves it."""
    if vendor.is_fraud:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Fraud vendors cannot add tickets")
    t = TicketRepository(DocumentGateway(db)).create(
        vendor_email=vendor.email,
        vendor_name=vendor.name,
        title=payload.title.strip(),
        origin=payload.origin.strip(),
        destination=payload.destination.strip(),
        transport_type=payload.transport_type,
        price=payload.price,
        quantity=payload.quantity,
        departure_at=_naive_utc(payload.departure_at),
        perks=",".join(p.strip() for p in payload.perks if p.strip()),
        image=payload.image,
    )
    db.commit()
    db.refresh(t)
    return ticket_out(t)

def _owned_ticket(repo: TicketRepository, ticket_id: int, vendor: User):
    t = repo.get(ticket_id)
    if not t:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if t.vendor_email != vendor.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your ticket")
    return t

@router.patch("/{ticket_id}")
def update_ticket(ticket_id: int, payload: TicketUpdate, db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    """Edit a listing. Any edit sends it back to moderation; rejected listings are final."""
    repo = TicketRepository(DocumentGateway(db))
    t = _owned_ticket(repo, ticket_id, vendor)
    if t.verification_status == "rejected":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Rejected tickets cannot be edited")
    fields = payload.model_dump(exclude_unset=True)
    if not fields:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Nothing to update")
    if "perks" in fields:
        fields["perks"] = ",".join(p.strip() for p in (fields["perks"] or []) if p.strip())
    if fields.get("departure_at") is not None:
        fields["departure_at"] = _naive_utc(fields["departure_at"])
    for key in ("title", "origin", "destination", "transport_type", "price", "departure_at"):
        if key in fields and fields[key] is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"{key} cannot be empty")
    repo.update_fields(ticket_id, fields)
    db.commit()
    db.refresh(t)
    return ticket_out(t)

@router.delete("/{ticket_id}")
def delete_ticket(ticket_id: int, db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    gateway = DocumentGateway(db)
    repo = TicketRepository(gateway)
    _owned_ticket(repo, ticket_id, vendor)
    # bookings and their payment history outlive the listing
    if BookingRepository(gateway).count_for_ticket(ticket_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Ticket has bookings and cannot be deleted")
    repo.delete(ticket_id)
    db.commit()
    return {"status": "deleted"}
