from datetime import datetime
from decimal import Decimal
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from easyticket.api.deps import get_current_user, require_roles
from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import get_db
from easyticket.models.ticket import Ticket
from easyticket.models.user import User
from easyticket.repositories.bookings import BookingRepository
from easyticket.repositories.tickets import TicketRepository
from easyticket.schemas.bookings import BookingCreate, booking_out

router = APIRouter()

def with_tickets(db: Session, bookings) -> list[dict]:
    """Serialize bookings with a summary of their ticket (one query for all tickets)."""
    ticket_ids = {b.ticket_id for b in bookings}
    tickets_map = {}
    if ticket_ids:
        tickets_map = {t.id: t for t in DocumentGateway(db).find(Ticket, Ticket.id.in_(ticket_ids))}
    return [booking_out(b, tickets_map.get(b.ticket_id)) for b in bookings]

@router.post("", status_code=201)
@router.post("/", status_code=201)
def create_booking(payload: BookingCreate, db: Session = Depends(get_db), user: User = Depends(require_roles("user"))):
    """Request seats on a ticket. Nothing is reserved until the booking is paid."""
    gateway = DocumentGateway(db)
    t = TicketRepository(gateway).get_public(payload.ticket_id)
    if not t:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ticket not found")
    if t.departure_at <= datetime.utcnow():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Ticket has already departed")
    if payload.quantity > t.quantity:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Not enough tickets available")
    b = BookingRepository(gateway).create(
        ticket_id=t.id,
        user_email=user.email,
        vendor_email=t.vendor_email,
        quantity=payload.quantity,
        total_price=Decimal(str(t.price)) * payload.quantity,
    )
    db.commit()
    db.refresh(b)
    return booking_out(b, t)

@router.get("/my")
def my_bookings(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return with_tickets(db, BookingRepository(DocumentGateway(db)).list_for_user(user.email))

def _decide(booking_id: int, to_status: str, db: Session, vendor: User):
    repo = BookingRepository(DocumentGateway(db))
    b = repo.get(booking_id)
    if not b:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    if b.vendor_email != vendor.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your booking")
    # Only pending bookings can be decided; a paid booking never changes again
    if not repo.transition(booking_id, to_status, ("pending",)):
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Booking is already {b.status}")
    db.commit()
    db.refresh(b)
    return booking_out(b)

@router.patch("/{booking_id}/accept")
def accept_booking(booking_id: int, db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    return _decide(booking_id, "accepted", db, vendor)

@router.patch("/{booking_id}/reject")
def reject_booking(booking_id: int, db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    return _decide(booking_id, "rejected", db, vendor)
