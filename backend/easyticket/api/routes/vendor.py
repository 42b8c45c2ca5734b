from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from easyticket.api.deps import require_roles
from easyticket.api.routes.bookings import with_tickets
from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import get_db
from easyticket.models.user import User
from easyticket.repositories.bookings import BookingRepository
from easyticket.repositories.tickets import TicketRepository
from easyticket.schemas.tickets import ticket_out
from easyticket.services.revenue import vendor_revenue

router = APIRouter()

@router.get("/tickets")
def my_listed_tickets(db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    return [ticket_out(t) for t in TicketRepository(DocumentGateway(db)).list_for_vendor(vendor.email)]

@router.get("/bookings")
def requested_bookings(db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    return with_tickets(db, BookingRepository(DocumentGateway(db)).list_for_vendor(vendor.email))

@router.get("/revenue")
def revenue_overview(db: Session = Depends(get_db), vendor: User = Depends(require_roles("vendor"))):
    """{totalRevenue, totalTicketsSold, totalTicketsAdded, transactions[]} for the calling vendor."""
    return vendor_revenue(db, vendor.email)
