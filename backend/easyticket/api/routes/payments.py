import logging
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from easyticket.api.deps import get_current_user, get_payment_provider
from easyticket.core.config import settings
from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import get_db
from easyticket.models.user import User
from easyticket.repositories.bookings import PAYABLE_STATUSES, BookingRepository
from easyticket.repositories.tickets import TicketRepository
from easyticket.repositories.transactions import TransactionRepository
from easyticket.services.checkout import CheckoutService, booking_id_from
from easyticket.services.errors import BookingNotFound, ConflictError, PaymentNotCompleted
from easyticket.services.revenue import transaction_out
from easyticket.services.settlement import SettlementEngine, SettlementResult

logger = logging.getLogger(__name__)

router = APIRouter()

def _settlement_response(result: SettlementResult) -> dict:
    if result.already_settled:
        return {"success": True, "message": "already processed"}
    return {"success": True}

@router.post("/create-checkout-session")
def create_checkout_session(
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
    provider=Depends(get_payment_provider),
):
    """Body: {bookingId, totalPrice, bookingQty, ticketTitle, image, customer:{email}} -> {url}.

    The charged amount and seat count are taken from the stored booking.
    """
    booking_id = booking_id_from(payload)
    gateway = DocumentGateway(db)
    booking = BookingRepository(gateway).get(booking_id)
    if booking is None:
        raise BookingNotFound("Booking not found")
    if booking.user_email != user.email:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your booking")
    if booking.status not in PAYABLE_STATUSES:
        raise ConflictError(f"Booking is already {booking.status}")
    ticket = TicketRepository(gateway).get(booking.ticket_id)
    customer = payload.get("customer") if isinstance(payload.get("customer"), dict) else {}
    email = customer.get("email") or user.email
    url = CheckoutService(provider, settings).create_session(booking, ticket, email)
    return {"url": url}

@router.post("/payment-success")
def payment_success(payload: dict = Body(...), db: Session = Depends(get_db), provider=Depends(get_payment_provider)):
    """Confirm a checkout session after the buyer is redirected back.

    Safe to call any number of times: the provider is the source of truth and a
    session is applied once.
    """
    session_id = payload.get("sessionId")
    result = SettlementEngine(db, provider).settle(session_id if isinstance(session_id, str) else "")
    return _settlement_response(result)

@router.post("/webhooks/stripe")
async def stripe_webhook(request: Request, db: Session = Depends(get_db), provider=Depends(get_payment_provider)):
    body = await request.body()
    event = provider.construct_event(body, request.headers.get("stripe-signature"))
    if event.get("type") != "checkout.session.completed":
        return {"received": True}
    session_id = ((event.get("data") or {}).get("object") or {}).get("id") or ""
    try:
        result = await run_in_threadpool(SettlementEngine(db, provider).settle, session_id)
    except PaymentNotCompleted:
        # async payment methods complete the session before funds arrive
        logger.info("Webhook for unpaid session %s ignored", session_id)
        return {"received": True}
    return {"received": True, **_settlement_response(result)}

@router.get("/transactions/my")
def my_transactions(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return [transaction_out(t) for t in TransactionRepository(DocumentGateway(db)).list_for_user(user.email)]
