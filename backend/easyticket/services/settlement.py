"""Payment settlement: turn a paid checkout session into a paid booking.

Settling a session has three effects: the booking becomes ``paid``, the
ticket loses the sold seats, and a Transaction row is recorded. They are
applied at most once per provider transaction id. The unique constraint on
``transactions.provider_transaction_id`` is the serialization point: the
Transaction is inserted first, so of two racing settlements only one gets
past the insert and the other never touches the booking or the ticket.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from easyticket.db.gateway import DocumentGateway
from easyticket.repositories.bookings import BookingRepository
from easyticket.repositories.tickets import TicketRepository
from easyticket.repositories.transactions import TransactionRepository
from easyticket.services.errors import (
    BookingNotFound,
    ConflictError,
    ExpiredBooking,
    Oversell,
    PaymentNotCompleted,
    TicketNotFound,
    ValidationError,
)
from easyticket.services.payment_provider import ProviderSession

logger = logging.getLogger(__name__)


@dataclass
class SettlementResult:
    booking_id: int
    provider_transaction_id: str
    already_settled: bool
    transaction_id: Optional[int] = None


class SettlementEngine:
    def __init__(self, db: Session, provider, clock: Callable[[], datetime] = datetime.utcnow):
        self.db = db
        self.provider = provider
        self.clock = clock
        gateway = DocumentGateway(db)
        self.bookings = BookingRepository(gateway)
        self.tickets = TicketRepository(gateway)
        self.transactions = TransactionRepository(gateway)

    def settle(self, session_id: str) -> SettlementResult:
        if not isinstance(session_id, str) or not session_id.strip():
            raise ValidationError("sessionId is required")
        session = self.provider.retrieve_session(session_id.strip())
        if not session.is_paid:
            logger.info("Session %s not paid (payment_status=%s)", session.session_id, session.payment_status)
            raise PaymentNotCompleted("Payment not completed")

        txn_id = session.transaction_id
        existing = self.transactions.find_by_provider_id(txn_id)
        if existing is not None:
            logger.info("Payment %s already settled (booking %s)", txn_id, existing.booking_id)
            return SettlementResult(existing.booking_id, txn_id, already_settled=True, transaction_id=existing.id)

        booking_id = _int_or_none(session.metadata.get("bookingId"))
        booking = self.bookings.get(booking_id) if booking_id is not None else None
        if booking is None:
            raise BookingNotFound("Booking not found")
        if booking.status == "paid":
            if booking.transaction_id == txn_id:
                return SettlementResult(booking.id, txn_id, already_settled=True)
            raise ConflictError("Booking already paid by another payment")
        if booking.status == "rejected":
            raise ConflictError("Booking was rejected")
        self._check_matches_booking(session, booking)

        ticket = self.tickets.get(booking.ticket_id)
        if ticket is None:
            raise TicketNotFound("Ticket not found")
        now = self.clock()
        if ticket.departure_at <= now:
            raise ExpiredBooking("Departure time has passed")

        return self._apply(session, booking, ticket, booking.quantity, now)

    def _check_matches_booking(self, session: ProviderSession, booking) -> None:
        """The paid session must cover exactly the booking's seats and price."""
        raw_qty = session.metadata.get("bookingQty")
        if raw_qty is not None and _int_or_none(raw_qty) != booking.quantity:
            logger.warning(
                "Session %s quantity %r does not match booking %s (%s seats)",
                session.session_id, raw_qty, booking.id, booking.quantity,
            )
            raise ConflictError("Payment does not match the booking")
        if session.amount_total is not None and _amount(session, booking) != _booking_total(booking):
            logger.warning(
                "Session %s amount %s does not match booking %s total %s",
                session.session_id, session.amount_total, booking.id, booking.total_price,
            )
            raise ConflictError("Payment does not match the booking")

    def _apply(self, session: ProviderSession, booking, ticket, qty: int, now: datetime) -> SettlementResult:
        txn_id = session.transaction_id
        booking_id = booking.id
        ticket_id = ticket.id
        try:
            txn = self.transactions.insert(
                provider_transaction_id=txn_id,
                booking_id=booking_id,
                ticket_id=ticket_id,
                user_email=booking.user_email,
                vendor_email=booking.vendor_email,
                amount=_amount(session, booking),
                quantity=qty,
                ticket_title=ticket.title,
                paid_at=now,
            )
        except IntegrityError:
            self.db.rollback()
            logger.info("Payment %s settled concurrently, nothing to do", txn_id)
            winner = self.transactions.find_by_provider_id(txn_id)
            if winner is None:
                raise ConflictError("Transaction could not be recorded")
            return SettlementResult(booking_id, txn_id, already_settled=True, transaction_id=winner.id)

        if not self.bookings.mark_paid(booking_id, txn_id, now):
            self.db.rollback()
            logger.warning("Booking %s changed state before payment %s could be applied", booking_id, txn_id)
            raise ConflictError("Booking is no longer payable")

        if not self.tickets.decrement_quantity(ticket_id, qty):
            self.db.rollback()
            logger.warning("Oversell: ticket %s has fewer than %s seats for booking %s", ticket_id, qty, booking_id)
            raise Oversell("Not enough tickets available")

        transaction_pk = txn.id
        self.db.commit()
        logger.info("Settled booking %s: payment %s, %s seat(s) of ticket %s", booking_id, txn_id, qty, ticket_id)
        return SettlementResult(booking_id, txn_id, already_settled=False, transaction_id=transaction_pk)


def _int_or_none(value) -> Optional[int]:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def _booking_total(booking) -> Decimal:
    return Decimal(str(booking.total_price)).quantize(Decimal("0.01"))


def _amount(session: ProviderSession, booking) -> Decimal:
    if session.amount_total is not None:
        return (Decimal(session.amount_total) / 100).quantize(Decimal("0.01"))
    return _booking_total(booking)
