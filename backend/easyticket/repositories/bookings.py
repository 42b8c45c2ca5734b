from datetime import datetime
from typing import Any

from easyticket.db.gateway import DocumentGateway
from easyticket.models.booking import Booking

# Statuses from which a payment may still be applied
PAYABLE_STATUSES = ("pending", "accepted")


class BookingRepository:
    def __init__(self, gateway: DocumentGateway):
        self.gw = gateway

    def get(self, booking_id: int) -> Booking | None:
        return self.gw.get(Booking, booking_id)

    def create(self, **fields: Any) -> Booking:
        b = Booking(**fields, status="pending", payment_status="unpaid", created_at=datetime.utcnow())
        self.gw.insert_one(b)
        return b

    def list_for_user(self, user_email: str) -> list[Booking]:
        return self.gw.find(Booking, sort=(Booking.created_at.desc(), Booking.id.desc()), user_email=user_email)

    def list_for_vendor(self, vendor_email: str) -> list[Booking]:
        return self.gw.find(Booking, sort=(Booking.created_at.desc(), Booking.id.desc()), vendor_email=vendor_email)

    def count_for_ticket(self, ticket_id: int) -> int:
        return self.gw.count_documents(Booking, ticket_id=ticket_id)

    def transition(self, booking_id: int, to_status: str, from_statuses: tuple[str, ...]) -> bool:
        """Move the booking to ``to_status`` only if it currently is in ``from_statuses``."""
        matched = self.gw.update_one(Booking, booking_id, Booking.status.in_(from_statuses), values={"status": to_status})
        return matched == 1

    def mark_paid(self, booking_id: int, provider_transaction_id: str, paid_at: datetime) -> bool:
        matched = self.gw.update_one(
            Booking,
            booking_id,
            Booking.status.in_(PAYABLE_STATUSES),
            values={
                "status": "paid",
                "payment_status": "paid",
                "transaction_id": provider_transaction_id,
                "paid_at": paid_at,
            },
        )
        return matched == 1
