from decimal import Decimal, InvalidOperation
from typing import Any

from easyticket.services.errors import InvalidBookingInfo


def booking_id_from(intent: dict[str, Any]) -> int:
    """Validate a checkout intent and return the booking it is for.

    ``bookingId``, ``totalPrice`` and ``bookingQty`` must all be present and
    positive. Only the id is used afterwards: price and seats come from the
    stored booking.
    """
    booking_id = _positive(intent.get("bookingId"), integer=True)
    total_price = _positive(intent.get("totalPrice"))
    qty = _positive(intent.get("bookingQty"), integer=True)
    if booking_id is None or total_price is None or qty is None:
        raise InvalidBookingInfo("Invalid booking info")
    return int(booking_id)


class CheckoutService:
    """Turn a stored booking into a provider checkout session.

    The metadata written here (``bookingId``, ``bookingQty``) is checked
    against the booking again by settlement once the session is paid.
    """

    def __init__(self, provider, settings):
        self.provider = provider
        self.settings = settings

    def create_session(self, booking, ticket, customer_email: str | None) -> str:
        total_price = Decimal(str(booking.total_price))
        title = (ticket.title if ticket is not None else "").strip() or "Ticket"
        product: dict[str, Any] = {"name": title, "description": f"{booking.quantity} ticket(s)"}
        if ticket is not None and ticket.image:
            product["images"] = [ticket.image]
        line_item = {
            "price_data": {
                "currency": self.settings.currency,
                "product_data": product,
                # whole booking as one unit, in the smallest currency unit
                "unit_amount": int((total_price * 100).to_integral_value()),
            },
            "quantity": 1,
        }
        metadata = {"bookingId": str(booking.id), "bookingQty": str(booking.quantity)}
        if customer_email:
            metadata["customerEmail"] = customer_email
        session = self.provider.create_checkout_session(
            line_item=line_item,
            customer_email=customer_email,
            success_url=self.settings.success_url,
            cancel_url=self.settings.cancel_url,
            metadata=metadata,
        )
        return session.url


def _positive(value: Any, integer: bool = False) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        n = Decimal(str(value))
    except InvalidOperation:
        return None
    if not n.is_finite() or n <= 0:
        return None
    if integer and n != n.to_integral_value():
        return None
    return n
