from pydantic import BaseModel, Field


class BookingCreate(BaseModel):
    ticket_id: int = Field(alias="ticketId", ge=1)
    quantity: int = Field(ge=1, le=20)

    class Config:
        populate_by_name = True


def booking_out(b, ticket=None) -> dict:
    data = {
        "id": b.id,
        "ticketId": b.ticket_id,
        "userEmail": b.user_email,
        "vendorEmail": b.vendor_email,
        "quantity": b.quantity,
        "totalPrice": float(b.total_price),
        "status": b.status,
        "paymentStatus": b.payment_status,
        "transactionId": b.transaction_id,
        "createdAt": b.created_at.isoformat() if b.created_at else None,
        "paidAt": b.paid_at.isoformat() if b.paid_at else None,
        "ticket": None,
    }
    if ticket is not None:
        data["ticket"] = {
            "title": ticket.title,
            "from": ticket.origin,
            "to": ticket.destination,
            "departureDateTime": ticket.departure_at.isoformat() if ticket.departure_at else None,
            "image": ticket.image,
        }
    return data
