from sqlalchemy.orm import Session

from easyticket.db.gateway import DocumentGateway
from easyticket.repositories.tickets import TicketRepository
from easyticket.repositories.transactions import TransactionRepository


def transaction_out(t) -> dict:
    return {
        "id": t.id,
        "transactionId": t.provider_transaction_id,
        "bookingId": t.booking_id,
        "ticketId": t.ticket_id,
        "ticketTitle": t.ticket_title,
        "userEmail": t.user_email,
        "vendorEmail": t.vendor_email,
        "amount": float(t.amount),
        "quantity": t.quantity,
        "paidAt": t.paid_at.isoformat() if t.paid_at else None,
    }


def vendor_revenue(db: Session, vendor_email: str) -> dict:
    """Totals come from SQL aggregates over the vendor's transaction log."""
    gateway = DocumentGateway(db)
    transactions = TransactionRepository(gateway)
    total_amount, total_sold = transactions.revenue_totals_for_vendor(vendor_email)
    return {
        "totalRevenue": float(total_amount),
        "totalTicketsSold": total_sold,
        "totalTicketsAdded": TicketRepository(gateway).count_for_vendor(vendor_email),
        "transactions": [transaction_out(t) for t in transactions.list_for_vendor(vendor_email)],
    }
