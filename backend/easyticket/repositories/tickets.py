from datetime import datetime
from typing import Any
from sqlalchemy import func

from easyticket.db.gateway import LIKE_ESCAPE, DocumentGateway, contains_pattern
from easyticket.models.ticket import Ticket

SORTS = {
    "price_asc": (Ticket.price.asc(), Ticket.id.asc()),
    "price_desc": (Ticket.price.desc(), Ticket.id.asc()),
    "departure_asc": (Ticket.departure_at.asc(), Ticket.id.asc()),
    "newest": (Ticket.created_at.desc(), Ticket.id.desc()),
}


class TicketRepository:
    def __init__(self, gateway: DocumentGateway):
        self.gw = gateway

    @staticmethod
    def _public():
        # What buyers may see: approved listings of vendors not flagged for fraud
        return (Ticket.verification_status == "approved", Ticket.is_hidden == False)  # noqa: E712

    def get(self, ticket_id: int) -> Ticket | None:
        return self.gw.get(Ticket, ticket_id)

    def get_public(self, ticket_id: int) -> Ticket | None:
        return self.gw.find_one(Ticket, Ticket.id == ticket_id, *self._public())

    def create(self, **fields: Any) -> Ticket:
        t = Ticket(**fields, verification_status="pending", is_advertised=False, is_hidden=False, created_at=datetime.utcnow())
        self.gw.insert_one(t)
        return t

    def update_fields(self, ticket_id: int, fields: dict[str, Any]) -> int:
        """Vendor edit: any change sends the listing back to moderation."""
        values = dict(fields)
        values["verification_status"] = "pending"
        values["is_advertised"] = False
        return self.gw.update_one(Ticket, ticket_id, values=values)

    def delete(self, ticket_id: int) -> int:
        return self.gw.delete_one(Ticket, ticket_id)

    def search_approved(
        self,
        origin: str | None = None,
        destination: str | None = None,
        transport_type: str | None = None,
        sort: str = "departure_asc",
        page: int = 1,
        page_size: int = 9,
    ) -> tuple[list[Ticket], int]:
        criteria = list(self._public())
        if origin:
            criteria.append(func.lower(Ticket.origin).like(contains_pattern(origin.lower()), escape=LIKE_ESCAPE))
        if destination:
            criteria.append(func.lower(Ticket.destination).like(contains_pattern(destination.lower()), escape=LIKE_ESCAPE))
        if transport_type:
            criteria.append(func.lower(Ticket.transport_type) == transport_type.lower())
        total = self.gw.count_documents(Ticket, *criteria)
        items = self.gw.find(
            Ticket,
            *criteria,
            sort=SORTS.get(sort, SORTS["departure_asc"]),
            skip=(page - 1) * page_size,
            limit=page_size,
        )
        return items, total

    def list_advertised(self) -> list[Ticket]:
        return self.gw.find(Ticket, *self._public(), Ticket.is_advertised == True, sort=SORTS["newest"])  # noqa: E712

    def count_advertised(self) -> int:
        return self.gw.count_documents(Ticket, is_advertised=True)

    def list_latest(self, limit: int = 8) -> list[Ticket]:
        return self.gw.find(Ticket, *self._public(), sort=SORTS["newest"], limit=limit)

    def list_for_vendor(self, vendor_email: str) -> list[Ticket]:
        return self.gw.find(Ticket, sort=SORTS["newest"], vendor_email=vendor_email)

    def list_all(self) -> list[Ticket]:
        return self.gw.find(Ticket, sort=SORTS["newest"])

    def count_for_vendor(self, vendor_email: str) -> int:
        return self.gw.count_documents(Ticket, vendor_email=vendor_email)

    def set_verification_status(self, ticket_id: int, status: str) -> int:
        values: dict[str, Any] = {"verification_status": status}
        if status != "approved":
            values["is_advertised"] = False
        return self.gw.update_one(Ticket, ticket_id, values=values)

    def set_advertised(self, ticket_id: int, advertised: bool) -> int:
        return self.gw.update_one(Ticket, ticket_id, values={"is_advertised": advertised})

    def hide_vendor_tickets(self, vendor_email: str) -> int:
        return self.gw.update_many(Ticket, values={"is_hidden": True, "is_advertised": False}, vendor_email=vendor_email)

    def decrement_quantity(self, ticket_id: int, qty: int) -> bool:
        """Atomically take ``qty`` seats; False (and no change) if fewer remain."""
        matched = self.gw.update_one(Ticket, ticket_id, Ticket.quantity >= qty, increments={"quantity": -qty})
        return matched == 1

