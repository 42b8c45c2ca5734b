from decimal import Decimal
from typing import Any
from sqlalchemy import func

from easyticket.db.gateway import DocumentGateway
from easyticket.models.transaction import Transaction


class TransactionRepository:
    def __init__(self, gateway: DocumentGateway):
        self.gw = gateway

    def find_by_provider_id(self, provider_transaction_id: str) -> Transaction | None:
        return self.gw.find_one(Transaction, provider_transaction_id=provider_transaction_id)

    def insert(self, **fields: Any) -> Transaction:
        """Raises IntegrityError when the provider transaction id is already recorded."""
        t = Transaction(**fields)
        self.gw.insert_one(t)
        return t

    def list_for_user(self, user_email: str) -> list[Transaction]:
        return self.gw.find(Transaction, sort=(Transaction.paid_at.desc(), Transaction.id.desc()), user_email=user_email)

    def list_for_vendor(self, vendor_email: str) -> list[Transaction]:
        return self.gw.find(Transaction, sort=(Transaction.paid_at.desc(), Transaction.id.desc()), vendor_email=vendor_email)

    def revenue_totals_for_vendor(self, vendor_email: str) -> tuple[Decimal, int]:
        amount, qty = self.gw.aggregate(
            Transaction,
            func.coalesce(func.sum(Transaction.amount), 0),
            func.coalesce(func.sum(Transaction.quantity), 0),
            vendor_email=vendor_email,
        )
        return Decimal(str(amount)), int(qty)
