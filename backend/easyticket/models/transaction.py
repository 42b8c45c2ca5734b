from sqlalchemy import String, Integer, ForeignKey, DateTime, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from easyticket.models.base import Base

class Transaction(Base):
    __tablename__ = "transactions"
    # One row per provider transaction: a duplicate insert is how a repeated settlement is detected
    __table_args__ = (UniqueConstraint("provider_transaction_id", name="uq_transactions_provider_transaction_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    provider_transaction_id: Mapped[str] = mapped_column(String(255))
    booking_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True, index=True)
    ticket_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    user_email: Mapped[str] = mapped_column(String(255), index=True)
    vendor_email: Mapped[str] = mapped_column(String(255), index=True)
    amount: Mapped[float] = mapped_column(Numeric(10, 2))
    quantity: Mapped[int] = mapped_column(Integer)
    ticket_title: Mapped[str | None] = mapped_column(String(255), nullable=True)
    paid_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
