from sqlalchemy import String, Integer, DateTime, Boolean, Numeric, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime

from easyticket.models.base import Base

class Ticket(Base):
    __tablename__ = "tickets"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_tickets_quantity_non_negative"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    vendor_email: Mapped[str] = mapped_column(String(255), index=True)
    vendor_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    title: Mapped[str] = mapped_column(String(255))
    origin: Mapped[str] = mapped_column(String(120), index=True)
    destination: Mapped[str] = mapped_column(String(120), index=True)
    transport_type: Mapped[str] = mapped_column(String(32), index=True)  # bus | train | launch | plane
    price: Mapped[float] = mapped_column(Numeric(10, 2))
    # Seats still for sale; only settlement decrements it
    quantity: Mapped[int] = mapped_column(Integer)
    departure_at: Mapped[datetime] = mapped_column(DateTime)
    perks: Mapped[str | None] = mapped_column(Text, nullable=True)  # comma separated
    image: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_advertised: Mapped[bool] = mapped_column(Boolean, default=False)
    verification_status: Mapped[str] = mapped_column(String(16), default="pending", index=True)  # pending | approved | rejected
    is_hidden: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
