import json
import os
from datetime import datetime, timedelta
from pathlib import Path

# Must happen before anything imports easyticket.core.config / easyticket.db.session
_DB_FILE = Path(__file__).resolve().parent / "test_easyticket.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_FILE}"
os.environ["ENV"] = "test"
os.environ.setdefault("SECRET_KEY", "test-secret")

import jwt  # noqa: E402
import pytest  # noqa: E402

from easyticket.api.deps import get_payment_provider  # noqa: E402
from easyticket.core.config import settings  # noqa: E402
from easyticket.db.init_db import create_tables, drop_tables  # noqa: E402
from easyticket.db.session import SessionLocal  # noqa: E402
from easyticket.main import app  # noqa: E402
from easyticket.models.booking import Booking  # noqa: E402
from easyticket.models.ticket import Ticket  # noqa: E402
from easyticket.models.user import User  # noqa: E402
from easyticket.services.errors import ValidationError  # noqa: E402
from easyticket.services.payment_provider import CheckoutSession, ProviderSession  # noqa: E402


class FakeProvider:
    """In-memory stand-in for the Stripe client."""

    def __init__(self):
        self.sessions: dict[str, ProviderSession] = {}
        self.created: list[dict] = []
        self.retrievals = 0
        self.fail_with: Exception | None = None

    def create_checkout_session(self, line_item, customer_email, success_url, cancel_url, metadata):
        session_id = f"cs_test_{len(self.created) + 1}"
        self.created.append({
            "line_item": line_item,
            "customer_email": customer_email,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        })
        return CheckoutSession(url=f"https://checkout.stripe.test/{session_id}", session_id=session_id)

    def pay(self, session_id, booking_id, qty, amount_total=None, payment_intent=None, payment_status="paid"):
        metadata = {"bookingId": str(booking_id)}
        if qty is not None:
            metadata["bookingQty"] = str(qty)
        self.sessions[session_id] = ProviderSession(
            session_id=session_id,
            payment_status=payment_status,
            payment_intent_id=payment_intent or f"pi_{session_id}",
            metadata=metadata,
            amount_total=amount_total,
        )

    def retrieve_session(self, session_id):
        self.retrievals += 1
        if self.fail_with is not None:
            raise self.fail_with
        if session_id not in self.sessions:
            raise ValidationError("Invalid checkout session")
        return self.sessions[session_id]

    def construct_event(self, payload, signature):
        if signature != "valid-signature":
            raise ValidationError("Invalid webhook signature")
        return json.loads(payload)


@pytest.fixture(autouse=True)
def fresh_schema():
    drop_tables()
    create_tables()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def provider():
    fake = FakeProvider()
    app.dependency_overrides[get_payment_provider] = lambda: fake
    return fake


@pytest.fixture
def auth():
    def _auth(email: str) -> dict:
        token = jwt.encode({"sub": email, "email": email}, settings.secret_key, algorithm=settings.algorithm)
        return {"Authorization": f"Bearer {token}"}
    return _auth


@pytest.fixture
def make_user():
    def _make(email: str, role: str = "user", is_fraud: bool = False) -> int:
        db = SessionLocal()
        u = User(email=email, name=email.split("@")[0], role=role, is_fraud=is_fraud)
        db.add(u)
        db.commit()
        user_id = u.id
        db.close()
        return user_id
    return _make


@pytest.fixture
def seed_ticket():
    def _seed(
        vendor_email: str = "vendor@example.com",
        quantity: int = 10,
        price: float = 20.0,
        status: str = "approved",
        departure: datetime | None = None,
        **extra,
    ) -> int:
        fields = {
            "title": "Dhaka Express",
            "origin": "Dhaka",
            "destination": "Chittagong",
            "transport_type": "bus",
        }
        fields.update(extra)
        db = SessionLocal()
        t = Ticket(
            vendor_email=vendor_email,
            price=price,
            quantity=quantity,
            departure_at=departure or datetime.utcnow() + timedelta(days=30),
            verification_status=status,
            **fields,
        )
        db.add(t)
        db.commit()
        ticket_id = t.id
        db.close()
        return ticket_id
    return _seed


@pytest.fixture
def seed_booking():
    def _seed(ticket_id: int, user_email: str = "buyer@example.com", quantity: int = 2, status: str = "pending") -> int:
        db = SessionLocal()
        t = db.get(Ticket, ticket_id)
        b = Booking(
            ticket_id=ticket_id,
            user_email=user_email,
            vendor_email=t.vendor_email,
            quantity=quantity,
            total_price=float(t.price) * quantity,
            status=status,
        )
        db.add(b)
        db.commit()
        booking_id = b.id
        db.close()
        return booking_id
    return _seed
