from fastapi.testclient import TestClient

from easyticket.db.session import SessionLocal
from easyticket.main import app
from easyticket.models.transaction import Transaction

client = TestClient(app)


def test_revenue_matches_transaction_log(provider, make_user, auth, seed_ticket, seed_booking):
    make_user("vendor@example.com", role="vendor")
    bus = seed_ticket(quantity=10, price=20.0)
    train = seed_ticket(quantity=10, price=12.75)
    seed_ticket(status="pending")
    foreign = seed_ticket(vendor_email="other@example.com", quantity=10)

    b1 = seed_booking(bus, quantity=2)
    b2 = seed_booking(train, quantity=2)
    b3 = seed_booking(foreign, quantity=1)
    unpaid = seed_booking(bus, quantity=4)
    provider.pay("cs_1", b1, 2, amount_total=4000)
    provider.pay("cs_2", b2, 2, amount_total=2550)
    provider.pay("cs_3", b3, 1, amount_total=2000)
    for session_id in ("cs_1", "cs_2", "cs_3", "cs_1"):
        assert client.post("/payment-success", json={"sessionId": session_id}).status_code == 200

    r = client.get("/vendor/revenue", headers=auth("vendor@example.com"))
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["totalRevenue"] == 65.5
    assert data["totalTicketsSold"] == 4
    assert data["totalTicketsAdded"] == 3
    assert {t["bookingId"] for t in data["transactions"]} == {b1, b2}
    assert unpaid not in {t["bookingId"] for t in data["transactions"]}

    db = SessionLocal()
    rows = db.query(Transaction).filter(Transaction.vendor_email == "vendor@example.com").all()
    db.close()
    assert sum(float(t.amount) for t in rows) == data["totalRevenue"]
    assert sum(t.quantity for t in rows) == data["totalTicketsSold"]


def test_revenue_for_vendor_without_sales(make_user, auth):
    make_user("vendor@example.com", role="vendor")
    r = client.get("/vendor/revenue", headers=auth("vendor@example.com"))
    assert r.json() == {"totalRevenue": 0.0, "totalTicketsSold": 0, "totalTicketsAdded": 0, "transactions": []}
    assert client.get("/vendor/revenue", headers=auth("nobody@example.com")).status_code == 401
