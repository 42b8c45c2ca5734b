import pytest
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import SessionLocal
from easyticket.models.ticket import Ticket
from easyticket.models.transaction import Transaction
from easyticket.repositories.tickets import TicketRepository


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


def test_guarded_update_only_matches_when_guard_holds(db, seed_ticket):
    ticket_id = seed_ticket(quantity=3)
    gw = DocumentGateway(db)

    assert gw.update_one(Ticket, ticket_id, Ticket.quantity >= 2, increments={"quantity": -2}) == 1
    assert gw.update_one(Ticket, ticket_id, Ticket.quantity >= 2, increments={"quantity": -2}) == 0
    db.commit()
    assert gw.get(Ticket, ticket_id).quantity == 1


def test_decrement_never_goes_below_zero(db, seed_ticket):
    ticket_id = seed_ticket(quantity=2)
    repo = TicketRepository(DocumentGateway(db))

    assert repo.decrement_quantity(ticket_id, 2) is True
    assert repo.decrement_quantity(ticket_id, 1) is False
    db.commit()
    assert repo.get(ticket_id).quantity == 0


def test_unique_provider_transaction_id(db):
    gw = DocumentGateway(db)
    fields = dict(provider_transaction_id="pi_dup", ticket_id=1, user_email="a@example.com", vendor_email="v@example.com", amount=10, quantity=1)
    gw.insert_one(Transaction(**fields))
    db.commit()
    with pytest.raises(IntegrityError):
        gw.insert_one(Transaction(**fields))
    db.rollback()
    assert gw.count_documents(Transaction, provider_transaction_id="pi_dup") == 1


def test_update_many_count_and_aggregate(db, seed_ticket):
    for qty in (1, 2, 3):
        seed_ticket(quantity=qty)
    seed_ticket(vendor_email="other@example.com", quantity=10)
    gw = DocumentGateway(db)

    assert gw.update_many(Ticket, values={"is_hidden": True}, vendor_email="vendor@example.com") == 3
    db.commit()
    assert gw.count_documents(Ticket, is_hidden=True) == 3
    (total,) = gw.aggregate(Ticket, func.sum(Ticket.quantity), vendor_email="vendor@example.com")
    assert total == 6
    with pytest.raises(ValueError):
        gw.update_many(Ticket, vendor_email="vendor@example.com")


def test_find_sort_skip_limit_and_delete(db, seed_ticket):
    ids = [seed_ticket(price=p) for p in (5, 15, 10)]
    gw = DocumentGateway(db)

    page = gw.find(Ticket, sort=(Ticket.price.asc(),), skip=1, limit=1)
    assert [float(t.price) for t in page] == [10.0]
    assert gw.delete_one(Ticket, ids[0]) == 1
    assert gw.delete_one(Ticket, ids[0]) == 0
    db.commit()
    assert gw.count_documents(Ticket) == 2
