from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from easyticket.api.deps import require_roles
from easyticket.core.config import settings
from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import get_db
from easyticket.repositories.tickets import TicketRepository
from easyticket.repositories.users import UserRepository
from easyticket.schemas.tickets import ticket_out
from easyticket.schemas.users import RoleChange, user_out

router = APIRouter(dependencies=[Depends(require_roles("admin"))])

# user < vendor < admin; roles are only ever raised
ROLE_RANK = {"user": 0, "vendor": 1, "admin": 2}


@router.get("/tickets")
def list_all_tickets(db: Session = Depends(get_db)):
    return [ticket_out(t) for t in TicketRepository(DocumentGateway(db)).list_all()]


def _set_verification(ticket_id: int, verdict: str, db: Session) -> dict:
    repo = TicketRepository(DocumentGateway(db))
    if not repo.set_verification_status(ticket_id, verdict):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    db.commit()
    return {"status": "ok", "verificationStatus": verdict}


@router.patch("/tickets/{ticket_id}/approve")
def approve_ticket(ticket_id: int, db: Session = Depends(get_db)):
    return _set_verification(ticket_id, "approved", db)


@router.patch("/tickets/{ticket_id}/reject")
def reject_ticket(ticket_id: int, db: Session = Depends(get_db)):
    return _set_verification(ticket_id, "rejected", db)


@router.patch("/tickets/{ticket_id}/advertise")
def toggle_advertise(ticket_id: int, db: Session = Depends(get_db)):
    """Toggle the home-page advertisement slot of an approved ticket.

    At most ``ADVERTISE_LIMIT`` tickets are advertised at once.
    """
    repo = TicketRepository(DocumentGateway(db))
    t = repo.get(ticket_id)
    if not t:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    advertise = not t.is_advertised
    if advertise:
        if t.verification_status != "approved" or t.is_hidden:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only approved tickets can be advertised")
        if repo.count_advertised() >= settings.advertise_limit:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Cannot advertise more than {settings.advertise_limit} tickets")
    repo.set_advertised(ticket_id, advertise)
    db.commit()
    return {"status": "ok", "isAdvertised": advertise}


@router.get("/users")
def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(25, ge=1, le=200, alias="pageSize"),
    search: str | None = None,
    db: Session = Depends(get_db),
):
    """Paginated list of users, optionally filtered by email/name substring."""
    users, total = UserRepository(DocumentGateway(db)).list_users(page, page_size, search)
    pages = (total + page_size - 1) // page_size if total else 1
    return {"items": [user_out(u) for u in users], "total": total, "page": page, "pageSize": page_size, "pages": pages}


@router.patch("/users/{user_id}/role")
def change_role(user_id: int, payload: RoleChange, db: Session = Depends(get_db)):
    repo = UserRepository(DocumentGateway(db))
    u = repo.get(user_id)
    if not u:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if ROLE_RANK.get(u.role, 0) > ROLE_RANK[payload.role]:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"User is already {u.role}")
    repo.set_role(user_id, payload.role)
    db.commit()
    return {"status": "ok", "role": payload.role}


@router.patch("/users/{user_id}/fraud")
def mark_fraud(user_id: int, db: Session = Depends(get_db)):
    """Flag a vendor as fraud and hide all of their tickets from buyers."""
    repo = UserRepository(DocumentGateway(db))
    u = repo.get(user_id)
    if not u:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    if not repo.mark_fraud(user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only vendors can be marked as fraud")
    hidden = TicketRepository(DocumentGateway(db)).hide_vendor_tickets(u.email)
    db.commit()
    return {"status": "ok", "hiddenTickets": hidden}
