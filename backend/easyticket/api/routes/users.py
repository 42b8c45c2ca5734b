from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from easyticket.api.deps import get_current_email, get_current_user
from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import get_db
from easyticket.models.user import User
from easyticket.repositories.users import UserRepository
from easyticket.schemas.users import UserLogin, user_out

router = APIRouter()

@router.post("")
@router.post("/")
def save_user(payload: UserLogin, db: Session = Depends(get_db), email: str = Depends(get_current_email)):
    """Called by the front-end after every sign-in: create on first sight, else refresh last login."""
    user, created = UserRepository(DocumentGateway(db)).upsert_on_login(email, payload.name, payload.photo_url)
    db.commit()
    db.refresh(user)
    return {"created": created, **user_out(user)}

@router.get("/role")
def get_role(user: User = Depends(get_current_user)):
    return {"role": user.role}
