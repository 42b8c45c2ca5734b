from typing import Optional
from pydantic import BaseModel, Field


class UserLogin(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    photo_url: Optional[str] = Field(default=None, alias="photoURL")

    class Config:
        populate_by_name = True


class RoleChange(BaseModel):
    role: str = Field(pattern="^(vendor|admin)$")


def user_out(u) -> dict:
    return {
        "id": u.id,
        "email": u.email,
        "name": u.name,
        "photoURL": u.photo_url,
        "role": u.role,
        "isFraud": u.is_fraud,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
        "lastLoggedIn": u.last_logged_in.isoformat() if u.last_logged_in else None,
    }
