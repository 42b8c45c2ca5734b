from datetime import datetime
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError

from easyticket.db.gateway import LIKE_ESCAPE, DocumentGateway, contains_pattern
from easyticket.models.user import User


class UserRepository:
    def __init__(self, gateway: DocumentGateway):
        self.gw = gateway

    def get(self, user_id: int) -> User | None:
        return self.gw.get(User, user_id)

    def get_by_email(self, email: str) -> User | None:
        return self.gw.find_one(User, email=email.lower())

    def upsert_on_login(self, email: str, name: str | None = None, photo_url: str | None = None) -> tuple[User, bool]:
        """Create the user on first sight, otherwise only refresh last login.

        Returns (user, created). Role and fraud flag are never touched here.
        """
        email = email.lower()
        now = datetime.utcnow()
        existing = self.get_by_email(email)
        if existing is None:
            user = User(email=email, name=name, photo_url=photo_url, role="user", is_fraud=False, created_at=now, last_logged_in=now)
            try:
                self.gw.insert_one(user)
                return user, True
            except IntegrityError:
                # concurrent first login inserted the same email
                self.gw.db.rollback()
                existing = self.get_by_email(email)
                if existing is None:
                    raise
        self.gw.update_one(User, existing.id, values={"last_logged_in": now})
        return existing, False

    def list_users(self, page: int = 1, page_size: int = 25, search: str | None = None) -> tuple[list[User], int]:
        criteria = []
        if search:
            s = contains_pattern(search.strip().lower())
            criteria.append(
                func.lower(User.email).like(s, escape=LIKE_ESCAPE)
                | func.lower(func.coalesce(User.name, "")).like(s, escape=LIKE_ESCAPE)
            )
        total = self.gw.count_documents(User, *criteria)
        items = self.gw.find(User, *criteria, sort=(User.id.asc(),), skip=(page - 1) * page_size, limit=page_size)
        return items, total

    def set_role(self, user_id: int, role: str) -> int:
        return self.gw.update_one(User, user_id, values={"role": role})

    def mark_fraud(self, user_id: int) -> int:
        """Flag a vendor as fraud. Only vendors can be flagged; the flag is never cleared."""
        return self.gw.update_one(User, user_id, User.role == "vendor", values={"is_fraud": True})
