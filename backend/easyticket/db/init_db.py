from datetime import datetime
import logging
from easyticket.db.session import engine, SessionLocal
from easyticket.models import user  # noqa: F401
from easyticket.models import ticket  # noqa: F401
from easyticket.models import booking  # noqa: F401
from easyticket.models import transaction  # noqa: F401
from easyticket.models.base import Base
from easyticket.models.user import User
from easyticket.core.config import settings

logger = logging.getLogger(__name__)

def create_tables():
    Base.metadata.create_all(bind=engine)

def drop_tables():
    Base.metadata.drop_all(bind=engine)

def seed_demo_data():
    """Create tables (dev only) and make sure the seed admin account exists with role admin."""
    create_tables()
    admin_email = (settings.seed_admin_email or "").lower().strip()
    if not admin_email:
        return
    db = SessionLocal()
    try:
        admin = db.query(User).filter(User.email == admin_email).first()
        if not admin:
            now = datetime.utcnow()
            db.add(User(email=admin_email, name="Admin", role="admin", is_fraud=False, created_at=now, last_logged_in=now))
            db.commit()
            logger.info("Seeded admin account %s", admin_email)
        elif admin.role != "admin":
            admin.role = "admin"
            db.commit()
    finally:
        db.close()
