from fastapi import APIRouter
from sqlalchemy import text

from easyticket.db.session import engine

router = APIRouter()

@router.get("/")
def health():
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ok"}
