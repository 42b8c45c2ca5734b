from typing import Any
import jwt

from easyticket.core.config import settings


def decode_access_token(token: str) -> dict[str, Any]:
    """Decode an identity token issued by the external identity provider.
    Raises jwt.PyJWTError if invalid and returns the payload as a dict.
    """
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    return payload


def verify_token(token: str) -> str:
    """Return the verified email carried by the token (``email`` claim, else ``sub``)."""
    payload = decode_access_token(token)
    email = payload.get("email") or payload.get("sub")
    if not email or not isinstance(email, str):
        raise jwt.InvalidTokenError("Missing email claim")
    return email.lower().strip()
