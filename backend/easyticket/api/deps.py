from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
import jwt

from easyticket.core.config import settings
from easyticket.core.security import verify_token
from easyticket.db.gateway import DocumentGateway
from easyticket.db.session import get_db
from easyticket.models.user import User
from easyticket.repositories.users import UserRepository
from easyticket.services.payment_provider import StripeProvider

bearer_scheme = HTTPBearer(auto_error=False)

def get_current_email(credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme)) -> str:
    """Verified email of the caller; tokens come from the external identity provider."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized access")
    try:
        return verify_token(credentials.credentials)
    except jwt.PyJWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

def get_current_user(email: str = Depends(get_current_email), db: Session = Depends(get_db)) -> User:
    user = UserRepository(DocumentGateway(db)).get_by_email(email)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return user

def require_roles(*allowed: str):
    """Role check against the stored user record, not token claims."""
    def checker(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return user
    return checker

def get_payment_provider(request: Request):
    """Provider client created at startup; tests swap it via dependency_overrides."""
    provider = getattr(request.app.state, "payment_provider", None)
    if provider is None:
        provider = StripeProvider(settings.stripe_secret_key, settings.stripe_webhook_secret, settings.stripe_timeout_seconds)
        request.app.state.payment_provider = provider
    return provider
