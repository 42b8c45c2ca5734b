from pydantic_settings import BaseSettings
from pydantic import Field
from typing import List, Optional
from pathlib import Path

class Settings(BaseSettings):
    app_name: str = Field(default="EasyTicket API", alias="APP_NAME")
    env: str = Field(default="dev", alias="ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    # Identity tokens are issued by the external identity provider and signed with this key
    secret_key: str = Field(default="devsecret", alias="SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    database_url: str | None = Field(default=None, alias="DATABASE_URL")
    cors_origins_raw: Optional[str] = Field(default=None, alias="CORS_ORIGINS", description="Comma or space separated list of allowed CORS origins")
    # Front-end base URL used for checkout redirects
    client_url: str = Field(default="http://localhost:5173", alias="CLIENT_URL")
    stripe_secret_key: Optional[str] = Field(default=None, alias="STRIPE_SECRET_KEY")
    stripe_webhook_secret: Optional[str] = Field(default=None, alias="STRIPE_WEBHOOK_SECRET")
    stripe_timeout_seconds: float = Field(default=10.0, alias="STRIPE_TIMEOUT_SECONDS")
    currency: str = Field(default="bdt", alias="CURRENCY")
    advertise_limit: int = Field(default=6, alias="ADVERTISE_LIMIT")
    # Seed admin (dev/demo convenience); the account is matched by email on first login
    seed_admin_email: Optional[str] = Field(default=None, alias="SEED_ADMIN_EMAIL")

    class Config:
        # Load env from backend/.env regardless of CWD
        env_file = str(Path(__file__).resolve().parents[2] / ".env")
        case_sensitive = False

    def _parse_list(self, v: Optional[str]) -> List[str]:
        if v is None:
            return []
        s = v.strip()
        if not s:
            return []
        if s.startswith("[") and s.endswith("]"):
            try:
                import json
                loaded = json.loads(s)
                if isinstance(loaded, list):
                    return [str(e).strip() for e in loaded if str(e).strip()]
            except ValueError:
                pass
        return [e.strip() for e in s.replace(" ", ",").split(",") if e.strip()]

    @property
    def cors_origins(self) -> List[str]:
        items = self._parse_list(self.cors_origins_raw)
        if not items:
            return ["http://localhost:5173", "http://127.0.0.1:5173"]
        return items

    @property
    def success_url(self) -> str:
        # {CHECKOUT_SESSION_ID} is substituted by Stripe on redirect
        return f"{self.client_url.rstrip('/')}/payment-success?session_id={{CHECKOUT_SESSION_ID}}"

    @property
    def cancel_url(self) -> str:
        return f"{self.client_url.rstrip('/')}/dashboard/my-booked-tickets"

settings = Settings()  # type: ignore
