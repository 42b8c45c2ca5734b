from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import json
import logging

import stripe

from easyticket.services.errors import ProviderUnavailable, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class CheckoutSession:
    url: str
    session_id: str


@dataclass
class ProviderSession:
    """What settlement needs to know about a checkout session."""
    session_id: str
    payment_status: str
    payment_intent_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    amount_total: int | None = None  # smallest currency unit
    customer_email: str | None = None

    @property
    def transaction_id(self) -> str:
        # Sessions that captured money carry a payment intent; fall back to the session id
        return self.payment_intent_id or self.session_id

    @property
    def is_paid(self) -> bool:
        return self.payment_status == "paid"


def _to_dict(obj: Any) -> dict[str, Any]:
    if obj is None:
        return {}
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    return dict(obj)


class StripeProvider:
    """Payment provider client backed by Stripe Checkout.

    Each instance owns its ``StripeClient``: the HTTP client has a bounded
    timeout and SDK-level retries are disabled, so a slow provider surfaces
    as ProviderUnavailable instead of a hung request. No module-level
    ``stripe`` settings are touched.
    """

    def __init__(self, api_key: str | None, webhook_secret: str | None = None, timeout: float = 10.0):
        self.webhook_secret = webhook_secret
        self.client: stripe.StripeClient | None = None
        if api_key:
            self.client = stripe.StripeClient(
                api_key,
                http_client=stripe.RequestsClient(timeout=timeout),
                max_network_retries=0,
            )

    def _sessions(self):
        if self.client is None:
            raise ProviderUnavailable("Payment provider is not configured")
        return self.client.v1.checkout.sessions

    def create_checkout_session(
        self,
        line_item: dict[str, Any],
        customer_email: str | None,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> CheckoutSession:
        params: dict[str, Any] = {
            "mode": "payment",
            "line_items": [line_item],
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        }
        if customer_email:
            params["customer_email"] = customer_email
        sessions = self._sessions()
        try:
            session = sessions.create(params)
        except stripe.StripeError as e:
            logger.error("Checkout session creation failed: %s", e)
            raise ProviderUnavailable("Payment provider unavailable") from e
        return CheckoutSession(url=session.url, session_id=session.id)

    def retrieve_session(self, session_id: str) -> ProviderSession:
        sessions = self._sessions()
        try:
            session = sessions.retrieve(session_id)
        except stripe.InvalidRequestError as e:
            # unknown / malformed session id
            raise ValidationError("Invalid checkout session") from e
        except stripe.StripeError as e:
            logger.error("Checkout session %s retrieval failed: %s", session_id, e)
            raise ProviderUnavailable("Payment provider unavailable") from e
        intent = getattr(session, "payment_intent", None)
        if intent is not None and not isinstance(intent, str):
            intent = intent.id
        metadata = {k: str(v) for k, v in _to_dict(getattr(session, "metadata", None)).items()}
        return ProviderSession(
            session_id=session.id,
            payment_status=getattr(session, "payment_status", None) or "unpaid",
            payment_intent_id=intent,
            metadata=metadata,
            amount_total=getattr(session, "amount_total", None),
            customer_email=getattr(session, "customer_email", None),
        )

    def construct_event(self, payload: bytes, signature: str | None) -> dict[str, Any]:
        """Verify a webhook delivery and return the event as a plain dict."""
        if not self.webhook_secret:
            raise ValidationError("Webhook secret is not configured")
        try:
            body = payload.decode("utf-8") if isinstance(payload, bytes) else payload
            stripe.WebhookSignature.verify_header(
                body, signature or "", self.webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE
            )
            event = json.loads(body)
        except (ValueError, stripe.SignatureVerificationError) as e:
            logger.warning("Rejected webhook delivery: %s", e)
            raise ValidationError("Invalid webhook signature") from e
        if not isinstance(event, dict):
            raise ValidationError("Invalid webhook payload")
        return event
