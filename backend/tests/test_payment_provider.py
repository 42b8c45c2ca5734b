import hashlib
import hmac
import json
import time

import pytest
import stripe

from easyticket.services.errors import ProviderUnavailable, ValidationError
from easyticket.services.payment_provider import StripeProvider

WEBHOOK_SECRET = "whsec_test_secret"


@pytest.fixture
def stripe_provider():
    return StripeProvider("sk_test_123", webhook_secret=WEBHOOK_SECRET, timeout=3.0)


@pytest.fixture
def sessions_service(stripe_provider, monkeypatch):
    """Route the SDK's checkout session calls to in-test functions."""
    service_cls = type(stripe_provider.client.v1.checkout.sessions)
    calls = {}

    def install(retrieve=None, create=None):
        if retrieve is not None:
            def fake_retrieve(self, session, params=None, options=None):
                calls.setdefault("retrieve", []).append(session)
                return retrieve(session)
            monkeypatch.setattr(service_cls, "retrieve", fake_retrieve)
        if create is not None:
            def fake_create(self, params=None, options=None):
                calls.setdefault("create", []).append(params)
                return create(params)
            monkeypatch.setattr(service_cls, "create", fake_create)
        return calls
    return install


def stripe_session(**values):
    data = {"id": "cs_test_1", "object": "checkout.session", "payment_status": "paid", "metadata": {}}
    data.update(values)
    return stripe.checkout.Session.construct_from(data, "sk_test_123")


def sign(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    digest = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def test_client_is_per_instance():
    retries_before = stripe.max_network_retries
    client_before = stripe.default_http_client

    provider = StripeProvider("sk_test_abc", timeout=2.5)

    assert isinstance(provider.client, stripe.StripeClient)
    assert stripe.max_network_retries == retries_before
    assert stripe.default_http_client is client_before


def test_missing_key_is_unavailable():
    provider = StripeProvider(None)
    with pytest.raises(ProviderUnavailable):
        provider.retrieve_session("cs_test_1")


def test_retrieve_maps_intent_id_and_metadata(stripe_provider, sessions_service):
    calls = sessions_service(retrieve=lambda sid: stripe_session(
        id=sid,
        payment_intent="pi_123",
        amount_total=4000,
        customer_email="buyer@example.com",
        metadata={"bookingId": "7", "bookingQty": "2"},
    ))

    session = stripe_provider.retrieve_session("cs_test_9")

    assert calls["retrieve"] == ["cs_test_9"]
    assert session.session_id == "cs_test_9"
    assert session.is_paid
    assert session.transaction_id == "pi_123"
    assert session.metadata == {"bookingId": "7", "bookingQty": "2"}
    assert session.amount_total == 4000
    assert session.customer_email == "buyer@example.com"


def test_retrieve_maps_expanded_intent(stripe_provider, sessions_service):
    sessions_service(retrieve=lambda sid: stripe_session(
        payment_intent={"id": "pi_expanded", "object": "payment_intent"},
    ))

    assert stripe_provider.retrieve_session("cs_test_1").transaction_id == "pi_expanded"


def test_retrieve_without_intent_uses_session_id(stripe_provider, sessions_service):
    sessions_service(retrieve=lambda sid: stripe_session(id=sid, payment_intent=None, payment_status="unpaid"))

    session = stripe_provider.retrieve_session("cs_test_5")

    assert session.transaction_id == "cs_test_5"
    assert not session.is_paid


def test_retrieve_error_mapping(stripe_provider, sessions_service):
    def unknown(sid):
        raise stripe.InvalidRequestError(f"No such checkout.session: {sid}", "id")

    sessions_service(retrieve=unknown)
    with pytest.raises(ValidationError) as exc:
        stripe_provider.retrieve_session("cs_missing")
    assert exc.value.status_code == 400

    def offline(sid):
        raise stripe.APIConnectionError("Request timed out")

    sessions_service(retrieve=offline)
    with pytest.raises(ProviderUnavailable) as exc:
        stripe_provider.retrieve_session("cs_test_1")
    assert exc.value.status_code == 500


def test_create_checkout_session(stripe_provider, sessions_service):
    calls = sessions_service(create=lambda params: stripe_session(
        id="cs_new", url="https://checkout.stripe.com/c/pay/cs_new", payment_status="unpaid",
    ))
    line_item = {"price_data": {"currency": "bdt", "product_data": {"name": "Bus"}, "unit_amount": 4000}, "quantity": 1}

    result = stripe_provider.create_checkout_session(
        line_item=line_item,
        customer_email="buyer@example.com",
        success_url="http://localhost:5173/payment-success?session_id={CHECKOUT_SESSION_ID}",
        cancel_url="http://localhost:5173/dashboard/my-booked-tickets",
        metadata={"bookingId": "1", "bookingQty": "2"},
    )

    assert result.url == "https://checkout.stripe.com/c/pay/cs_new"
    assert result.session_id == "cs_new"
    params = calls["create"][0]
    assert params["mode"] == "payment"
    assert params["line_items"] == [line_item]
    assert params["customer_email"] == "buyer@example.com"
    assert params["metadata"] == {"bookingId": "1", "bookingQty": "2"}


def test_create_failure_is_unavailable(stripe_provider, sessions_service):
    def down(params):
        raise stripe.APIError("Internal error")

    sessions_service(create=down)
    with pytest.raises(ProviderUnavailable):
        stripe_provider.create_checkout_session({}, None, "http://a", "http://b", {})


def test_webhook_signature_verification(stripe_provider):
    payload = json.dumps({"id": "evt_1", "type": "checkout.session.completed", "data": {"object": {"id": "cs_test_1"}}})

    event = stripe_provider.construct_event(payload.encode(), sign(payload))
    assert event["type"] == "checkout.session.completed"
    assert event["data"]["object"]["id"] == "cs_test_1"

    with pytest.raises(ValidationError):
        stripe_provider.construct_event(payload.encode(), sign(payload, secret="whsec_forged"))
    with pytest.raises(ValidationError):
        stripe_provider.construct_event(payload.encode(), sign(payload, timestamp=int(time.time()) - 3600))
    with pytest.raises(ValidationError):
        stripe_provider.construct_event(payload.encode(), None)


def test_webhook_needs_secret():
    with pytest.raises(ValidationError):
        StripeProvider("sk_test_123").construct_event(b"{}", sign("{}"))
