import json
import re
from datetime import timedelta

from src.jangatub.core.config import settings
from src.jangatub.models.base import utcnow
from src.jangatub.schemas.enums import SubscriptionPlan, SubscriptionStatus
from src.jangatub.services.payment_service import WaveCheckoutSession, WaveClient, get_wave_client, sign_payload
from src.jangatub.main import app
from tests.utils import auth_headers, get_user, make_subscription, make_user, subscriptions_of


def activate(client, user, payment_ref, plan="PREMIUM_MONTHLY"):
    return client.post(
        "/api/premium/activate",
        json={"plan": plan, "provider": "WAVE", "paymentRef": payment_ref},
        headers=auth_headers(user),
    )


def active_rows(user_id):
    return [s for s in subscriptions_of(user_id) if s.status == SubscriptionStatus.ACTIVE]


def test_activate_sets_flag_and_end_date(client, student):
    response = activate(client, student, "WAVE-001", plan="PREMIUM_ANNUAL")
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["plan"] == "PREMIUM_ANNUAL"

    assert get_user(student.id).is_premium is True
    [row] = active_rows(student.id)
    assert row.tx_ref == "WAVE-001"
    assert timedelta(days=364) < row.end_at - row.start_at <= timedelta(days=365)


def test_activation_keeps_a_single_active_subscription(client, student):
    assert activate(client, student, "WAVE-001").status_code == 200
    assert activate(client, student, "WAVE-002", plan="PREMIUM_ANNUAL").status_code == 200

    rows = subscriptions_of(student.id)
    assert len(rows) == 2
    [active] = active_rows(student.id)
    assert active.tx_ref == "WAVE-002"
    assert [r.status for r in rows if r.tx_ref == "WAVE-001"] == [SubscriptionStatus.CANCELLED]


def test_subscription_history(client, student):
    activate(client, student, "WAVE-001")
    activate(client, student, "WAVE-002")

    response = client.get("/api/premium/subscriptions", headers=auth_headers(student))
    assert response.status_code == 200
    assert sorted(s["status"] for s in response.json()) == ["ACTIVE", "CANCELLED"]


def test_reused_payment_reference_is_rejected(client, student):
    other = make_user("other@example.com")
    assert activate(client, other, "WAVE-001").status_code == 200

    response = activate(client, student, "WAVE-001")
    assert response.status_code == 409
    assert response.json() == {"error": "This payment reference has already been used"}
    assert subscriptions_of(student.id) == []
    assert get_user(student.id).is_premium is False


def test_admin_activate_plan_cannot_be_bought(client, student):
    response = activate(client, student, "WAVE-001", plan="ADMIN_ACTIVATE")
    assert response.status_code == 400


def test_admin_override_disable(client, admin):
    user = make_user("premium@example.com", is_premium=True)
    make_subscription(user, tx_ref="WAVE-009")

    response = client.patch(
        f"/api/admin/users/{user.id}/premium", json={"isPremium": False}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json() == {"success": True, "userId": user.id, "isPremium": False}

    rows = subscriptions_of(user.id)
    assert len(rows) == 1
    assert rows[0].status == SubscriptionStatus.CANCELLED
    assert get_user(user.id).is_premium is False


def test_admin_override_enable(client, admin, student):
    make_subscription(student, tx_ref="WAVE-010")

    response = client.patch(
        f"/api/admin/users/{student.id}/premium", json={"isPremium": True}, headers=auth_headers(admin)
    )
    assert response.status_code == 200

    [active] = active_rows(student.id)
    assert active.plan == SubscriptionPlan.ADMIN_ACTIVATE
    assert active.end_at is None
    assert active.provider is None
    assert get_user(student.id).is_premium is True


def test_admin_override_unknown_user(client, admin):
    response = client.patch("/api/admin/users/missing/premium", json={"isPremium": True}, headers=auth_headers(admin))
    assert response.status_code == 404


def test_expired_subscription_is_reconciled(client):
    user = make_user("expired@example.com", is_premium=True)
    make_subscription(user, tx_ref="WAVE-011", end_at=utcnow() - timedelta(days=1))

    response = client.get("/api/users/me", headers=auth_headers(user))
    assert response.status_code == 200
    assert response.json()["entitlement"]["isPremium"] is False
    assert get_user(user.id).is_premium is False


def test_checkout_rejected_for_premium_users(client):
    user = make_user("premium@example.com", is_premium=True)
    make_subscription(user, tx_ref="WAVE-012")
    response = client.post("/api/payment/checkout", json={"plan": "PREMIUM_MONTHLY"}, headers=auth_headers(user))
    assert response.status_code == 400


class FakeWave(WaveClient):
    def __init__(self):
        super().__init__(api_key="wave-test")
        self.requests = []

    async def create_checkout_session(self, *, amount, client_reference):
        self.requests.append({"amount": amount, "client_reference": client_reference})
        return WaveCheckoutSession(id="cos-123", wave_launch_url="https://pay.wave.com/c/cos-123")


def test_checkout_records_pending_subscription(client, student):
    wave = FakeWave()
    app.dependency_overrides[get_wave_client] = lambda: wave

    response = client.post("/api/payment/checkout", json={"plan": "PREMIUM_MONTHLY"}, headers=auth_headers(student))
    assert response.status_code == 200
    assert response.json() == {
        "checkoutUrl": "https://pay.wave.com/c/cos-123",
        "sessionId": "cos-123",
        "plan": "PREMIUM_MONTHLY",
        "amount": 2500,
    }

    [request] = wave.requests
    assert request["amount"] == 2500
    assert re.fullmatch(rf"{re.escape(student.id)}_PREMIUM_MONTHLY_\d+", request["client_reference"])

    [pending] = subscriptions_of(student.id)
    assert pending.status == SubscriptionStatus.PENDING
    assert pending.tx_ref == "cos-123"
    assert pending.plan == SubscriptionPlan.MONTHLY
    assert get_user(student.id).is_premium is False


def test_checkout_unavailable_without_wave(client, student):
    app.dependency_overrides[get_wave_client] = lambda: WaveClient(api_key="")
    response = client.post("/api/payment/checkout", json={"plan": "PREMIUM_MONTHLY"}, headers=auth_headers(student))
    assert response.status_code == 503


# Webhook

def completed_event(session_id, payment_status="succeeded"):
    return json.dumps({
        "id": "evt_1",
        "type": "checkout.session.completed",
        "data": {"id": session_id, "payment_status": payment_status, "checkout_status": "complete"},
    }).encode()


def post_webhook(client, payload, secret="whsec_test"):
    return client.post(
        "/api/payment/webhook",
        content=payload,
        headers={"Wave-Signature": sign_payload(payload, secret), "Content-Type": "application/json"},
    )


def test_webhook_rejects_bad_signature(client, monkeypatch, student):
    monkeypatch.setattr(settings, "WAVE_WEBHOOK_SECRET", "whsec_test")
    make_subscription(student, tx_ref="cos-1", status=SubscriptionStatus.PENDING)

    response = post_webhook(client, completed_event("cos-1"), secret="wrong")
    assert response.status_code == 401
    assert get_user(student.id).is_premium is False


def test_webhook_promotes_pending_and_is_idempotent(client, monkeypatch, student):
    monkeypatch.setattr(settings, "WAVE_WEBHOOK_SECRET", "whsec_test")
    app.dependency_overrides[get_wave_client] = lambda: WaveClient(api_key="")
    make_subscription(student, tx_ref="cos-1", status=SubscriptionStatus.PENDING)

    first = post_webhook(client, completed_event("cos-1"))
    assert first.status_code == 200
    assert first.json()["activated"] is True
    assert first.json()["userId"] == student.id

    replay = post_webhook(client, completed_event("cos-1"))
    assert replay.status_code == 200
    assert replay.json() == {"received": True, "activated": True, "idempotent": True}

    [active] = active_rows(student.id)
    assert active.tx_ref == "cos-1"
    assert len(subscriptions_of(student.id)) == 1
    assert get_user(student.id).is_premium is True


def test_webhook_failed_payment_cancels_pending(client, monkeypatch, student):
    monkeypatch.setattr(settings, "WAVE_WEBHOOK_SECRET", "whsec_test")
    make_subscription(student, tx_ref="cos-2", status=SubscriptionStatus.PENDING)

    response = post_webhook(client, completed_event("cos-2", payment_status="failed"))
    assert response.status_code == 200
    assert response.json()["activated"] is False
    assert subscriptions_of(student.id)[0].status == SubscriptionStatus.CANCELLED


def test_webhook_ignores_other_events(client, monkeypatch):
    monkeypatch.setattr(settings, "WAVE_WEBHOOK_SECRET", "whsec_test")
    payload = json.dumps({"type": "merchant.payment_received", "data": {}}).encode()
    response = post_webhook(client, payload)
    assert response.status_code == 200
    assert response.json() == {"received": True, "ignored": True}


def test_webhook_unknown_session(client, monkeypatch):
    monkeypatch.setattr(settings, "WAVE_WEBHOOK_SECRET", "whsec_test")
    app.dependency_overrides[get_wave_client] = lambda: WaveClient(api_key="")
    response = post_webhook(client, completed_event("cos-missing"))
    assert response.status_code == 404


def test_webhook_replaces_existing_active_subscription(client, monkeypatch, student):
    monkeypatch.setattr(settings, "WAVE_WEBHOOK_SECRET", "whsec_test")
    app.dependency_overrides[get_wave_client] = lambda: WaveClient(api_key="")
    previous = make_subscription(student, tx_ref="WAVE-old")
    make_subscription(student, tx_ref="cos-3", status=SubscriptionStatus.PENDING)

    response = post_webhook(client, completed_event("cos-3"))
    assert response.status_code == 200
    assert response.json()["activated"] is True

    [active] = active_rows(student.id)
    assert active.tx_ref == "cos-3"
    statuses = {row.tx_ref: row.status for row in subscriptions_of(student.id)}
    assert statuses == {"WAVE-old": SubscriptionStatus.CANCELLED, "cos-3": SubscriptionStatus.ACTIVE}
    assert previous.id != active.id
