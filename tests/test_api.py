# =============================================================================
# tests/test_api.py - HTTP Endpoint Tests
# =============================================================================
# Exercises the FastAPI app with TestClient. Stripe, storage and the task
# queue are replaced; Stripe webhook signatures are computed for real.
#
# Run with: pytest tests/test_api.py -v
# =============================================================================

import base64
import hashlib
import hmac
import json
import time
from types import SimpleNamespace

import pytest
import stripe
from fastapi.testclient import TestClient

import workers.celery_app
import workers.tasks
from app.config import settings
from app.dependencies import get_storage
from app.main import app
from app.routers import webhooks

WEBHOOK_SECRET = "whsec_test_secret"


def stripe_signature(payload: bytes, secret: str = WEBHOOK_SECRET) -> str:
    """Build a Stripe-Signature header for payload."""
    timestamp = int(time.time())
    signed = f"{timestamp}.{payload.decode('utf-8')}".encode("utf-8")
    digest = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def checkout_event(metadata: dict) -> bytes:
    return json.dumps({
        "id": "evt_test",
        "object": "event",
        "type": "checkout.session.completed",
        "data": {"object": {"id": "cs_test", "object": "checkout.session", "metadata": metadata}},
    }).encode("utf-8")


def basic_auth(user: str = "admin", password: str = "s3cret") -> dict:
    token = base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


class FakeStorageApi:
    """Storage stand-in for the signing and listing endpoints."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = []

    def create_signed_upload_url(self, bucket, key):
        self.calls.append(("upload", bucket, key))
        if self.fail:
            raise RuntimeError("storage down")
        return {"url": f"https://storage.test/{bucket}/{key}?token=abc", "token": "abc"}

    def create_signed_url(self, bucket, key, expires_in=None):
        self.calls.append(("download", bucket, key, expires_in))
        if self.fail:
            raise RuntimeError("storage down")
        return f"https://storage.test/{bucket}/{key}?sig=1"

    def list_files(self, bucket, prefix):
        self.calls.append(("list", bucket, prefix))
        if self.fail:
            raise RuntimeError("storage down")
        return [{"key": f"{prefix}/a.pdf", "size": 10, "lastModified": "2024-06-10T00:00:00Z"}]


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def storage_api():
    fake = FakeStorageApi()
    app.dependency_overrides[get_storage] = lambda: fake
    return fake


@pytest.fixture
def dispatched(monkeypatch):
    """Capture render dispatches instead of queueing them."""
    calls = []
    monkeypatch.setattr(webhooks, "dispatch_render", lambda request, background_tasks: calls.append(request))
    return calls


# =============================================================================
# Health
# =============================================================================

class TestHealth:
    """Tests for health endpoints."""

    def test_health(self, client):
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_liveness(self, client):
        assert client.get("/api/v1/health/live").json()["status"] == "alive"

    def test_root(self, client):
        assert client.get("/").json()["health"] == "/api/v1/health"


# =============================================================================
# Webhook
# =============================================================================

class TestStripeWebhook:
    """Tests for POST /webhooks/stripe."""

    def test_missing_signature(self, client, dispatched):
        response = client.post("/webhooks/stripe", content=b"{}")

        assert response.status_code == 400
        assert response.text == "missing signature or secret"

    def test_missing_secret(self, client, dispatched, monkeypatch):
        monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", "")
        payload = checkout_event({})

        response = client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload)},
        )

        assert response.status_code == 400
        assert response.text == "missing signature or secret"

    def test_bad_signature(self, client, dispatched):
        payload = checkout_event({})

        response = client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload, secret="whsec_wrong")},
        )

        assert response.status_code == 400
        assert response.text.startswith("Webhook Error:")
        assert dispatched == []

    def test_completed_checkout_dispatches_render(self, client, dispatched, sample_metadata):
        payload = checkout_event(sample_metadata)

        response = client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload)},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert len(dispatched) == 1
        request = dispatched[0]
        assert request.bucket == "print-orders"
        assert request.object_key == "raw/1718000000000_photo.jpg"
        assert request.bleed_mm == settings.DEFAULT_BLEED_MM

    def test_missing_metadata_is_acknowledged(self, client, dispatched, caplog):
        payload = checkout_event({"objectKey": "raw/1_a.jpg"})

        with caplog.at_level("WARNING"):
            response = client.post(
                "/webhooks/stripe",
                content=payload,
                headers={"stripe-signature": stripe_signature(payload)},
            )

        assert response.json() == {"received": True}
        assert dispatched == []
        assert "Missing metadata for render" in caplog.text

    def test_other_events_are_ignored(self, client, dispatched):
        payload = json.dumps({"id": "evt_2", "object": "event", "type": "charge.refunded",
                              "data": {"object": {}}}).encode("utf-8")

        response = client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload)},
        )

        assert response.json() == {"received": True}
        assert dispatched == []

    def test_celery_dispatch(self, client, sample_metadata, monkeypatch):
        queued = []
        monkeypatch.setattr(
            workers.tasks.render_order,
            "delay",
            lambda payload: queued.append(payload) or SimpleNamespace(id="task-1"),
        )
        payload = checkout_event(sample_metadata)

        response = client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload)},
        )

        assert response.json() == {"received": True}
        assert queued[0]["object_key"] == "raw/1718000000000_photo.jpg"
        assert queued[0]["size"] == {"width_mm": 100.0, "height_mm": 150.0}

    def test_inline_dispatch(self, client, sample_metadata, monkeypatch):
        ran = []
        monkeypatch.setattr(settings, "RENDER_DISPATCH", "inline")
        monkeypatch.setattr(workers.tasks, "run_render", lambda payload: ran.append(payload))
        payload = checkout_event(sample_metadata)

        response = client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload)},
        )

        assert response.json() == {"received": True}
        assert ran[0]["bucket"] == "print-orders"

    def test_dispatch_failure_still_acknowledged(self, client, sample_metadata, monkeypatch):
        def broken_delay(payload):
            raise ConnectionError("redis unavailable")

        monkeypatch.setattr(workers.tasks.render_order, "delay", broken_delay)
        payload = checkout_event(sample_metadata)

        response = client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": stripe_signature(payload)},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}


# =============================================================================
# Assets
# =============================================================================

class TestAssetsSign:
    """Tests for POST /api/v1/assets/sign."""

    def test_signs_upload_under_raw_prefix(self, client, storage_api):
        response = client.post(
            "/api/v1/assets/sign",
            json={"filename": "photo.jpg", "contentType": "image/jpeg"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["objectKey"].startswith("raw/")
        assert body["objectKey"].endswith("_photo.jpg")
        timestamp = body["objectKey"][len("raw/"):-len("_photo.jpg")]
        assert timestamp.isdigit()
        assert body["url"].startswith("https://storage.test/print-orders/raw/")
        assert storage_api.calls[0][1] == "print-orders"

    def test_missing_fields(self, client, storage_api):
        response = client.post("/api/v1/assets/sign", json={"filename": "photo.jpg"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_storage_failure(self, client):
        app.dependency_overrides[get_storage] = lambda: FakeStorageApi(fail=True)

        response = client.post(
            "/api/v1/assets/sign",
            json={"filename": "photo.jpg", "contentType": "image/jpeg"},
        )

        assert response.status_code == 500
        assert response.json()["code"] == "SIGNING_FAILED"


# =============================================================================
# Checkout
# =============================================================================

class TestCheckout:
    """Tests for POST /api/v1/checkout/session."""

    @pytest.fixture
    def stripe_calls(self, monkeypatch):
        calls = []

        def fake_create(**kwargs):
            calls.append(kwargs)
            return SimpleNamespace(url="https://checkout.stripe.test/cs_1")

        monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
        return calls

    def test_creates_session_with_render_metadata(self, client, stripe_calls):
        item = {
            "objectKey": "raw/1_photo.jpg",
            "size": "10x15",
            "wmm": 100,
            "hmm": 150,
            "cropArea": {"x": 1, "y": 2, "width": 3, "height": 4},
            "product": "Photo print",
            "qty": 2,
            "price": 4.99,
            "currency": "EUR",
        }

        response = client.post("/api/v1/checkout/session", json={"items": [item]})

        assert response.status_code == 200
        assert response.json() == {"url": "https://checkout.stripe.test/cs_1"}
        params = stripe_calls[0]
        assert params["mode"] == "payment"
        assert params["client_reference_id"].startswith("ORDER-")
        assert params["metadata"]["objectKey"] == "raw/1_photo.jpg"
        assert params["metadata"]["wmm"] == "100"
        assert json.loads(params["metadata"]["cropArea"]) == item["cropArea"]
        line = params["line_items"][0]
        assert line["quantity"] == 2
        assert line["price_data"]["unit_amount"] == 499
        assert line["price_data"]["currency"] == "eur"
        assert line["price_data"]["product_data"]["name"] == "Photo print (10x15)"

    def test_only_first_item_is_used(self, client, stripe_calls):
        items = [
            {"objectKey": "raw/1_first.jpg", "wmm": 100, "hmm": 150, "price": 1},
            {"objectKey": "raw/2_second.jpg", "wmm": 100, "hmm": 150, "price": 1},
        ]

        client.post("/api/v1/checkout/session", json={"items": items})

        assert stripe_calls[0]["metadata"]["objectKey"] == "raw/1_first.jpg"

    def test_no_items(self, client, stripe_calls):
        response = client.post("/api/v1/checkout/session", json={"items": []})

        assert response.status_code == 400
        assert response.json()["detail"] == "no_items"
        assert stripe_calls == []

    def test_stripe_failure(self, client, monkeypatch):
        def failing_create(**kwargs):
            raise stripe.StripeError("card declined")

        monkeypatch.setattr(stripe.checkout.Session, "create", failing_create)

        response = client.post(
            "/api/v1/checkout/session",
            json={"items": [{"objectKey": "raw/1_a.jpg", "price": 1}]},
        )

        assert response.status_code == 500
        assert response.json()["code"] == "STRIPE_FAILED"


# =============================================================================
# Admin
# =============================================================================

class TestAdmin:
    """Tests for /api/v1/admin endpoints."""

    def test_requires_credentials(self, client, storage_api):
        response = client.get("/api/v1/admin/files")

        assert response.status_code == 401
        assert response.headers["www-authenticate"] == 'Basic realm="Admin"'
        assert storage_api.calls == []

    def test_wrong_password(self, client, storage_api):
        response = client.get("/api/v1/admin/files", headers=basic_auth(password="nope"))
        assert response.status_code == 401

    def test_denied_when_not_configured(self, client, storage_api, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_USER", "")
        monkeypatch.setattr(settings, "ADMIN_PASS", "")

        response = client.get("/api/v1/admin/files", headers=basic_auth("", ""))

        assert response.status_code == 401

    def test_lists_both_destinations(self, client, storage_api):
        response = client.get("/api/v1/admin/files", headers=basic_auth())

        assert response.status_code == 200
        body = response.json()
        assert body["prod"][0]["key"] == "prod/a.pdf"
        assert body["prod"][0]["lastModified"] == "2024-06-10T00:00:00Z"
        assert body["hotfolder"][0]["key"] == "hotfolder/a.pdf"

    def test_listing_failure(self, client):
        app.dependency_overrides[get_storage] = lambda: FakeStorageApi(fail=True)

        response = client.get("/api/v1/admin/files", headers=basic_auth())

        assert response.status_code == 500
        assert response.json()["code"] == "LIST_FAILED"

    def test_sign_download(self, client, storage_api):
        response = client.get(
            "/api/v1/admin/sign",
            params={"key": "prod/a.pdf"},
            headers=basic_auth(),
        )

        assert response.status_code == 200
        assert response.json()["url"].startswith("https://storage.test/print-orders/prod/a.pdf")
        assert storage_api.calls[0] == ("download", "print-orders", "prod/a.pdf", 300)

    def test_sign_without_key(self, client, storage_api):
        response = client.get("/api/v1/admin/sign", headers=basic_auth())

        assert response.status_code == 400
        assert response.json()["detail"] == "missing key"


# =============================================================================
# Tasks
# =============================================================================

class TestTaskStatus:
    """Tests for GET /api/v1/tasks/{task_id}."""

    def fake_backend(self, monkeypatch, **state):
        result = SimpleNamespace(**{"info": None, "result": None, **state})
        monkeypatch.setattr(
            workers.celery_app,
            "celery_app",
            SimpleNamespace(AsyncResult=lambda task_id: result),
        )

    def test_completed_render(self, client, monkeypatch):
        outcome = {"status": "completed", "request_key": "b/k", "result": {"raster_key": "prod/1_1x1.jpg"}}
        self.fake_backend(monkeypatch, status="SUCCESS", result=outcome)

        body = client.get("/api/v1/tasks/task-1").json()

        assert body["status"] == "SUCCESS"
        assert body["message"] == "Complete"
        assert body["result"]["result"]["raster_key"] == "prod/1_1x1.jpg"

    def test_failed_render(self, client, monkeypatch):
        outcome = {"status": "failed", "request_key": "b/k", "error": {"message": "Source image not found"}}
        self.fake_backend(monkeypatch, status="SUCCESS", result=outcome)

        body = client.get("/api/v1/tasks/task-1").json()

        assert body["message"] == "Render failed"
        assert body["error"] == "Source image not found"

    def test_progress(self, client, monkeypatch):
        self.fake_backend(monkeypatch, status="PROGRESS")
        workers.celery_app.celery_app.AsyncResult("x").info = {"percent": 60, "message": "Rendering print raster..."}

        body = client.get("/api/v1/tasks/task-1").json()

        assert body["progress"] == 60
        assert body["message"] == "Rendering print raster..."
