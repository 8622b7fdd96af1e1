"""Integration tests for the Payments FastAPI endpoints, including the webhook."""

from datetime import UTC, datetime

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from payments.api import admin_transaction_router, payment_router
from payments.gateway.fake_adapter import TEST_SIGNATURE, FakeGateway
from payments.transaction.gallery_events import GalleryArtworkEventHandler
from shared.auth import issue_token
from shared.errors import register_error_handlers
from shared.events.gallery import ArtworkApproved, ArtworkSubmitted, ListingFeeStatusChanged

ARTIST = "artist-001"
BUYER = "buyer-001"


def _headers(user_id, role):
    token = issue_token(user_id=user_id, role=role, email=f"{user_id}@example.com", username=user_id)
    return {"Authorization": f"Bearer {token}"}


ARTIST_HEADERS = _headers(ARTIST, "artist")
BUYER_HEADERS = _headers(BUYER, "buyer")
ADMIN_HEADERS = _headers("admin-001", "admin")


@pytest.fixture()
def client():
    app = FastAPI()
    app.include_router(payment_router)
    app.include_router(admin_transaction_router)
    register_error_handlers(app)
    return TestClient(app)


def _offer(artwork_id="art-001", approved=False):
    handler = GalleryArtworkEventHandler()
    now = datetime.now(UTC)
    handler.on_artwork_submitted(
        ArtworkSubmitted(
            artwork_id=artwork_id,
            artist_id=ARTIST,
            title="Harbour at Dusk",
            price=450.0,
            status="pending",
            listing_fee_status="unpaid",
            submitted_at=now,
        )
    )
    if approved:
        handler.on_listing_fee_status_changed(
            ListingFeeStatusChanged(artwork_id=artwork_id, artist_id=ARTIST, listing_fee_status="paid", changed_at=now)
        )
        handler.on_artwork_approved(
            ArtworkApproved(artwork_id=artwork_id, artist_id=ARTIST, title="Harbour at Dusk", approved_at=now)
        )


def _post_webhook(client, event_type, checkout, event_id=None, signature=TEST_SIGNATURE):
    payload = FakeGateway.webhook_payload(
        event_type,
        session_id=checkout["session_id"],
        metadata={"transaction_id": checkout["transaction_id"]},
        event_id=event_id,
    )
    return client.post(
        "/payments/webhook",
        content=payload,
        headers={"Stripe-Signature": signature, "Content-Type": "application/json"},
    )


def _buy(client):
    _offer(approved=True)
    response = client.post("/payments/purchase/checkout", json={"artwork_id": "art-001"}, headers=BUYER_HEADERS)
    assert response.status_code == 201, response.text
    return response.json()


class TestCheckoutEndpoints:
    def test_listing_fee_checkout(self, client):
        _offer()
        response = client.post("/payments/listing-fee/checkout", json={"artwork_id": "art-001"}, headers=ARTIST_HEADERS)
        assert response.status_code == 201
        assert response.json()["url"].startswith("https://checkout.fake.test/")

    def test_listing_fee_requires_artist_role(self, client):
        _offer()
        response = client.post("/payments/listing-fee/checkout", json={"artwork_id": "art-001"}, headers=BUYER_HEADERS)
        assert response.status_code == 403

    def test_purchase_requires_login(self, client):
        response = client.post("/payments/purchase/checkout", json={"artwork_id": "art-001"})
        assert response.status_code == 401

    def test_purchase_unknown_artwork(self, client):
        response = client.post("/payments/purchase/checkout", json={"artwork_id": "ghost"}, headers=BUYER_HEADERS)
        assert response.status_code == 404

    def test_purchase_unapproved(self, client):
        _offer()
        response = client.post("/payments/purchase/checkout", json={"artwork_id": "art-001"}, headers=BUYER_HEADERS)
        assert response.status_code == 400

    def test_gateway_error_is_bad_gateway(self, client, gateway):
        _offer(approved=True)
        gateway.configure(should_succeed=False, failure_reason="Gateway down")
        response = client.post("/payments/purchase/checkout", json={"artwork_id": "art-001"}, headers=BUYER_HEADERS)
        assert response.status_code == 502


class TestWebhookEndpoint:
    def test_completed(self, client):
        checkout = _buy(client)
        response = _post_webhook(client, "checkout.session.completed", checkout)
        assert response.status_code == 200
        assert response.json() == {"received": True, "outcome": "completed"}

    def test_bad_signature(self, client):
        checkout = _buy(client)
        response = _post_webhook(client, "checkout.session.completed", checkout, signature="forged")
        assert response.status_code == 400

    def test_redelivery_acknowledged(self, client):
        checkout = _buy(client)
        _post_webhook(client, "checkout.session.completed", checkout, event_id="evt_same")
        response = _post_webhook(client, "checkout.session.completed", checkout, event_id="evt_same")
        assert response.status_code == 200
        assert response.json()["outcome"] == "duplicate"


class TestHistoryAndStats:
    def test_history_for_both_parties(self, client):
        checkout = _buy(client)
        _post_webhook(client, "checkout.session.completed", checkout)

        buyer = client.get("/payments/history", headers=BUYER_HEADERS).json()
        seller = client.get("/payments/history", headers=ARTIST_HEADERS).json()
        assert [t["transaction_id"] for t in buyer["transactions"]] == [checkout["transaction_id"]]
        assert [t["transaction_id"] for t in seller["transactions"]] == [checkout["transaction_id"]]
        assert buyer["transactions"][0]["amount"] == 450.0
        assert buyer["transactions"][0]["commission"] == 22.5

    def test_history_filter_by_status(self, client):
        _buy(client)
        data = client.get("/payments/history", params={"status": "completed"}, headers=BUYER_HEADERS).json()
        assert data["transactions"] == []

    def test_stats(self, client):
        checkout = _buy(client)
        _post_webhook(client, "checkout.session.completed", checkout)

        stats = client.get("/payments/stats", headers=ARTIST_HEADERS).json()
        assert stats["sales_count"] == 1
        assert stats["total_earned"] == 427.5

    def test_transaction_detail_for_outsider(self, client):
        checkout = _buy(client)
        response = client.get(
            f"/payments/transactions/{checkout['transaction_id']}",
            headers=_headers("stranger", "buyer"),
        )
        assert response.status_code == 403

    def test_transaction_detail_for_admin(self, client):
        checkout = _buy(client)
        response = client.get(f"/payments/transactions/{checkout['transaction_id']}", headers=ADMIN_HEADERS)
        assert response.status_code == 200
        assert response.json()["status"] == "pending"


class TestAdminEndpoints:
    def test_list_requires_admin(self, client):
        assert client.get("/admin/transactions", headers=BUYER_HEADERS).status_code == 403

    def test_list_and_summary(self, client):
        checkout = _buy(client)
        _post_webhook(client, "checkout.session.completed", checkout)

        listing = client.get("/admin/transactions", params={"type": "sale"}, headers=ADMIN_HEADERS).json()
        assert listing["pagination"]["total"] == 1

        summary = client.get("/admin/transactions/summary", headers=ADMIN_HEADERS).json()
        assert summary["completed"] == 1
        assert summary["platform_revenue"] == 22.5


class TestConfigureGateway:
    def test_configure_fake_gateway(self, client, gateway):
        response = client.post("/payments/gateway/configure", json={"should_succeed": False})
        assert response.status_code == 200
        assert response.json()["gateway"] == "FakeGateway"
        assert gateway.should_succeed is False

    def test_unavailable_in_production(self, client, monkeypatch):
        monkeypatch.setenv("PROTEAN_ENV", "production")
        response = client.post("/payments/gateway/configure", json={"should_succeed": False})
        assert response.status_code == 403
