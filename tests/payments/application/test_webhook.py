"""Application tests for gateway webhook reconciliation."""

import json
from datetime import UTC, datetime

from payments.projections.transaction_record import TransactionRecord, payment_stats, transaction_summary
from payments.transaction.gallery_events import GalleryArtworkEventHandler
from payments.transaction.listing_fee import StartListingFeeCheckout
from payments.transaction.purchase import StartPurchaseCheckout
from payments.transaction.transaction import Transaction
from payments.transaction.webhook import ProcessGatewayWebhook, WebhookReceipt
from protean import current_domain
from shared.events.gallery import ArtworkApproved, ArtworkSubmitted, ListingFeeStatusChanged

ARTIST = "artist-001"
BUYER = "buyer-001"


def _approved_offer(artwork_id="art-001", price=450.0):
    handler = GalleryArtworkEventHandler()
    now = datetime.now(UTC)
    handler.on_artwork_submitted(
        ArtworkSubmitted(
            artwork_id=artwork_id,
            artist_id=ARTIST,
            title="Harbour at Dusk",
            price=price,
            status="pending",
            listing_fee_status="unpaid",
            submitted_at=now,
        )
    )
    handler.on_listing_fee_status_changed(
        ListingFeeStatusChanged(artwork_id=artwork_id, artist_id=ARTIST, listing_fee_status="paid", changed_at=now)
    )
    handler.on_artwork_approved(
        ArtworkApproved(artwork_id=artwork_id, artist_id=ARTIST, title="Harbour at Dusk", approved_at=now)
    )


def _purchase():
    _approved_offer()
    command = StartPurchaseCheckout(user_id=BUYER, email="buyer@example.com", artwork_id="art-001")
    return current_domain.process(command, asynchronous=False)


def _webhook(event_id, event_type, checkout, use_metadata=True, failure_reason=None):
    metadata = {"transaction_id": checkout["transaction_id"]} if use_metadata else {}
    command = ProcessGatewayWebhook(
        event_id=event_id,
        event_type=event_type,
        session_id=checkout["session_id"],
        payment_reference="pi_fake_123",
        metadata=json.dumps(metadata),
        failure_reason=failure_reason,
    )
    return current_domain.process(command, asynchronous=False)


def _status(checkout):
    return current_domain.repository_for(Transaction).get(checkout["transaction_id"]).status


class TestCompletion:
    def test_completion_event(self):
        checkout = _purchase()
        assert _webhook("evt_1", "checkout.session.completed", checkout) == "completed"

        assert _status(checkout) == "completed"
        record = current_domain.repository_for(TransactionRecord).get(checkout["transaction_id"])
        assert record.status == "completed"
        assert record.payment_reference == "pi_fake_123"
        assert record.completed_at is not None

    def test_matched_by_session_when_metadata_missing(self):
        checkout = _purchase()
        assert _webhook("evt_1", "checkout.session.completed", checkout, use_metadata=False) == "completed"
        assert _status(checkout) == "completed"

    def test_payment_intent_succeeded(self):
        checkout = _purchase()
        assert _webhook("evt_1", "payment_intent.succeeded", checkout) == "completed"


class TestIdempotency:
    def test_redelivered_event_is_duplicate(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)
        assert _webhook("evt_1", "checkout.session.completed", checkout) == "duplicate"

        receipts = current_domain.repository_for(WebhookReceipt)._dao.query.all()
        assert receipts.total == 1

    def test_second_completion_event_is_no_change(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)
        assert _webhook("evt_2", "payment_intent.succeeded", checkout) == "no_change"

    def test_only_one_completed_event_stored(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)
        _webhook("evt_2", "payment_intent.succeeded", checkout)

        messages = current_domain.event_store.store.read(f"payments::transaction-{checkout['transaction_id']}")
        types = [m.metadata.headers.type for m in messages if m.metadata and m.metadata.headers]
        assert types.count("Payments.TransactionCompleted.v1") == 1


class TestOutOfOrderDelivery:
    def test_expiry_after_completion_ignored(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)
        assert _webhook("evt_2", "checkout.session.expired", checkout) == "no_change"
        assert _status(checkout) == "completed"

    def test_late_success_after_failure(self):
        checkout = _purchase()
        assert _webhook("evt_1", "payment_intent.payment_failed", checkout, failure_reason="Card declined") == "failed"
        assert _webhook("evt_2", "checkout.session.completed", checkout) == "completed"
        assert _status(checkout) == "completed"


class TestFailureAndRefund:
    def test_failure_reason_from_gateway(self):
        checkout = _purchase()
        _webhook("evt_1", "payment_intent.payment_failed", checkout, failure_reason="Insufficient funds")
        record = current_domain.repository_for(TransactionRecord).get(checkout["transaction_id"])
        assert record.status == "failed"
        assert record.failure_reason == "Insufficient funds"

    def test_default_failure_reason(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.expired", checkout)
        transaction = current_domain.repository_for(Transaction).get(checkout["transaction_id"])
        assert transaction.failure_reason == "Checkout session expired"

    def test_refund(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)
        assert _webhook("evt_2", "charge.refunded", checkout) == "refunded"
        assert _status(checkout) == "refunded"

    def test_refund_matched_by_payment_intent(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)

        command = ProcessGatewayWebhook(
            event_id="evt_2",
            event_type="charge.refunded",
            payment_reference="pi_fake_123",
            metadata=json.dumps({}),
        )
        assert current_domain.process(command, asynchronous=False) == "refunded"
        assert _status(checkout) == "refunded"

    def test_refund_for_unknown_payment_intent(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)

        command = ProcessGatewayWebhook(
            event_id="evt_2",
            event_type="charge.refunded",
            payment_reference="pi_someone_else",
            metadata=json.dumps({}),
        )
        assert current_domain.process(command, asynchronous=False) == "unmatched"
        assert _status(checkout) == "completed"

    def test_refund_before_completion_is_no_change(self):
        checkout = _purchase()
        assert _webhook("evt_1", "charge.refunded", checkout) == "no_change"
        assert _status(checkout) == "pending"


class TestUnmatchedAndIgnored:
    def test_unhandled_event_type(self):
        checkout = _purchase()
        assert _webhook("evt_1", "customer.created", checkout) == "ignored"

    def test_unknown_transaction(self):
        command = ProcessGatewayWebhook(
            event_id="evt_1",
            event_type="checkout.session.completed",
            session_id="cs_unknown",
            metadata=json.dumps({}),
        )
        assert current_domain.process(command, asynchronous=False) == "unmatched"

    def test_receipt_records_outcome(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)
        receipt = current_domain.repository_for(WebhookReceipt).get("evt_1")
        assert receipt.outcome == "completed"
        assert receipt.transaction_id == checkout["transaction_id"]


class TestStats:
    def test_buyer_and_seller_stats(self):
        checkout = _purchase()
        _webhook("evt_1", "checkout.session.completed", checkout)

        buyer = payment_stats(BUYER)
        assert buyer["purchases_count"] == 1
        assert buyer["total_spent"] == 450.0

        seller = payment_stats(ARTIST)
        assert seller["sales_count"] == 1
        assert seller["total_earned"] == 427.5

    def test_listing_fee_counts_as_spent(self):
        handler = GalleryArtworkEventHandler()
        handler.on_artwork_submitted(
            ArtworkSubmitted(
                artwork_id="art-fee",
                artist_id=ARTIST,
                title="New Work",
                price=100.0,
                status="pending",
                listing_fee_status="unpaid",
                submitted_at=datetime.now(UTC),
            )
        )
        checkout = current_domain.process(
            StartListingFeeCheckout(user_id=ARTIST, email="artist@example.com", artwork_id="art-fee"),
            asynchronous=False,
        )
        _webhook("evt_fee", "checkout.session.completed", checkout)

        stats = payment_stats(ARTIST)
        assert stats["listing_fees_count"] == 1
        assert stats["total_spent"] == 1.0

    def test_platform_summary(self):
        completed = _purchase()
        _webhook("evt_1", "checkout.session.completed", completed)

        summary = transaction_summary()
        assert summary["total"] == 1
        assert summary["completed"] == 1
        assert summary["sales_volume"] == 450.0
        assert summary["platform_revenue"] == 22.5
