"""Application tests for the handlers that turn other contexts' events into email."""

from datetime import UTC, datetime, timedelta

import pytest
from notifications.notification.gallery_events import GalleryEventsHandler
from notifications.notification.identity_events import IdentityEventsHandler
from notifications.notification.notification import Notification, NotificationStatus, NotificationType
from notifications.notification.payment_events import PaymentEventsHandler
from notifications.projections.recipient import Recipient, find_recipient
from protean import current_domain
from shared.events.gallery import ArtworkApproved, ArtworkRejected, ArtworkSold, SaleRefused
from shared.events.identity import EmailVerified, PasswordResetRequested, UserRegistered, VerificationCodeIssued
from shared.events.payments import TransactionCompleted, TransactionFailed

ARTIST = "artist-001"
BUYER = "buyer-001"


def _register(user_id, username, role):
    IdentityEventsHandler().on_user_registered(
        UserRegistered(
            user_id=user_id,
            username=username,
            email=f"{username}@example.com",
            role=role,
            registered_at=datetime.now(UTC),
        )
    )


def _notifications(**filters):
    return current_domain.repository_for(Notification)._dao.query.filter(**filters).all().items


@pytest.fixture()
def users():
    _register(ARTIST, "mara", "artist")
    _register(BUYER, "tom", "buyer")


class TestIdentityEvents:
    def test_registration_remembers_recipient(self):
        _register(ARTIST, "mara", "artist")
        recipient = current_domain.repository_for(Recipient).get(ARTIST)
        assert recipient.email == "mara@example.com"
        assert recipient.role == "artist"

    def test_registration_sends_nothing(self, email):
        _register(ARTIST, "mara", "artist")
        assert email.sent_emails == []

    def test_verification_code_emailed(self, email):
        IdentityEventsHandler().on_verification_code_issued(
            VerificationCodeIssued(
                user_id=ARTIST,
                username="mara",
                email="mara@example.com",
                code="482913",
                expires_at=datetime.now(UTC) + timedelta(minutes=10),
            )
        )

        [sent] = email.emails_to("mara@example.com")
        assert "482913" in sent["body"]
        [notification] = _notifications(recipient_id=ARTIST)
        assert notification.notification_type == NotificationType.EMAIL_VERIFICATION.value
        assert notification.status == NotificationStatus.SENT.value

    def test_each_code_is_its_own_email(self, email):
        handler = IdentityEventsHandler()
        expires_at = datetime.now(UTC) + timedelta(minutes=10)
        for code, expiry in (("111111", expires_at), ("222222", expires_at + timedelta(minutes=1))):
            handler.on_verification_code_issued(
                VerificationCodeIssued(
                    user_id=ARTIST, username="mara", email="mara@example.com", code=code, expires_at=expiry
                )
            )
        assert len(email.emails_to("mara@example.com")) == 2

    def test_password_reset_link(self, email, monkeypatch):
        monkeypatch.setenv("FRONTEND_URL", "https://thirdhand.art/")
        IdentityEventsHandler().on_password_reset_requested(
            PasswordResetRequested(
                user_id=ARTIST,
                username="mara",
                email="mara@example.com",
                token="reset-token",
                expires_at=datetime.now(UTC) + timedelta(minutes=10),
            )
        )
        [sent] = email.emails_to("mara@example.com")
        assert "https://thirdhand.art/reset-password?token=reset-token" in sent["body"]

    def test_welcome_after_verification(self, email):
        event = EmailVerified(
            user_id=ARTIST, username="mara", email="mara@example.com", role="artist", verified_at=datetime.now(UTC)
        )
        IdentityEventsHandler().on_email_verified(event)
        IdentityEventsHandler().on_email_verified(event)

        [sent] = email.emails_to("mara@example.com")
        assert sent["subject"] == "Welcome to 3rd Hand Art Marketplace!"
        assert find_recipient(ARTIST) is not None


class TestPaymentEvents:
    def _completed(self, transaction_type="sale", transaction_id="txn-001"):
        return TransactionCompleted(
            transaction_id=transaction_id,
            transaction_type=transaction_type,
            artwork_id="art-001",
            artwork_title="Harbour at Dusk",
            buyer_id=BUYER if transaction_type == "sale" else None,
            seller_id=ARTIST,
            amount_cents=45000 if transaction_type == "sale" else 100,
            commission_cents=2250 if transaction_type == "sale" else 0,
            currency="eur",
            completed_at=datetime.now(UTC),
        )

    def test_completed_sale_alone_sends_nothing(self, users, email):
        PaymentEventsHandler().on_transaction_completed(self._completed())
        assert email.sent_emails == []
        assert _notifications() == []

    def test_listing_fee_confirmation(self, users, email):
        PaymentEventsHandler().on_transaction_completed(self._completed(transaction_type="listing_fee"))

        [sent] = email.emails_to("mara@example.com")
        assert sent["subject"] == "Listing Fee Received - 3rd Hand Art Marketplace"
        assert email.emails_to("tom@example.com") == []

    def test_redelivered_event_sends_once(self, users, email):
        event = self._completed(transaction_type="listing_fee")
        PaymentEventsHandler().on_transaction_completed(event)
        PaymentEventsHandler().on_transaction_completed(event)

        assert len(email.sent_emails) == 1
        assert len(_notifications()) == 1

    def test_unknown_recipient_skipped(self, email):
        PaymentEventsHandler().on_transaction_completed(self._completed(transaction_type="listing_fee"))
        assert email.sent_emails == []
        assert _notifications() == []

    def test_failed_sale_notifies_buyer(self, users, email):
        PaymentEventsHandler().on_transaction_failed(
            TransactionFailed(
                transaction_id="txn-002",
                transaction_type="sale",
                artwork_id="art-001",
                artwork_title="Harbour at Dusk",
                buyer_id=BUYER,
                seller_id=ARTIST,
                amount_cents=45000,
                currency="eur",
                reason="Card declined",
                failed_at=datetime.now(UTC),
            )
        )
        [sent] = email.emails_to("tom@example.com")
        assert "Card declined" in sent["body"]
        assert email.emails_to("mara@example.com") == []

    def test_failed_listing_fee_notifies_artist(self, users, email):
        PaymentEventsHandler().on_transaction_failed(
            TransactionFailed(
                transaction_id="txn-003",
                transaction_type="listing_fee",
                artwork_id="art-001",
                artwork_title="Harbour at Dusk",
                seller_id=ARTIST,
                amount_cents=100,
                currency="eur",
                reason="Checkout session expired",
                failed_at=datetime.now(UTC),
            )
        )
        [sent] = email.emails_to("mara@example.com")
        assert "listing fee payment" in sent["body"]


class TestGalleryEvents:
    def test_approval(self, users, email):
        GalleryEventsHandler().on_artwork_approved(
            ArtworkApproved(
                artwork_id="art-001",
                artist_id=ARTIST,
                title="Harbour at Dusk",
                approved_at=datetime.now(UTC),
            )
        )
        [sent] = email.emails_to("mara@example.com")
        assert sent["subject"] == "Approved: Harbour at Dusk"

    def test_rejection(self, users, email):
        GalleryEventsHandler().on_artwork_rejected(
            ArtworkRejected(
                artwork_id="art-001",
                artist_id=ARTIST,
                title="Harbour at Dusk",
                reason="Image too small",
                rejected_at=datetime.now(UTC),
            )
        )
        [sent] = email.emails_to("mara@example.com")
        assert "Image too small" in sent["body"]


def _sold(buyer_id=BUYER, transaction_id="txn-001"):
    return ArtworkSold(
        artwork_id="art-001",
        artist_id=ARTIST,
        seller_id=ARTIST,
        buyer_id=buyer_id,
        title="Harbour at Dusk",
        medium="Oil",
        price=450.0,
        transaction_id=transaction_id,
        sold_at=datetime.now(UTC),
    )


def _refused(buyer_id, transaction_id):
    return SaleRefused(
        artwork_id="art-001",
        artist_id=ARTIST,
        buyer_id=buyer_id,
        title="Harbour at Dusk",
        transaction_id=transaction_id,
        reason="Artwork has already been sold",
        refused_at=datetime.now(UTC),
    )


class TestSales:
    def test_sale_notifies_buyer_and_seller(self, users, email):
        GalleryEventsHandler().on_artwork_sold(_sold())

        [purchase] = email.emails_to("tom@example.com")
        assert purchase["subject"] == "Purchase Confirmed: Harbour at Dusk"
        assert "€450.00" in purchase["body"]

        [sale] = email.emails_to("mara@example.com")
        assert "€427.50" in sale["body"]
        assert sale["body"].startswith("Hello mara,")

    def test_redelivered_sale_sends_once(self, users, email):
        handler = GalleryEventsHandler()
        handler.on_artwork_sold(_sold())
        handler.on_artwork_sold(_sold())

        assert len(email.sent_emails) == 2
        assert len(_notifications()) == 2

    def test_refused_buyer_told_about_refund_not_ownership(self, users, email):
        _register("buyer-002", "ann", "buyer")
        handler = GalleryEventsHandler()
        handler.on_artwork_sold(_sold())
        handler.on_sale_refused(_refused("buyer-002", "txn-002"))

        [refund] = email.emails_to("ann@example.com")
        assert refund["subject"] == "Purchase Refunded: Harbour at Dusk"
        assert "refunded in full" in refund["body"]
        assert len(email.emails_to("mara@example.com")) == 1
        confirmations = _notifications(notification_type=NotificationType.PURCHASE_CONFIRMATION.value)
        assert [str(n.recipient_id) for n in confirmations] == [BUYER]

    def test_redelivered_refusal_sends_once(self, users, email):
        handler = GalleryEventsHandler()
        handler.on_sale_refused(_refused(BUYER, "txn-002"))
        handler.on_sale_refused(_refused(BUYER, "txn-002"))
        assert len(email.emails_to("tom@example.com")) == 1
