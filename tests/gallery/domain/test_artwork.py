"""Domain tests for the Artwork aggregate: lifecycle, listing fee, sales and provenance."""

import pytest
from gallery.artwork.artwork import (
    GENESIS_HASH,
    Artwork,
    ArtworkStatus,
    Dimensions,
    Edition,
    ListingFeeStatus,
)
from gallery.artwork.events import (
    ArtworkApproved,
    ArtworkRejected,
    ArtworkSold,
    ArtworkSubmitted,
    ListingFeeStatusChanged,
    SaleRefused,
)
from protean.exceptions import ValidationError
from shared.errors import PermissionDenied

ARTIST = "artist-001"
BUYER = "buyer-001"


def _artwork(**overrides):
    values = dict(
        artist_id=ARTIST,
        artist_name="mira_paints",
        title="Harbour at Dusk",
        description="Oil on linen.",
        price=450.0,
        images=["https://images.example.com/harbour.jpg"],
        tags=["Seascape", "oil", "seascape "],
        medium="Oil",
    )
    values.update(overrides)
    return Artwork.submit(**values)


def _approved():
    artwork = _artwork()
    artwork.change_listing_fee_status(ListingFeeStatus.PAID.value, "txn-fee")
    artwork.approve()
    return artwork


class TestSubmit:
    def test_starts_pending_and_unpaid(self):
        artwork = _artwork()
        assert artwork.status == ArtworkStatus.PENDING.value
        assert artwork.listing_fee_status == ListingFeeStatus.UNPAID.value
        assert artwork.current_owner_id == ARTIST
        assert artwork.is_sold() is False

    def test_tags_normalized_and_deduplicated(self):
        assert _artwork().tag_list() == ["seascape", "oil"]

    def test_images_stored_as_list(self):
        assert _artwork().image_list() == ["https://images.example.com/harbour.jpg"]

    def test_requires_an_image(self):
        with pytest.raises(ValidationError) as exc:
            _artwork(images=[])
        assert "images" in exc.value.messages

    def test_description_limit(self):
        with pytest.raises(ValidationError):
            _artwork(description="x" * 2001)

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            _artwork(price=-1.0)

    def test_dimensions_and_edition(self):
        artwork = _artwork(
            dimensions=Dimensions(width=60.0, height=40.0, unit="cm"),
            edition=Edition(number=3, total=50),
            is_original=False,
        )
        assert artwork.dimensions.width == 60.0
        assert artwork.edition.number == 3

    def test_edition_number_within_total(self):
        with pytest.raises(ValidationError):
            Edition(number=51, total=50)

    def test_creation_record_starts_chain(self):
        artwork = _artwork()
        records = artwork.provenance()
        assert len(records) == 1
        assert records[0].sequence == 1
        assert records[0].transaction_type == "created"
        assert records[0].to_user_id == ARTIST
        assert records[0].previous_hash == GENESIS_HASH

    def test_raises_submitted_event(self):
        artwork = _artwork()
        event = artwork._events[-1]
        assert isinstance(event, ArtworkSubmitted)
        assert event.artwork_id == artwork.id
        assert event.listing_fee_status == "unpaid"


class TestOwnerOperations:
    def test_update_details(self):
        artwork = _artwork()
        artwork.update_details(ARTIST, title="Harbour at Night", price=500.0, tags=["Nocturne"])
        assert artwork.title == "Harbour at Night"
        assert artwork.price == 500.0
        assert artwork.tag_list() == ["nocturne"]
        assert artwork.description == "Oil on linen."

    def test_only_owner_can_update(self):
        artwork = _artwork()
        with pytest.raises(PermissionDenied):
            artwork.update_details("someone-else", title="Mine now")

    def test_withdraw(self):
        artwork = _artwork()
        artwork.withdraw(ARTIST)
        assert artwork.status == ArtworkStatus.WITHDRAWN.value
        assert artwork.withdrawn_at is not None

    def test_withdrawn_cannot_be_updated(self):
        artwork = _artwork()
        artwork.withdraw(ARTIST)
        with pytest.raises(ValidationError):
            artwork.update_details(ARTIST, price=1.0)

    def test_sold_artwork_cannot_be_withdrawn(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")
        with pytest.raises(ValidationError):
            artwork.withdraw(BUYER)


class TestModeration:
    def test_approve_requires_paid_fee(self):
        artwork = _artwork()
        with pytest.raises(ValidationError) as exc:
            artwork.approve()
        assert "listing_fee_status" in exc.value.messages

    def test_approve(self):
        artwork = _approved()
        assert artwork.status == ArtworkStatus.APPROVED.value
        assert artwork.approved_at is not None
        assert isinstance(artwork._events[-1], ArtworkApproved)

    def test_approve_twice_rejected(self):
        artwork = _approved()
        with pytest.raises(ValidationError):
            artwork.approve()

    def test_reject_with_reason(self):
        artwork = _artwork()
        artwork.reject("  Image is too low resolution ")
        assert artwork.status == ArtworkStatus.REJECTED.value
        assert artwork.rejection_reason == "Image is too low resolution"
        assert isinstance(artwork._events[-1], ArtworkRejected)

    def test_reject_requires_reason(self):
        artwork = _artwork()
        with pytest.raises(ValidationError):
            artwork.reject("   ")

    def test_cannot_reject_approved(self):
        artwork = _approved()
        with pytest.raises(ValidationError):
            artwork.reject("Changed my mind")


class TestListingFee:
    def test_unpaid_to_pending_to_paid(self):
        artwork = _artwork()
        assert artwork.change_listing_fee_status("pending", "txn-1") is True
        assert artwork.change_listing_fee_status("paid", "txn-1") is True
        assert artwork.listing_fee_status == "paid"
        assert artwork.listing_fee_paid_at is not None
        assert isinstance(artwork._events[-1], ListingFeeStatusChanged)

    def test_repeat_is_no_change(self):
        artwork = _artwork()
        artwork.change_listing_fee_status("pending", "txn-1")
        assert artwork.change_listing_fee_status("pending", "txn-1") is False

    def test_paid_is_terminal(self):
        artwork = _artwork()
        artwork.change_listing_fee_status("paid", "txn-1")
        assert artwork.change_listing_fee_status("failed", "txn-1") is False
        assert artwork.change_listing_fee_status("pending", "txn-2") is False
        assert artwork.listing_fee_status == "paid"

    def test_failure_then_new_checkout(self):
        artwork = _artwork()
        artwork.change_listing_fee_status("pending", "txn-1")
        assert artwork.change_listing_fee_status("failed", "txn-1") is True
        assert artwork.change_listing_fee_status("pending", "txn-2") is True
        assert artwork.listing_fee_transaction_id == "txn-2"

    def test_failure_of_superseded_checkout_ignored(self):
        artwork = _artwork()
        artwork.change_listing_fee_status("pending", "txn-1")
        artwork.change_listing_fee_status("pending", "txn-2")
        assert artwork.change_listing_fee_status("failed", "txn-1") is False
        assert artwork.listing_fee_status == "pending"

    def test_unknown_status_rejected(self):
        artwork = _artwork()
        with pytest.raises(ValueError):
            artwork.change_listing_fee_status("waived", "txn-1")


class TestRecordSale:
    def test_transfers_ownership(self):
        artwork = _approved()
        assert artwork.record_sale(BUYER, "txn-sale", price=450.0) is True

        assert artwork.current_owner_id == BUYER
        assert artwork.is_sold() is True
        assert artwork.sale_price == 450.0
        event = artwork._events[-1]
        assert isinstance(event, ArtworkSold)
        assert event.seller_id == ARTIST
        assert event.buyer_id == BUYER

    def test_appends_sold_record(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")

        created, sold = artwork.provenance()
        assert sold.sequence == 2
        assert sold.transaction_type == "sold"
        assert sold.from_user_id == ARTIST
        assert sold.to_user_id == BUYER
        assert sold.previous_hash == created.record_hash

    def test_replayed_sale_is_no_change(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")
        assert artwork.record_sale(BUYER, "txn-sale") is False
        assert len(artwork.provenance()) == 2

    def test_second_sale_rejected(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")
        with pytest.raises(ValidationError):
            artwork.record_sale("buyer-002", "txn-other")

    def test_unapproved_cannot_be_sold(self):
        with pytest.raises(ValidationError):
            _artwork().record_sale(BUYER, "txn-sale")

    def test_refused_sale_keeps_owner_and_raises_event(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")
        artwork.refuse_sale("buyer-002", "txn-other", "Artwork has already been sold")

        event = artwork._events[-1]
        assert isinstance(event, SaleRefused)
        assert event.buyer_id == "buyer-002"
        assert event.transaction_id == "txn-other"
        assert event.title == "Harbour at Dusk"
        assert artwork.current_owner_id == BUYER


class TestProvenance:
    def test_intact_chain_verifies(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")
        assert artwork.verify_provenance() is True

    def test_tampered_record_detected(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")
        artwork.provenance()[1].to_user_id = "impostor"
        assert artwork.verify_provenance() is False

    def test_broken_link_detected(self):
        artwork = _approved()
        artwork.record_sale(BUYER, "txn-sale")
        artwork.provenance()[1].previous_hash = GENESIS_HASH
        assert artwork.verify_provenance() is False
