"""Artwork aggregate with its append-only traceability chain.

Lifecycle:
    PENDING → APPROVED | REJECTED    (admin moderation, fee must be paid)
    PENDING | APPROVED | REJECTED → WITHDRAWN    (owner, unsold only)

Listing fee:
    UNPAID → PENDING → PAID
    PENDING → FAILED → PENDING (new checkout)

A sale sets ``sold_at``, moves ``current_owner_id`` to the buyer and
appends a ``sold`` traceability record. Each record carries a SHA-256 hash
chained over the previous record, so the provenance log is tamper-evident.
"""

import hashlib
import json
from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from gallery.artwork.events import (
    ArtworkApproved,
    ArtworkRejected,
    ArtworkSold,
    ArtworkSubmitted,
    ArtworkUpdated,
    ArtworkWithdrawn,
    ListingFeeStatusChanged,
    SaleRefused,
)
from gallery.domain import gallery
from shared.errors import PermissionDenied

MAX_DESCRIPTION_LENGTH = 2000
GENESIS_HASH = "0" * 64

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class ArtworkStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"


class ListingFeeStatus(Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class TransferType(Enum):
    CREATED = "created"
    SOLD = "sold"


class DimensionUnit(Enum):
    CM = "cm"
    IN = "in"


_FEE_TRANSITIONS = {
    ListingFeeStatus.UNPAID: {ListingFeeStatus.PENDING, ListingFeeStatus.PAID},
    ListingFeeStatus.PENDING: {ListingFeeStatus.PAID, ListingFeeStatus.FAILED, ListingFeeStatus.PENDING},
    ListingFeeStatus.FAILED: {ListingFeeStatus.PENDING, ListingFeeStatus.PAID},
    ListingFeeStatus.PAID: set(),  # Terminal
}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@gallery.value_object(part_of="Artwork")
class Dimensions:
    width = Float(min_value=0.0)
    height = Float(min_value=0.0)
    unit = String(choices=DimensionUnit, default=DimensionUnit.CM.value)


@gallery.value_object(part_of="Artwork")
class Edition:
    """Position of a print within a limited edition, e.g. 3 of 50."""

    number = Integer(min_value=1)
    total = Integer(min_value=1)

    @invariant.post
    def number_within_total(self):
        if self.number is not None and self.total is not None and self.number > self.total:
            raise ValidationError({"edition": ["Edition number cannot exceed the edition size"]})


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@gallery.entity(part_of="Artwork")
class TraceabilityRecord:
    """One link of the provenance chain. Never modified once appended."""

    sequence = Integer(required=True, min_value=1)
    from_user_id = Identifier()
    to_user_id = Identifier(required=True)
    transaction_type = String(choices=TransferType, required=True)
    transaction_id = Identifier()
    previous_hash = String(max_length=64, required=True)
    record_hash = String(max_length=64, required=True)
    details = Text()  # JSON
    recorded_at = DateTime(required=True)


def chain_hash(
    previous_hash, artwork_id, sequence, from_user_id, to_user_id, transaction_type, transaction_id, recorded_at
):
    material = "|".join(
        [
            previous_hash,
            str(artwork_id),
            str(sequence),
            str(from_user_id or ""),
            str(to_user_id),
            transaction_type,
            str(transaction_id or ""),
            recorded_at.isoformat(),
        ]
    )
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@gallery.aggregate
class Artwork:
    title = String(required=True, max_length=100)
    description = Text(required=True)
    price = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="EUR")
    images = Text(required=True)  # JSON list of image URLs
    tags = Text()  # JSON list of lowercase tags
    medium = String(max_length=100)
    dimensions = ValueObject(Dimensions)
    year = Integer(min_value=0)
    is_original = Boolean(default=True)
    edition = ValueObject(Edition)

    artist_id = Identifier(required=True)
    artist_name = String(max_length=30)
    current_owner_id = Identifier(required=True)

    status = String(choices=ArtworkStatus, default=ArtworkStatus.PENDING.value)
    approved_at = DateTime()
    rejected_at = DateTime()
    rejection_reason = String(max_length=500)
    withdrawn_at = DateTime()

    listing_fee_status = String(choices=ListingFeeStatus, default=ListingFeeStatus.UNPAID.value)
    listing_fee_transaction_id = Identifier()
    listing_fee_paid_at = DateTime()

    sold_at = DateTime()
    sale_transaction_id = Identifier()
    sale_price = Float()

    traceability = HasMany(TraceabilityRecord)

    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def at_least_one_image(self):
        if not self.image_list():
            raise ValidationError({"images": ["At least one image is required"]})

    @invariant.post
    def description_within_limit(self):
        if self.description and len(self.description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                {"description": [f"Description cannot exceed {MAX_DESCRIPTION_LENGTH} characters"]}
            )

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def submit(
        cls,
        artist_id,
        title,
        description,
        price,
        images,
        artist_name=None,
        tags=None,
        medium=None,
        dimensions=None,
        year=None,
        is_original=True,
        edition=None,
    ):
        """Create a pending artwork owned by its artist."""
        now = datetime.now(UTC)
        artwork = cls(
            title=title,
            description=description,
            price=price,
            images=json.dumps(list(images or [])),
            tags=json.dumps(_normalize_tags(tags)),
            medium=medium,
            dimensions=dimensions,
            year=year,
            is_original=is_original,
            edition=edition,
            artist_id=artist_id,
            artist_name=artist_name,
            current_owner_id=artist_id,
            status=ArtworkStatus.PENDING.value,
            listing_fee_status=ListingFeeStatus.UNPAID.value,
            created_at=now,
            updated_at=now,
        )
        artwork._append_record(
            from_user_id=None,
            to_user_id=artist_id,
            transaction_type=TransferType.CREATED.value,
            details={"title": title, "price": price},
            recorded_at=now,
        )
        artwork.raise_(
            ArtworkSubmitted(
                artwork_id=artwork.id,
                artist_id=artist_id,
                title=title,
                price=price,
                medium=medium,
                status=artwork.status,
                listing_fee_status=artwork.listing_fee_status,
                submitted_at=now,
            )
        )
        return artwork

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def image_list(self) -> list[str]:
        return json.loads(self.images) if self.images else []

    def tag_list(self) -> list[str]:
        return json.loads(self.tags) if self.tags else []

    def is_sold(self) -> bool:
        return self.sold_at is not None

    def is_owned_by(self, user_id) -> bool:
        return str(self.current_owner_id) == str(user_id)

    def provenance(self) -> list:
        return sorted(self.traceability or [], key=lambda record: record.sequence)

    def _assert_owner_can_modify(self, actor_id) -> None:
        if not self.is_owned_by(actor_id):
            raise PermissionDenied("Only the owner can modify this artwork")
        if self.is_sold():
            raise ValidationError({"artwork": ["Sold artworks cannot be modified"]})
        if self.status == ArtworkStatus.WITHDRAWN.value:
            raise ValidationError({"artwork": ["Withdrawn artworks cannot be modified"]})

    def _append_record(
        self, from_user_id, to_user_id, transaction_type, recorded_at, transaction_id=None, details=None
    ):
        chain = self.provenance()
        sequence = len(chain) + 1
        previous_hash = chain[-1].record_hash if chain else GENESIS_HASH
        record_hash = chain_hash(
            previous_hash,
            self.id,
            sequence,
            from_user_id,
            to_user_id,
            transaction_type,
            transaction_id,
            recorded_at,
        )
        self.add_traceability(
            TraceabilityRecord(
                sequence=sequence,
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                transaction_type=transaction_type,
                transaction_id=transaction_id,
                previous_hash=previous_hash,
                record_hash=record_hash,
                details=json.dumps(details) if details else None,
                recorded_at=recorded_at,
            )
        )

    def verify_provenance(self) -> bool:
        """Recompute the hash chain and report whether it is intact."""
        previous_hash = GENESIS_HASH
        for record in self.provenance():
            expected = chain_hash(
                previous_hash,
                self.id,
                record.sequence,
                record.from_user_id,
                record.to_user_id,
                record.transaction_type,
                record.transaction_id,
                record.recorded_at,
            )
            if record.previous_hash != previous_hash or record.record_hash != expected:
                return False
            previous_hash = record.record_hash
        return True

    # -------------------------------------------------------------------
    # Owner operations
    # -------------------------------------------------------------------
    def update_details(
        self,
        actor_id,
        title=_UNSET,
        description=_UNSET,
        price=_UNSET,
        images=_UNSET,
        tags=_UNSET,
        medium=_UNSET,
        dimensions=_UNSET,
        year=_UNSET,
        is_original=_UNSET,
        edition=_UNSET,
    ) -> None:
        self._assert_owner_can_modify(actor_id)

        if title is not _UNSET:
            self.title = title
        if description is not _UNSET:
            self.description = description
        if price is not _UNSET:
            self.price = price
        if images is not _UNSET:
            self.images = json.dumps(list(images or []))
        if tags is not _UNSET:
            self.tags = json.dumps(_normalize_tags(tags))
        if medium is not _UNSET:
            self.medium = medium
        if dimensions is not _UNSET:
            self.dimensions = dimensions
        if year is not _UNSET:
            self.year = year
        if is_original is not _UNSET:
            self.is_original = is_original
        if edition is not _UNSET:
            self.edition = edition

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            ArtworkUpdated(
                artwork_id=self.id,
                artist_id=self.artist_id,
                title=self.title,
                price=self.price,
                medium=self.medium,
                updated_at=now,
            )
        )

    def withdraw(self, actor_id) -> None:
        self._assert_owner_can_modify(actor_id)

        now = datetime.now(UTC)
        self.status = ArtworkStatus.WITHDRAWN.value
        self.withdrawn_at = now
        self.updated_at = now
        self.raise_(ArtworkWithdrawn(artwork_id=self.id, artist_id=self.artist_id, withdrawn_at=now))

    # -------------------------------------------------------------------
    # Moderation
    # -------------------------------------------------------------------
    def approve(self) -> None:
        if self.status != ArtworkStatus.PENDING.value:
            raise ValidationError({"status": [f"Only pending artworks can be approved (status is {self.status})"]})
        if self.listing_fee_status != ListingFeeStatus.PAID.value:
            raise ValidationError({"listing_fee_status": ["The listing fee has not been paid"]})

        now = datetime.now(UTC)
        self.status = ArtworkStatus.APPROVED.value
        self.approved_at = now
        self.rejected_at = None
        self.rejection_reason = None
        self.updated_at = now
        self.raise_(
            ArtworkApproved(
                artwork_id=self.id,
                artist_id=self.artist_id,
                title=self.title,
                approved_at=now,
            )
        )

    def reject(self, reason) -> None:
        if not reason or not reason.strip():
            raise ValidationError({"reason": ["A rejection reason is required"]})
        if self.status != ArtworkStatus.PENDING.value:
            raise ValidationError({"status": [f"Only pending artworks can be rejected (status is {self.status})"]})

        now = datetime.now(UTC)
        self.status = ArtworkStatus.REJECTED.value
        self.rejected_at = now
        self.rejection_reason = reason.strip()
        self.updated_at = now
        self.raise_(
            ArtworkRejected(
                artwork_id=self.id,
                artist_id=self.artist_id,
                title=self.title,
                reason=self.rejection_reason,
                rejected_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Payment-driven transitions (idempotent per transaction)
    # -------------------------------------------------------------------
    def change_listing_fee_status(self, target: str, transaction_id) -> bool:
        """Move the listing fee to ``target``. Returns False when nothing changed.

        A stale event (for example a failure arriving after the fee was paid)
        is ignored rather than rejected, since webhooks can arrive out of order.
        """
        current = ListingFeeStatus(self.listing_fee_status)
        target_status = ListingFeeStatus(target)

        if current == target_status and str(self.listing_fee_transaction_id) == str(transaction_id):
            return False
        if target_status not in _FEE_TRANSITIONS[current]:
            return False
        if (
            target_status == ListingFeeStatus.FAILED
            and self.listing_fee_transaction_id is not None
            and str(self.listing_fee_transaction_id) != str(transaction_id)
        ):
            # A newer checkout superseded the one that failed
            return False

        now = datetime.now(UTC)
        self.listing_fee_status = target_status.value
        self.listing_fee_transaction_id = transaction_id
        if target_status == ListingFeeStatus.PAID:
            self.listing_fee_paid_at = now
        self.updated_at = now

        self.raise_(
            ListingFeeStatusChanged(
                artwork_id=self.id,
                artist_id=self.artist_id,
                listing_fee_status=target_status.value,
                transaction_id=transaction_id,
                changed_at=now,
            )
        )
        return True

    def record_sale(self, buyer_id, transaction_id, price=None) -> bool:
        """Transfer ownership to ``buyer_id``. Returns False for a replayed sale."""
        if self.sale_transaction_id is not None and str(self.sale_transaction_id) == str(transaction_id):
            return False
        if self.is_sold():
            raise ValidationError({"artwork": ["Artwork has already been sold"]})
        if self.status != ArtworkStatus.APPROVED.value:
            raise ValidationError({"status": ["Only approved artworks can be sold"]})

        now = datetime.now(UTC)
        seller_id = self.current_owner_id
        sale_price = price if price is not None else self.price

        self._append_record(
            from_user_id=seller_id,
            to_user_id=buyer_id,
            transaction_type=TransferType.SOLD.value,
            transaction_id=transaction_id,
            details={"price": sale_price, "currency": self.currency},
            recorded_at=now,
        )
        self.current_owner_id = buyer_id
        self.sold_at = now
        self.sale_transaction_id = transaction_id
        self.sale_price = sale_price
        self.updated_at = now

        self.raise_(
            ArtworkSold(
                artwork_id=self.id,
                artist_id=self.artist_id,
                seller_id=seller_id,
                buyer_id=buyer_id,
                title=self.title,
                medium=self.medium,
                price=sale_price,
                transaction_id=transaction_id,
                sold_at=now,
            )
        )
        return True

    def refuse_sale(self, buyer_id, transaction_id, reason) -> None:
        """Record that a paid sale could not transfer ownership."""
        self.raise_(
            SaleRefused(
                artwork_id=self.id,
                artist_id=self.artist_id,
                buyer_id=buyer_id,
                title=self.title,
                transaction_id=transaction_id,
                reason=reason,
                refused_at=datetime.now(UTC),
            )
        )


def _normalize_tags(tags) -> list[str]:
    seen = []
    for tag in tags or []:
        normalized = tag.strip().lower()
        if normalized and normalized not in seen:
            seen.append(normalized)
    return seen
