"""Listing fee checkout: command and handler.

An artist pays a flat fee before an artwork can be approved for sale.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String

from payments.domain import payments
from payments.projections.artwork_offer import find_offer
from payments.projections.transaction_record import open_checkouts
from payments.transaction.checkout import CHECKOUT_TTL, open_checkout
from payments.transaction.transaction import LISTING_FEE_CENTS, Transaction, TransactionType
from shared.errors import PermissionDenied


@payments.command(part_of="Transaction")
class StartListingFeeCheckout:
    user_id = Identifier(required=True)
    email = String(required=True, max_length=254)
    artwork_id = Identifier(required=True)


@payments.command_handler(part_of=Transaction)
class ListingFeeCheckoutHandler:
    @handle(StartListingFeeCheckout)
    def start_listing_fee_checkout(self, command):
        offer = find_offer(command.artwork_id)

        if str(offer.artist_id) != str(command.user_id):
            raise PermissionDenied("You can only pay listing fees for your own artwork")
        if offer.listing_fee_status == "paid":
            raise ValidationError({"artwork_id": ["Listing fee already paid for this artwork"]})
        if offer.status == "withdrawn":
            raise ValidationError({"artwork_id": ["Artwork has been withdrawn"]})
        if open_checkouts(command.artwork_id, TransactionType.LISTING_FEE.value, within=CHECKOUT_TTL):
            raise ValidationError({"artwork_id": ["A listing fee checkout is already in progress"]})

        return open_checkout(
            transaction_type=TransactionType.LISTING_FEE.value,
            user_id=command.user_id,
            email=command.email,
            artwork_id=command.artwork_id,
            artwork_title=offer.title,
            seller_id=command.user_id,
            amount_cents=LISTING_FEE_CENTS,
            product_name="Artwork Listing Fee",
            description=f'List "{offer.title}" on Third Hand Art Marketplace',
        )
