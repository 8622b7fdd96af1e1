"""Purchase checkout: command and handler.

The buyer pays the full price; the seller is credited the price minus the
platform commission once the gateway confirms the payment. Only one sale
checkout per artwork may be open at a time.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String

from payments.domain import payments
from payments.projections.artwork_offer import find_offer
from payments.projections.transaction_record import open_checkouts
from payments.transaction.checkout import CHECKOUT_TTL, open_checkout
from payments.transaction.transaction import Transaction, TransactionType, sale_amount_cents


@payments.command(part_of="Transaction")
class StartPurchaseCheckout:
    user_id = Identifier(required=True)
    email = String(required=True, max_length=254)
    artwork_id = Identifier(required=True)


@payments.command_handler(part_of=Transaction)
class PurchaseCheckoutHandler:
    @handle(StartPurchaseCheckout)
    def start_purchase_checkout(self, command):
        offer = find_offer(command.artwork_id)

        if offer.status != "approved":
            raise ValidationError({"artwork_id": ["Artwork is not available for purchase"]})
        if offer.is_sold:
            raise ValidationError({"artwork_id": ["Artwork is already sold"]})
        if str(offer.current_owner_id) == str(command.user_id):
            raise ValidationError({"artwork_id": ["You cannot purchase your own artwork"]})
        if open_checkouts(command.artwork_id, TransactionType.SALE.value, within=CHECKOUT_TTL):
            raise ValidationError({"artwork_id": ["Another buyer is already checking out this artwork"]})

        return open_checkout(
            transaction_type=TransactionType.SALE.value,
            user_id=command.user_id,
            email=command.email,
            artwork_id=command.artwork_id,
            artwork_title=offer.title,
            seller_id=str(offer.current_owner_id),
            buyer_id=command.user_id,
            amount_cents=sale_amount_cents(offer.price),
            product_name=offer.title,
            description="Original artwork on Third Hand Art Marketplace",
        )
