"""Template registry: maps NotificationType to template classes.

Each template knows its default channels and how to render a subject and
plain-text body from event context data.
"""

from notifications.notification.notification import NotificationType
from notifications.templates.artwork_approved import ArtworkApprovedTemplate
from notifications.templates.artwork_rejected import ArtworkRejectedTemplate
from notifications.templates.email_verification import EmailVerificationTemplate
from notifications.templates.listing_fee_confirmation import (
    ListingFeeConfirmationTemplate,
)
from notifications.templates.password_reset import PasswordResetTemplate
from notifications.templates.payment_failed import PaymentFailedTemplate
from notifications.templates.purchase_confirmation import PurchaseConfirmationTemplate
from notifications.templates.purchase_refunded import PurchaseRefundedTemplate
from notifications.templates.sale_notification import SaleNotificationTemplate
from notifications.templates.welcome import WelcomeTemplate

TEMPLATE_REGISTRY: dict[str, type] = {
    NotificationType.EMAIL_VERIFICATION.value: EmailVerificationTemplate,
    NotificationType.PASSWORD_RESET.value: PasswordResetTemplate,
    NotificationType.WELCOME.value: WelcomeTemplate,
    NotificationType.LISTING_FEE_CONFIRMATION.value: ListingFeeConfirmationTemplate,
    NotificationType.PURCHASE_CONFIRMATION.value: PurchaseConfirmationTemplate,
    NotificationType.SALE_NOTIFICATION.value: SaleNotificationTemplate,
    NotificationType.PAYMENT_FAILED.value: PaymentFailedTemplate,
    NotificationType.PURCHASE_REFUNDED.value: PurchaseRefundedTemplate,
    NotificationType.ARTWORK_APPROVED.value: ArtworkApprovedTemplate,
    NotificationType.ARTWORK_REJECTED.value: ArtworkRejectedTemplate,
}


def get_template(notification_type: str):
    """Look up a template class by notification type string."""
    template_cls = TEMPLATE_REGISTRY.get(notification_type)
    if template_cls is None:
        raise ValueError(f"No template registered for notification type: {notification_type}")
    return template_cls
