"""
The only place that talks to the Stripe SDK directly.

Keys come from settings (STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET); the secret
key never leaves the backend. Services call get_client() and translate
stripe.StripeError into their own BillingError subclasses.
"""
import stripe
from django.conf import settings

from billing.exceptions import StripeNotConfigured


def is_configured() -> bool:
    key = getattr(settings, "STRIPE_SECRET_KEY", None) or ""
    return bool(key.strip())


def get_client():
    """
    The stripe module with api_key set, e.g. get_client().Account.retrieve(account_id).

    Raises:
        StripeNotConfigured: STRIPE_SECRET_KEY is missing.
    """
    if not is_configured():
        raise StripeNotConfigured("Payments are not configured. Please try again later.")
    stripe.api_key = settings.STRIPE_SECRET_KEY
    return stripe


def check_api_ok() -> bool:
    """Live balance call; False on any Stripe error (bad key, network)."""
    if not is_configured():
        return False
    try:
        get_client().Balance.retrieve()
    except stripe.StripeError:
        return False
    return True


def webhook_secret() -> str:
    return (getattr(settings, "STRIPE_WEBHOOK_SECRET", "") or "").strip()


def construct_webhook_event(payload: bytes, sig_header: str):
    """
    Verify the Stripe-Signature header and parse the event.

    Raises:
        ValueError: payload is not valid JSON.
        stripe.SignatureVerificationError: signature does not match the secret.
    """
    return stripe.Webhook.construct_event(payload, sig_header, webhook_secret())


def error_message(e) -> str:
    """Stripe's own message for a StripeError, for the "details" field of error responses."""
    err = getattr(e, "error", None)
    return getattr(err, "message", None) or getattr(e, "user_message", None) or str(e)
