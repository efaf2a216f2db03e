"""
Billing exceptions. Each carries a message that is safe to show to the user
and the HTTP status the JSON views answer with.
"""


class BillingError(Exception):
    """Base for billing failures."""

    status_code = 400

    def __init__(self, message: str, detail: str = None):
        self.message = message
        self.detail = detail
        super().__init__(message)


class InvalidCommissionRate(BillingError):
    """Rate outside [0, 1) or not a number. Never clamped."""


class InvalidAmount(BillingError):
    """Gross amount is negative or not a whole number of minor units."""


class StripeNotConfigured(BillingError):
    status_code = 503


class ConnectError(BillingError):
    """Stripe Connect call failed; detail holds Stripe's message."""

    status_code = 502


class AccountNotFound(ConnectError):
    status_code = 404


class CheckoutError(BillingError):
    """Checkout was refused before or by Stripe."""
