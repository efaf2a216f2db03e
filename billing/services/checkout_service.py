"""
Project checkout - destination charge with an application fee.

Order of operations for a purchase:
1. the project must be discoverable and have a free seat,
2. the mentor's connected account must accept charges (fail closed),
3. the fee is computed from the current commission rate,
4. a hosted Checkout Session is created; Stripe settles and transfers.

The webhook (billing.views) confirms the enrollment once payment succeeds.
"""
import logging

import stripe
from django.conf import settings

from billing import config
from billing.exceptions import CheckoutError
from billing.services.commission_service import compute_fee
from billing.services.config_service import get_commission_rate
from billing.services.payout_eligibility import account_checkout_eligibility
from billing.services.stripe_service import error_message, get_client

logger = logging.getLogger(__name__)


def build_checkout_fee_params(gross_amount_cents: int, rate, destination_account_id: str) -> dict:
    """
    Fee-bearing part of a Checkout Session's payment_intent_data.

    Deterministic for identical input. Does not check the destination's
    eligibility; callers gate on can_accept_checkout first.
    """
    return {
        "application_fee_amount": compute_fee(gross_amount_cents, rate),
        "transfer_data": {"destination": destination_account_id},
    }


def _validate_quantity(quantity) -> None:
    """A checkout buys exactly one seat; the webhook confirms one enrollment per session."""
    if isinstance(quantity, bool) or quantity not in (1, "1"):
        raise CheckoutError("Only one seat can be purchased per checkout.")


def create_project_checkout(project, student, quantity=1, eligibility_check=account_checkout_eligibility) -> dict:
    """
    Create a hosted Checkout Session for a student buying a seat in project.

    Returns:
        {"session_id", "checkout_url", "amount", "currency", "application_fee"}

    Raises:
        CheckoutError: project hidden or full, mentor cannot accept payments,
            or Stripe refused the session (Stripe's message in .detail).
    """
    _validate_quantity(quantity)
    if not project.is_active:
        raise CheckoutError("This project is not available.")
    if project.current_students >= project.max_students:
        raise CheckoutError("This project is full.")

    destination = project.mentor.stripe_account_id
    if not destination or not eligibility_check(destination):
        raise CheckoutError("This mentor cannot accept payments yet.")

    unit_amount = project.price_cents
    if unit_amount <= 0:
        raise CheckoutError("This project has no price.")
    rate = get_commission_rate()
    fee_params = build_checkout_fee_params(unit_amount, rate, destination)
    metadata = {
        "project_id": str(project.id),
        "student_id": str(student.id),
        "connected_account_id": destination,
        "application_fee_amount": str(fee_params["application_fee_amount"]),
    }

    client = get_client()
    base_url = settings.SITE_DOMAIN.rstrip("/")
    try:
        session = client.checkout.Session.create(
            mode="payment",
            line_items=[{
                "price_data": {
                    "currency": project.currency,
                    "product_data": {
                        "name": project.title,
                        "description": project.short_description or None,
                    },
                    "unit_amount": unit_amount,
                },
                "quantity": 1,
            }],
            payment_intent_data={**fee_params, "metadata": metadata},
            metadata=metadata,
            customer_email=student.email,
            client_reference_id=str(student.id),
            payment_method_types=config.CHECKOUT_PAYMENT_METHOD_TYPES,
            success_url=f"{base_url}/stripe/success?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/stripe/cancel",
        )
    except stripe.StripeError as e:
        logger.warning("checkout: session create failed project=%s: %s", project.id, e)
        raise CheckoutError("Failed to create checkout session", detail=error_message(e))

    logger.info(
        "checkout: session=%s project=%s amount=%s fee=%s destination=%s",
        session.id, project.id, unit_amount, fee_params["application_fee_amount"], destination,
    )
    return {
        "session_id": session.id,
        "checkout_url": session.url,
        "amount": unit_amount,
        "currency": project.currency,
        "application_fee": fee_params["application_fee_amount"],
    }
