"""
Payout eligibility policy for mentors' Stripe Connect accounts.

Stripe owns the account flags; this module only interprets them. Status is
derived on every fetch and never stored. When the account cannot be read
the mentor is treated as not eligible (fail closed, real money is at stake).
"""
import logging
from dataclasses import dataclass, field

from django.db import models

from billing.exceptions import BillingError

logger = logging.getLogger(__name__)


class OnboardingStatus(models.TextChoices):
    INCOMPLETE = "incomplete", "Incomplete"
    DETAILS_SUBMITTED = "details_submitted", "Details submitted (under review)"
    CHARGES_ENABLED = "charges_enabled", "Can accept payments"
    FULLY_ONBOARDED = "fully_onboarded", "Fully onboarded"


@dataclass
class ConnectedAccountStatus:
    account_id: str
    charges_enabled: bool = False
    payouts_enabled: bool = False
    details_submitted: bool = False
    requirements_currently_due: list = field(default_factory=list)
    requirements_eventually_due: list = field(default_factory=list)
    requirements_past_due: list = field(default_factory=list)
    country: str = ""
    default_currency: str = ""


def _flag(account, name) -> bool:
    if isinstance(account, dict):
        return bool(account.get(name))
    return bool(getattr(account, name, False))


def classify(account) -> OnboardingStatus:
    """
    Ordered classification; details_submitted is checked first so an
    inconsistent payload (charges on, details missing) stays INCOMPLETE.
    """
    if not _flag(account, "details_submitted"):
        return OnboardingStatus.INCOMPLETE
    if not _flag(account, "charges_enabled"):
        return OnboardingStatus.DETAILS_SUBMITTED
    if not _flag(account, "payouts_enabled"):
        return OnboardingStatus.CHARGES_ENABLED
    return OnboardingStatus.FULLY_ONBOARDED


def can_accept_checkout(account) -> bool:
    """A checkout may only be built for an account with charges enabled."""
    if account is None:
        return False
    return _flag(account, "charges_enabled")


def account_checkout_eligibility(account_id: str, fetch=None) -> bool:
    """
    Fetch the account and answer can_accept_checkout; any failure -> False.
    fetch defaults to connect_service.retrieve_account_status.
    """
    if not account_id:
        return False
    if fetch is None:
        from billing.services.connect_service import retrieve_account_status
        fetch = retrieve_account_status
    try:
        status = fetch(account_id)
    except BillingError as e:
        logger.warning("payout_eligibility: account=%s unavailable, not eligible: %s", account_id, e.message)
        return False
    return can_accept_checkout(status)
