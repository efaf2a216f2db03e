"""
Stripe Connect - mentor payout accounts.

Accounts are created controller-style: the platform sets fees and carries
losses, mentors get the Express dashboard. Nothing here is retried; Stripe
errors are re-raised as ConnectError with Stripe's message attached.
"""
import logging

import stripe
from django.conf import settings

from billing import config
from billing.exceptions import AccountNotFound, ConnectError
from billing.services.payout_eligibility import ConnectedAccountStatus, can_accept_checkout, classify
from billing.services.stripe_service import error_message, get_client

logger = logging.getLogger(__name__)


def validate_account_id(account_id: str) -> str:
    if not account_id or not str(account_id).startswith(config.CONNECTED_ACCOUNT_PREFIX):
        raise ConnectError("Invalid account ID format")
    return str(account_id)


def _site_url(path: str) -> str:
    return f"{settings.SITE_DOMAIN.rstrip('/')}{path}"


def create_connected_account(mentor_profile) -> str:
    """
    Create a connected account for mentor_profile and remember its id.
    A mentor that already has one gets the existing id back.
    """
    if mentor_profile.stripe_account_id:
        return mentor_profile.stripe_account_id
    client = get_client()
    try:
        account = client.Account.create(
            controller={
                "fees": {"payer": "application"},
                "losses": {"payments": "application"},
                "stripe_dashboard": {"type": "express"},
            },
            metadata={"mentor_id": str(mentor_profile.id)},
        )
    except stripe.StripeError as e:
        logger.warning("connect: account create failed mentor=%s: %s", mentor_profile.id, e)
        raise ConnectError("Failed to create connected account", detail=error_message(e))
    mentor_profile.stripe_account_id = account.id
    mentor_profile.save(update_fields=["stripe_account_id"])
    logger.info("connect: created account=%s mentor=%s", account.id, mentor_profile.id)
    return account.id


def create_onboarding_link(account_id: str) -> dict:
    account_id = validate_account_id(account_id)
    client = get_client()
    try:
        link = client.AccountLink.create(
            account=account_id,
            refresh_url=_site_url(f"/stripe/onboard/refresh?account_id={account_id}"),
            return_url=_site_url(f"/stripe/onboard/success?account_id={account_id}"),
            type="account_onboarding",
        )
    except stripe.StripeError as e:
        logger.warning("connect: onboarding link failed account=%s: %s", account_id, e)
        raise ConnectError("Failed to create onboarding link", detail=error_message(e))
    return {"url": link.url, "expires_at": link.expires_at}


def create_login_link(account_id: str) -> str:
    account_id = validate_account_id(account_id)
    client = get_client()
    try:
        link = client.Account.create_login_link(account_id)
    except stripe.StripeError as e:
        logger.warning("connect: login link failed account=%s: %s", account_id, e)
        raise ConnectError("Failed to create login link", detail=error_message(e))
    return link.url


def _is_missing_account(e) -> bool:
    return getattr(e, "code", None) == "resource_missing" or "No such account" in str(e)


def retrieve_account_status(account_id: str) -> ConnectedAccountStatus:
    """
    Fetch the account's status flags from Stripe. Always a live call.

    Raises:
        AccountNotFound: Stripe does not know the account.
        ConnectError: any other Stripe failure.
    """
    account_id = validate_account_id(account_id)
    client = get_client()
    try:
        account = client.Account.retrieve(account_id)
    except stripe.InvalidRequestError as e:
        if _is_missing_account(e):
            raise AccountNotFound("Account not found", detail=error_message(e))
        raise ConnectError("Failed to retrieve account status", detail=error_message(e))
    except stripe.StripeError as e:
        logger.warning("connect: status failed account=%s: %s", account_id, e)
        raise ConnectError("Failed to retrieve account status", detail=error_message(e))

    requirements = account.get("requirements") or {}
    return ConnectedAccountStatus(
        account_id=account.id,
        charges_enabled=bool(account.get("charges_enabled")),
        payouts_enabled=bool(account.get("payouts_enabled")),
        details_submitted=bool(account.get("details_submitted")),
        requirements_currently_due=list(requirements.get("currently_due") or []),
        requirements_eventually_due=list(requirements.get("eventually_due") or []),
        requirements_past_due=list(requirements.get("past_due") or []),
        country=account.get("country") or "",
        default_currency=account.get("default_currency") or "",
    )


def serialize_account_status(status: ConnectedAccountStatus) -> dict:
    return {
        "accountId": status.account_id,
        "onboardingStatus": classify(status).value,
        "canReceivePayments": can_accept_checkout(status),
        "canReceivePayouts": status.payouts_enabled,
        "detailsSubmitted": status.details_submitted,
        "country": status.country,
        "defaultCurrency": status.default_currency,
        "requirements": {
            "currentlyDue": status.requirements_currently_due,
            "eventuallyDue": status.requirements_eventually_due,
            "pastDue": status.requirements_past_due,
        },
    }
