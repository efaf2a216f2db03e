"""
Billing views: Stripe status, Connect payout accounts, project checkout and
the Stripe webhook.
"""
import json
import logging

import stripe
from django.contrib.admin.views.decorators import staff_member_required
from django.http import HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from accounts.permissions import api_login_required, can_manage_payout_account, is_student, mentor_required
from billing.exceptions import BillingError
from billing.services import checkout_service, connect_service
from billing.services.stripe_service import check_api_ok, construct_webhook_event, is_configured, webhook_secret
from projects.models import Project
from projects.services.enrollment_service import EnrollmentError, confirm_paid_enrollment

logger = logging.getLogger(__name__)


def _error(e: BillingError):
    body = {"message": e.message}
    if e.detail:
        body["details"] = e.detail
    return JsonResponse(body, status=e.status_code)


@staff_member_required
def stripe_status(request):
    """
    GET /api/stripe/status/
    Staff-only. Returns JSON: stripe_configured, api_ok (live Stripe API check).
    """
    return JsonResponse({
        "stripe_configured": is_configured(),
        "api_ok": check_api_ok() if is_configured() else False,
    })


@csrf_exempt
@mentor_required
@require_http_methods(["POST"])
def connect_account(request):
    """POST /api/stripe/connect/account/ - create (or return) the mentor's connected account."""
    try:
        account_id = connect_service.create_connected_account(request.user.mentor_profile)
    except BillingError as e:
        return _error(e)
    return JsonResponse({"accountId": account_id})


@csrf_exempt
@mentor_required
@require_http_methods(["POST", "PUT"])
def connect_account_link(request, account_id):
    """
    POST /api/stripe/connect/<account_id>/link/ - onboarding link.
    PUT  /api/stripe/connect/<account_id>/link/ - Express dashboard login link.
    """
    if not can_manage_payout_account(request.user, account_id):
        return JsonResponse({"message": "You do not have access to this account"}, status=403)
    try:
        if request.method == "POST":
            link = connect_service.create_onboarding_link(account_id)
            return JsonResponse({"url": link["url"], "expiresAt": link["expires_at"]})
        return JsonResponse({"url": connect_service.create_login_link(account_id)})
    except BillingError as e:
        return _error(e)


@mentor_required
@require_http_methods(["GET"])
def connect_account_status(request, account_id):
    """GET /api/stripe/connect/<account_id>/status/ - live onboarding status."""
    if not can_manage_payout_account(request.user, account_id):
        return JsonResponse({"message": "You do not have access to this account"}, status=403)
    try:
        status = connect_service.retrieve_account_status(account_id)
    except BillingError as e:
        return _error(e)
    return JsonResponse(connect_service.serialize_account_status(status))


@csrf_exempt
@api_login_required
@require_http_methods(["POST"])
def create_checkout_session(request):
    """
    POST /api/stripe/checkout/create-session/
    Body: {"projectId": int}. One seat per checkout; students only.
    """
    if not is_student(request.user):
        return JsonResponse({"message": "Only students can purchase projects"}, status=403)
    try:
        data = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        return JsonResponse({"message": "Invalid JSON"}, status=400)
    if not isinstance(data, dict):
        return JsonResponse({"message": "Invalid JSON"}, status=400)

    project_id = data.get("projectId")
    if not project_id:
        return JsonResponse({"message": "Project ID is required"}, status=400)
    try:
        project = Project.objects.select_related("mentor").get(id=project_id)
    except (Project.DoesNotExist, ValueError, TypeError):
        return JsonResponse({"message": "Project not found"}, status=404)

    try:
        result = checkout_service.create_project_checkout(project, request.user, quantity=data.get("quantity", 1))
    except BillingError as e:
        return _error(e)
    return JsonResponse({
        "sessionId": result["session_id"],
        "checkoutUrl": result["checkout_url"],
        "amount": result["amount"],
        "currency": result["currency"],
        "applicationFee": result["application_fee"],
    })


@csrf_exempt
@require_http_methods(["POST"])
def stripe_webhook(request):
    """
    POST /api/stripe/webhook/
    Verifies the signature and confirms enrollments on checkout.session.completed.
    Idempotent per checkout session.
    """
    sig_header = request.META.get("HTTP_STRIPE_SIGNATURE", "")
    if not webhook_secret() or not sig_header:
        logger.warning("stripe_webhook: missing STRIPE_WEBHOOK_SECRET or Stripe-Signature header")
        return HttpResponse(status=400)

    try:
        event = construct_webhook_event(request.body, sig_header)
    except ValueError as e:
        logger.warning("stripe_webhook: invalid payload %s", e)
        return HttpResponse(status=400)
    except stripe.SignatureVerificationError as e:
        logger.warning("stripe_webhook: signature verification failed %s", e)
        return HttpResponse(status=400)

    if event["type"] == "checkout.session.completed":
        _handle_checkout_session_completed(event["data"]["object"])

    return HttpResponse(status=200)


def _handle_checkout_session_completed(obj):
    """Confirm the paid enrollment. Bad metadata is logged and acknowledged."""
    session_id = obj.get("id")
    if not session_id or obj.get("payment_status") != "paid":
        logger.info("stripe_webhook: session=%s not paid, skipped", session_id)
        return
    metadata = obj.get("metadata") or {}
    try:
        project_id = int(metadata.get("project_id"))
        student_id = int(metadata.get("student_id"))
    except (TypeError, ValueError):
        logger.warning("stripe_webhook: session=%s missing project_id/student_id metadata", session_id)
        return
    try:
        application_fee_cents = int(metadata.get("application_fee_amount") or 0)
    except (TypeError, ValueError):
        application_fee_cents = 0

    try:
        confirm_paid_enrollment(
            project_id=project_id,
            student_id=student_id,
            checkout_session_id=session_id,
            amount_cents=obj.get("amount_total") or 0,
            application_fee_cents=application_fee_cents,
            currency=(obj.get("currency") or "usd").lower()[:10],
        )
    except Project.DoesNotExist:
        logger.warning("stripe_webhook: session=%s project=%s not found", session_id, project_id)
    except EnrollmentError as e:
        # Paid but no seat left; needs a manual refund from the dashboard.
        logger.error("stripe_webhook: session=%s project=%s not enrolled: %s", session_id, project_id, e.message)
