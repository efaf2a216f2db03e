import json
import logging

from django.db.models import Count, Q, Sum
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from accounts.models import CustomUser, MentorProfile
from accounts.permissions import admin_required
from billing.exceptions import InvalidCommissionRate
from billing.services import config_service
from projects.models import CategorySuggestion, Enrollment, Project
from projects.services import visibility_service
from projects.services.project_service import serialize_category_suggestion

logger = logging.getLogger(__name__)

PAID_STATUSES = ("confirmed", "completed")


def _json_body(request):
    try:
        data = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


@csrf_exempt
@admin_required
@require_http_methods(["GET", "PUT"])
def commission_rate(request):
    """GET the platform commission rate, PUT {"rate": 0.1} to change it."""
    if request.method == "PUT":
        data = _json_body(request)
        if data is None:
            return JsonResponse({"message": "Invalid JSON"}, status=400)
        try:
            rate = config_service.set_commission_rate(data.get("rate"))
        except InvalidCommissionRate as e:
            return JsonResponse({"message": e.message}, status=400)
        logger.info("dashboard_admin: commission rate set to %s by user=%s", rate, request.user.id)
        return JsonResponse({"rate": rate, "message": "Commission rate updated"})

    return JsonResponse({"rate": config_service.get_commission_rate()})


@csrf_exempt
@admin_required
@require_http_methods(["PATCH"])
def project_visibility(request, project_id):
    """PATCH {"isActive": bool} - activate or suppress a single project."""
    data = _json_body(request)
    if data is None:
        return JsonResponse({"message": "Invalid JSON"}, status=400)
    if "isActive" not in data:
        return JsonResponse({"message": "isActive is required"}, status=400)
    try:
        project = visibility_service.admin_set_visibility(project_id, data["isActive"])
    except visibility_service.VisibilityError as e:
        return JsonResponse({"message": e.message}, status=400)
    except Project.DoesNotExist:
        return JsonResponse({"message": "Project not found"}, status=404)
    return JsonResponse({
        "id": project.id,
        "isActive": project.is_active,
        "visibility": visibility_service.visibility_state(project),
    })


@admin_required
@require_http_methods(["GET"])
def mentors(request):
    """All mentors with project counts and what they earned on paid enrollments."""
    paid = Q(projects__enrollments__status__in=PAID_STATUSES)
    mentor_profiles = (
        MentorProfile.objects.select_related("user")
        .annotate(
            total_projects=Count("projects", distinct=True),
            active_projects=Count("projects", filter=Q(projects__is_active=True), distinct=True),
            gross_cents=Sum("projects__enrollments__amount_cents", filter=paid),
            fee_cents=Sum("projects__enrollments__application_fee_cents", filter=paid),
        )
        .order_by("first_name", "last_name")
    )
    mentors_data = []
    for mentor in mentor_profiles:
        gross = mentor.gross_cents or 0
        fees = mentor.fee_cents or 0
        mentors_data.append({
            "id": mentor.id,
            "name": f"{mentor.first_name} {mentor.last_name}".strip(),
            "email": mentor.user.email,
            "isVerified": mentor.is_verified,
            "totalProjects": mentor.total_projects,
            "activeProjectsCount": mentor.active_projects,
            "stripeAccountId": mentor.stripe_account_id or None,
            "grossCents": gross,
            "platformFeeCents": fees,
            "earningsCents": gross - fees,
        })
    return JsonResponse({"mentors": mentors_data})


def _bulk_visibility(mentor_id, suppress):
    try:
        if suppress:
            updated = visibility_service.mentor_bulk_suppress(mentor_id)
        else:
            updated = visibility_service.mentor_bulk_restore(mentor_id)
    except MentorProfile.DoesNotExist:
        return JsonResponse({"message": "Mentor not found"}, status=404)
    return JsonResponse({"mentorId": mentor_id, "updated": updated, "isActive": not suppress})


@csrf_exempt
@admin_required
@require_http_methods(["POST"])
def mentor_suppress(request, mentor_id):
    """Hide all of a mentor's projects."""
    return _bulk_visibility(mentor_id, suppress=True)


@csrf_exempt
@admin_required
@require_http_methods(["POST"])
def mentor_restore(request, mentor_id):
    """Make all of a mentor's projects discoverable again."""
    return _bulk_visibility(mentor_id, suppress=False)


@admin_required
@require_http_methods(["GET"])
def statistics(request):
    """Platform counters for the admin console."""
    users = CustomUser.objects.aggregate(
        total=Count("id"),
        students=Count("id", filter=Q(role=CustomUser.ROLE_STUDENT)),
        mentors=Count("id", filter=Q(role=CustomUser.ROLE_MENTOR)),
        admins=Count("id", filter=Q(role=CustomUser.ROLE_ADMIN)),
    )
    projects = Project.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
    )
    enrollments = Enrollment.objects.aggregate(
        total=Count("id"),
        paid=Count("id", filter=Q(status__in=PAID_STATUSES)),
        gross=Sum("amount_cents", filter=Q(status__in=PAID_STATUSES)),
        fees=Sum("application_fee_cents", filter=Q(status__in=PAID_STATUSES)),
    )
    return JsonResponse({
        "users": users,
        "projects": {
            "total": projects["total"],
            "active": projects["active"],
            # Inactive projects are what an admin still has to review or has suppressed.
            "pendingReview": projects["total"] - projects["active"],
        },
        "enrollments": {"total": enrollments["total"], "paid": enrollments["paid"]},
        "revenue": {
            "grossCents": enrollments["gross"] or 0,
            "platformFeeCents": enrollments["fees"] or 0,
            "commissionRate": config_service.get_commission_rate(),
        },
    })


@admin_required
@require_http_methods(["GET"])
def category_suggestions(request):
    """Category suggestions from visitors, newest first."""
    suggestions = CategorySuggestion.objects.order_by("-created_at", "-id")
    return JsonResponse({"suggestions": [serialize_category_suggestion(s) for s in suggestions]})
