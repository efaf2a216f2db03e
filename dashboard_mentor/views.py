import json
import logging

from django.db.models import Count, Q
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from accounts.permissions import mentor_required
from accounts.services.profile_service import ProfileValidationError, serialize_mentor, update_mentor_profile
from journal.models import JournalPost
from journal.services import journal_service
from projects.models import Enrollment, Project
from projects.services.project_service import ProjectValidationError, create_project, serialize_project, with_ratings
from projects.services.visibility_service import visibility_state

logger = logging.getLogger(__name__)


def _json_body(request):
    """Parsed JSON object, or None when the body is not a JSON object."""
    try:
        data = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        return None
    return data if isinstance(data, dict) else None


def _serialize_enrollment(enrollment):
    return {
        "id": enrollment.id,
        "studentId": enrollment.student_id,
        "studentName": enrollment.student.display_name,
        "studentEmail": enrollment.student.email,
        "status": enrollment.status,
        "progress": enrollment.progress,
        "enrolledAt": enrollment.enrolled_at.isoformat(),
    }


@csrf_exempt
@mentor_required
@require_http_methods(["GET", "POST"])
def projects(request):
    """
    GET  - all of the mentor's projects (any visibility) with their enrollments.
    POST - create a project; answers 201 with the new id.
    """
    mentor_profile = request.user.mentor_profile

    if request.method == "POST":
        data = _json_body(request)
        if data is None:
            return JsonResponse({"message": "Invalid JSON"}, status=400)
        try:
            project = create_project(mentor_profile, data)
        except ProjectValidationError as e:
            return JsonResponse({"message": e.message}, status=400)
        logger.info("dashboard_mentor: mentor=%s created project=%s", mentor_profile.id, project.id)
        return JsonResponse({"message": "Project created successfully", "projectId": project.id}, status=201)

    own_projects = (
        with_ratings(Project.objects.owned_by(mentor_profile.id))
        .prefetch_related("enrollments__student__student_profile", "enrollments__student__mentor_profile")
        .order_by("-created_at")
    )
    projects_data = []
    for project in own_projects:
        data = serialize_project(project, detail=True)
        data["isActive"] = project.is_active
        data["visibility"] = visibility_state(project)
        data["enrollments"] = [_serialize_enrollment(e) for e in project.enrollments.all()]
        projects_data.append(data)
    return JsonResponse({"projects": projects_data})


@csrf_exempt
@mentor_required
@require_http_methods(["GET", "POST"])
def journal_posts(request):
    mentor_profile = request.user.mentor_profile

    if request.method == "POST":
        data = _json_body(request)
        if data is None:
            return JsonResponse({"message": "Invalid JSON"}, status=400)
        try:
            post = journal_service.create_post(mentor_profile, data)
        except journal_service.JournalError as e:
            return JsonResponse({"message": e.message}, status=400)
        return JsonResponse({"message": "Post created successfully", "postId": post.id}, status=201)

    posts = journal_service.posts_visible_to(mentor_profile, request.user)
    return JsonResponse({
        "posts": [journal_service.serialize_post(post, include_attachments=True) for post in posts],
        "subscribers": journal_service.subscriber_count(mentor_profile),
    })


@csrf_exempt
@mentor_required
@require_http_methods(["DELETE"])
def journal_post_delete(request, post_id):
    try:
        journal_service.delete_post(request.user.mentor_profile, post_id)
    except JournalPost.DoesNotExist:
        return JsonResponse({"message": "Post not found"}, status=404)
    return JsonResponse({"message": "Post deleted successfully"})


@mentor_required
@require_http_methods(["GET"])
def subscribers(request):
    subscriptions = journal_service.active_subscribers(request.user.mentor_profile)
    return JsonResponse({
        "subscribers": [
            {
                "id": sub.student_id,
                "name": sub.student.display_name,
                "email": sub.student.email,
                "subscribedAt": sub.subscribed_at.isoformat(),
            }
            for sub in subscriptions
        ],
    })


@mentor_required
@require_http_methods(["GET"])
def students(request):
    """Students enrolled in any of the mentor's projects, grouped by student."""
    enrollments = (
        Enrollment.objects.filter(project__mentor=request.user.mentor_profile)
        .exclude(status="cancelled")
        .select_related("project", "student")
        .order_by("-enrolled_at")
    )
    grouped = {}
    for enrollment in enrollments:
        student = grouped.setdefault(enrollment.student_id, {
            "id": enrollment.student_id,
            "name": enrollment.student.display_name,
            "email": enrollment.student.email,
            "projects": [],
        })
        student["projects"].append({
            "projectId": enrollment.project_id,
            "title": enrollment.project.title,
            "status": enrollment.status,
            "progress": enrollment.progress,
            "enrolledAt": enrollment.enrolled_at.isoformat(),
        })
    return JsonResponse({"students": list(grouped.values())})


@csrf_exempt
@mentor_required
@require_http_methods(["GET", "PATCH"])
def profile(request):
    mentor_profile = request.user.mentor_profile

    if request.method == "PATCH":
        data = _json_body(request)
        if data is None:
            return JsonResponse({"message": "Invalid JSON"}, status=400)
        try:
            update_mentor_profile(mentor_profile, data)
        except ProfileValidationError as e:
            return JsonResponse({"message": e.message}, status=400)

    counts = Project.objects.owned_by(mentor_profile.id).aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
    )
    data = serialize_mentor(mentor_profile, detail=True)
    data.update({
        "email": request.user.email,
        "stripeAccountId": mentor_profile.stripe_account_id or None,
        "projectsCount": counts["active"],
        "totalProjects": counts["total"],
        "subscribers": journal_service.subscriber_count(mentor_profile),
    })
    return JsonResponse(data)
