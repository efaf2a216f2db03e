import json

from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from accounts.models import MentorProfile
from accounts.permissions import api_login_required, is_student
from accounts.services.profile_service import discoverable_mentors, search_mentors, serialize_mentor
from journal.models import JournalPost
from journal.services import journal_service
from projects.models import Project
from projects.services.project_service import (
    ProjectValidationError,
    serialize_project,
    submit_category_suggestion,
    with_ratings,
)
from projects.services.visibility_service import discoverable

PER_PAGE = 12


def _page(request):
    try:
        return max(int(request.GET.get("page", 1)), 1)
    except ValueError:
        return 1


def _paginate(queryset, page):
    start = (page - 1) * PER_PAGE
    end = start + PER_PAGE
    total_count = queryset.count()
    return list(queryset[start:end]), end < total_count, total_count


@require_http_methods(["GET"])
def project_list(request):
    """Active projects, newest first. Optional ?q=, ?category=, ?difficulty=, ?page=."""
    search_query = request.GET.get("q", "").strip()
    category = request.GET.get("category", "").strip()
    difficulty = request.GET.get("difficulty", "").strip()
    page = _page(request)

    projects = discoverable(with_ratings(Project.objects.select_related("mentor")))
    if search_query:
        projects = projects.filter(
            Q(title__icontains=search_query) |
            Q(short_description__icontains=search_query) |
            Q(description__icontains=search_query)
        )
    if category:
        projects = projects.filter(category=category)
    if difficulty:
        projects = projects.filter(difficulty=difficulty)
    projects = projects.order_by("-created_at")

    projects_page, has_next, total_count = _paginate(projects, page)
    projects_data = []
    for project in projects_page:
        data = serialize_project(project)
        data["mentor"] = {
            "id": project.mentor.id,
            "firstName": project.mentor.first_name,
            "lastName": project.mentor.last_name,
        }
        projects_data.append(data)

    return JsonResponse({
        "projects": projects_data,
        "has_next": has_next,
        "page": page,
        "total_count": total_count,
    })


@require_http_methods(["GET"])
def project_detail(request, project_id):
    """A suppressed project answers 404 exactly like a missing one."""
    project = get_object_or_404(
        discoverable(with_ratings(Project.objects.select_related("mentor"))), id=project_id
    )
    data = serialize_project(project, detail=True)
    data["mentor"] = serialize_mentor(project.mentor)
    data["reviews"] = [
        {
            "rating": review.rating,
            "comment": review.comment,
            "student": review.student.display_name,
            "createdAt": review.created_at.isoformat(),
        }
        for review in project.reviews.select_related("student")[:10]
    ]
    return JsonResponse(data)


@require_http_methods(["GET"])
def mentor_list(request):
    """Mentors with at least one active project, best rated first."""
    page = _page(request)
    mentors = search_mentors(discoverable_mentors(), request.GET.get("q", ""))
    mentors = mentors.order_by("-avg_rating", "first_name", "last_name")
    mentors_page, has_next, total_count = _paginate(mentors, page)
    return JsonResponse({
        "mentors": [serialize_mentor(mentor) for mentor in mentors_page],
        "has_next": has_next,
        "page": page,
        "total_count": total_count,
    })


@require_http_methods(["GET"])
def mentor_detail(request, mentor_id):
    mentor = get_object_or_404(discoverable_mentors(), id=mentor_id)
    projects = discoverable(with_ratings(mentor.projects.all())).order_by("-created_at")
    data = serialize_mentor(mentor, detail=True)
    data["projects"] = [serialize_project(project) for project in projects]
    data["subscribers"] = journal_service.subscriber_count(mentor)
    data["isSubscribed"] = journal_service.is_subscribed(mentor, request.user)
    return JsonResponse(data)


@require_http_methods(["GET"])
def mentor_posts(request, mentor_id):
    """Latest posts of a mentor; private ones only for the mentor and active subscribers."""
    mentor = get_object_or_404(MentorProfile, id=mentor_id)
    posts = journal_service.posts_visible_to(mentor, request.user)[:journal_service.PUBLIC_FEED_LIMIT]
    return JsonResponse({"posts": [journal_service.serialize_post(post) for post in posts]})


@require_http_methods(["GET"])
def post_detail(request, post_id):
    """Full post with attachments. Records a view."""
    post = get_object_or_404(JournalPost.objects.select_related("mentor"), id=post_id)
    if not journal_service.posts_visible_to(post.mentor, request.user).filter(id=post.id).exists():
        return JsonResponse({"message": "Subscribe to read this post"}, status=403)
    journal_service.record_view(post, request.user)
    post = journal_service.posts_visible_to(post.mentor, request.user).get(id=post.id)
    return JsonResponse(journal_service.serialize_post(post, include_attachments=True))


@csrf_exempt
@api_login_required
@require_http_methods(["POST", "DELETE"])
def mentor_subscribe(request, mentor_id):
    """POST subscribes, DELETE unsubscribes. Body of POST may carry {"subscribe": false}."""
    if not is_student(request.user):
        return JsonResponse({"message": "Only students can subscribe to mentors"}, status=403)
    mentor = get_object_or_404(MentorProfile, id=mentor_id)
    subscribe = request.method == "POST"
    if subscribe and request.content_type == "application/json" and request.body:
        try:
            data = json.loads(request.body)
        except json.JSONDecodeError:
            return JsonResponse({"message": "Invalid JSON"}, status=400)
        if not isinstance(data, dict):
            return JsonResponse({"message": "Invalid JSON"}, status=400)
        subscribe = data.get("subscribe", True)
        if not isinstance(subscribe, bool):
            return JsonResponse({"message": "subscribe must be a boolean"}, status=400)
    subscribed = journal_service.set_subscription(mentor, request.user, subscribe)
    return JsonResponse({
        "subscribed": subscribed,
        "subscribers": journal_service.subscriber_count(mentor),
    })


@csrf_exempt
@require_http_methods(["POST"])
def suggest_category(request):
    """
    POST /api/suggest-category/
    Body: {"name", "contactEmail", "description", "contactName", "comment"}. No login needed.
    """
    try:
        data = json.loads(request.body or b"{}")
    except json.JSONDecodeError:
        return JsonResponse({"message": "Invalid JSON"}, status=400)
    if not isinstance(data, dict):
        return JsonResponse({"message": "Invalid JSON"}, status=400)
    try:
        suggestion = submit_category_suggestion(data)
    except ProjectValidationError as e:
        return JsonResponse({"message": e.message}, status=400)
    return JsonResponse(
        {"message": "Category suggestion submitted successfully", "suggestionId": suggestion.id},
        status=201,
    )
