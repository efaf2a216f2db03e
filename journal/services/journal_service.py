"""
Mentor journal and subscriptions.

Public posts are readable by anyone; non-public posts only by the owning
mentor and by students with an active subscription to that mentor.
"""
import logging

from django.db.models import Count
from django.utils import timezone

from journal.models import JournalPost, MentorSubscription, PostView

logger = logging.getLogger(__name__)

PUBLIC_FEED_LIMIT = 5


class JournalError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def create_post(mentor_profile, data: dict) -> JournalPost:
    title = (data.get("title") or "").strip()
    content = data.get("content") or ""
    if not title or not content:
        raise JournalError("Title and content are required")
    attachments = data.get("attachments") or []
    if not isinstance(attachments, list):
        raise JournalError("attachments must be an array.")
    return JournalPost.objects.create(
        mentor=mentor_profile,
        title=title[:200],
        content=content,
        excerpt=(data.get("excerpt") or "")[:500],
        is_public=bool(data.get("isPublic")),
        attachments=attachments,
    )


def delete_post(mentor_profile, post_id) -> None:
    """Delete one of mentor_profile's own posts; other mentors' posts look missing."""
    post = JournalPost.objects.get(id=post_id, mentor=mentor_profile)
    post.delete()


def is_subscribed(mentor_profile, user) -> bool:
    if user is None or not user.is_authenticated:
        return False
    return MentorSubscription.objects.filter(mentor=mentor_profile, student=user, is_active=True).exists()


def posts_visible_to(mentor_profile, viewer):
    """Posts of mentor_profile the viewer may read, newest first, with view counts."""
    posts = JournalPost.objects.filter(mentor=mentor_profile)
    is_owner = viewer is not None and viewer.is_authenticated and getattr(viewer, "id", None) == mentor_profile.user_id
    if not is_owner and not is_subscribed(mentor_profile, viewer):
        posts = posts.filter(is_public=True)
    return posts.annotate(view_count=Count("views")).order_by("-created_at")


def record_view(post, viewer) -> PostView:
    user = viewer if viewer is not None and viewer.is_authenticated else None
    return PostView.objects.create(post=post, user=user)


def set_subscription(mentor_profile, student, subscribe: bool) -> bool:
    """Subscribe (upsert + reactivate) or unsubscribe (deactivate). Returns the new state."""
    if subscribe:
        MentorSubscription.objects.update_or_create(
            mentor=mentor_profile,
            student=student,
            defaults={"is_active": True, "subscribed_at": timezone.now()},
        )
    else:
        MentorSubscription.objects.filter(mentor=mentor_profile, student=student).update(is_active=False)
    logger.info("journal: student=%s mentor=%s subscribed=%s", student.id, mentor_profile.id, subscribe)
    return subscribe


def active_subscribers(mentor_profile):
    return (
        MentorSubscription.objects.filter(mentor=mentor_profile, is_active=True)
        .select_related("student")
        .order_by("-subscribed_at")
    )


def subscriber_count(mentor_profile) -> int:
    return MentorSubscription.objects.filter(mentor=mentor_profile, is_active=True).count()


def serialize_post(post, include_attachments=False) -> dict:
    data = {
        "id": post.id,
        "title": post.title,
        "content": post.content,
        "excerpt": post.excerpt,
        "isPublic": post.is_public,
        "createdAt": post.created_at.isoformat(),
        "views": getattr(post, "view_count", 0) or 0,
    }
    if include_attachments:
        data["attachments"] = post.attachments
    return data
