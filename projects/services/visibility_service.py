"""
Project visibility rules.

A project is discoverable by students if and only if is_active is True.
Two states map onto that flag: ACTIVE (discoverable) and SUPPRESSED (hidden,
kept in the database). There is no pending state and no delete transition;
each transition overwrites the flag (last writer wins, one UPDATE per call).

Callers are expected to have checked authorization already
(accounts.permissions.can_moderate_listings).
"""
import logging

from django.utils import timezone

from accounts.models import MentorProfile
from projects.models import Project

logger = logging.getLogger(__name__)

ACTIVE = "active"
SUPPRESSED = "suppressed"


class VisibilityError(Exception):
    """Raised when a visibility transition is called with invalid input."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def visibility_state(project) -> str:
    return ACTIVE if project.is_active else SUPPRESSED


def discoverable(queryset=None):
    """Apply the student-facing discoverability filter to a Project queryset."""
    if queryset is None:
        queryset = Project.objects.all()
    return queryset.filter(is_active=True)


def admin_set_visibility(project_id, is_active) -> Project:
    """
    Set a single project's is_active flag, in either direction.

    Raises:
        VisibilityError: is_active is not a bool.
        Project.DoesNotExist: no project with this id.
    """
    if not isinstance(is_active, bool):
        raise VisibilityError("isActive must be a boolean.")
    project = Project.objects.get(id=project_id)
    project.is_active = is_active
    project.save(update_fields=["is_active", "updated_at"])
    logger.info("visibility: project=%s is_active=%s (admin)", project.id, is_active)
    return project


def _set_mentor_visibility(mentor_id, is_active: bool) -> int:
    if not MentorProfile.objects.filter(id=mentor_id).exists():
        raise MentorProfile.DoesNotExist(f"Mentor {mentor_id} not found.")
    updated = Project.objects.owned_by(mentor_id).update(is_active=is_active, updated_at=timezone.now())
    logger.info("visibility: mentor=%s projects=%s is_active=%s (bulk)", mentor_id, updated, is_active)
    return updated


def mentor_bulk_suppress(mentor_id) -> int:
    """Hide every project owned by mentor_id. Returns the number of rows updated."""
    return _set_mentor_visibility(mentor_id, False)


def mentor_bulk_restore(mentor_id) -> int:
    """Make every project owned by mentor_id discoverable again."""
    return _set_mentor_visibility(mentor_id, True)
