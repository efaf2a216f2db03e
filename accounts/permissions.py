"""
Authorization policy for the marketplace.

Every role/ownership check goes through the capability functions below so
views never compare role strings themselves. The decorators wrap JSON views
and answer 401 (anonymous) or 403 (authenticated but not allowed).
"""
from functools import wraps

from django.http import JsonResponse


def is_admin(actor) -> bool:
    if actor is None or not getattr(actor, "is_authenticated", False):
        return False
    return getattr(actor, "role", None) == "admin" or bool(getattr(actor, "is_superuser", False))


def is_mentor(actor) -> bool:
    if actor is None or not getattr(actor, "is_authenticated", False):
        return False
    return hasattr(actor, "mentor_profile")


def is_student(actor) -> bool:
    if actor is None or not getattr(actor, "is_authenticated", False):
        return False
    return getattr(actor, "role", None) == "student"


def can_moderate_listings(actor) -> bool:
    return is_admin(actor)


def can_manage_platform_config(actor) -> bool:
    return is_admin(actor)


def can_edit_listing(actor, project) -> bool:
    """Owner mentor of the project, or an administrator."""
    if is_admin(actor):
        return True
    if not is_mentor(actor):
        return False
    return project.mentor_id == actor.mentor_profile.id


def can_manage_payout_account(actor, account_id: str) -> bool:
    """Only the mentor the connected account is linked to may manage it."""
    if not is_mentor(actor) or not account_id:
        return False
    return actor.mentor_profile.stripe_account_id == account_id


def _unauthorized():
    return JsonResponse({"message": "Unauthorized"}, status=401)


def api_login_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _unauthorized()
        return view_func(request, *args, **kwargs)
    return wrapper


def admin_required(view_func):
    """Decorator to ensure only admin users can reach admin console endpoints"""
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _unauthorized()
        if not is_admin(request.user):
            return JsonResponse({"message": "Admin access required"}, status=403)
        return view_func(request, *args, **kwargs)
    return wrapper


def mentor_required(view_func):
    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _unauthorized()
        if not is_mentor(request.user):
            return JsonResponse({"message": "Mentor profile not found"}, status=404)
        return view_func(request, *args, **kwargs)
    return wrapper
