"""
Mentor profile search, update and JSON shaping shared by the public
mentor pages and the mentor dashboard.
"""
from decimal import Decimal, InvalidOperation

from django.db.models import Avg, Count, Q

from accounts.models import MentorProfile

TEXT_FIELDS = {
    "firstName": "first_name",
    "lastName": "last_name",
    "bio": "bio",
    "experience": "experience",
    "website": "website",
    "linkedin": "linkedin",
    "github": "github",
    "twitter": "twitter",
    "instagram": "instagram",
    "portfolio": "portfolio",
}
LIST_FIELDS = {
    "specialties": "specialties",
    "qualifications": "qualifications",
    "languages": "languages",
    "teachingMethods": "teaching_methods",
}


class ProfileValidationError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def search_mentors(queryset, search_query):
    """Filter mentors by name or email; "First Last" also matches either order."""
    search_query = (search_query or "").strip()
    if not search_query:
        return queryset
    query_words = search_query.split()
    condition = (
        Q(first_name__icontains=search_query) |
        Q(last_name__icontains=search_query) |
        Q(user__email__icontains=search_query)
    )
    if len(query_words) >= 2:
        first_word = query_words[0]
        last_word = query_words[-1]
        condition |= (
            (Q(first_name__icontains=first_word) & Q(last_name__icontains=last_word)) |
            (Q(first_name__icontains=last_word) & Q(last_name__icontains=first_word))
        )
    return queryset.filter(condition)


def with_project_stats(queryset):
    """Annotate mentors with active project count and average rating over active projects."""
    active = Q(projects__is_active=True)
    return queryset.annotate(
        active_projects_count=Count("projects", filter=active, distinct=True),
        avg_rating=Avg("projects__reviews__rating", filter=active),
    )


def discoverable_mentors():
    """Mentors students can find: at least one active project."""
    return (
        with_project_stats(MentorProfile.objects.filter(user__is_active=True))
        .filter(active_projects_count__gt=0)
        .select_related("user")
    )


def update_mentor_profile(profile, data: dict):
    """Apply a camelCase PATCH payload; unknown keys are ignored."""
    update_fields = []
    for key, field in TEXT_FIELDS.items():
        if key in data:
            setattr(profile, field, str(data[key] or "").strip())
            update_fields.append(field)
    for key, field in LIST_FIELDS.items():
        if key in data:
            values = data[key] or []
            if not isinstance(values, list):
                raise ProfileValidationError(f"{key} must be an array.")
            setattr(profile, field, [str(v).strip() for v in values if str(v).strip()])
            update_fields.append(field)
    if "hourlyRate" in data:
        raw = data["hourlyRate"]
        if raw in (None, ""):
            profile.hourly_rate = None
        else:
            try:
                rate = Decimal(str(raw)).quantize(Decimal("0.01"))
            except (InvalidOperation, ValueError):
                raise ProfileValidationError("hourlyRate must be a number.")
            if rate < 0:
                raise ProfileValidationError("hourlyRate cannot be negative.")
            profile.hourly_rate = rate
        update_fields.append("hourly_rate")
    if update_fields:
        profile.save(update_fields=update_fields)
    return profile


def serialize_mentor(profile, detail=False) -> dict:
    data = {
        "id": profile.id,
        "userId": profile.user_id,
        "firstName": profile.first_name,
        "lastName": profile.last_name,
        "bio": profile.bio,
        "specialties": profile.specialties or [],
        "isVerified": profile.is_verified,
        "hourlyRate": float(profile.hourly_rate) if profile.hourly_rate is not None else None,
        "rating": round(float(getattr(profile, "avg_rating", None) or 0), 2),
        "projectsCount": getattr(profile, "active_projects_count", 0) or 0,
    }
    if detail:
        data.update({
            "experience": profile.experience,
            "qualifications": profile.qualifications or [],
            "languages": profile.languages or [],
            "teachingMethods": profile.teaching_methods or [],
            "links": {
                "website": profile.website,
                "linkedin": profile.linkedin,
                "github": profile.github,
                "twitter": profile.twitter,
                "instagram": profile.instagram,
                "portfolio": profile.portfolio,
            },
        })
    return data
