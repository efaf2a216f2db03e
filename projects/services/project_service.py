"""
Project creation and read-side shaping shared by the public and mentor views.
"""
from decimal import Decimal, InvalidOperation

from django.core.exceptions import ValidationError
from django.core.validators import validate_email
from django.db.models import Avg, Count

from projects.models import CategorySuggestion, Project

REQUIRED_FIELDS = ("title", "description", "category", "difficulty", "duration", "price", "maxStudents")
LIST_FIELDS = ("objectives", "prerequisites", "tools", "deliverables")


class ProjectValidationError(Exception):
    """Raised when project input is invalid; message is safe to show to user."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _clean_list(values):
    if not values:
        return []
    if not isinstance(values, list):
        raise ProjectValidationError("List fields must be arrays of strings.")
    return [str(v).strip() for v in values if str(v).strip()]


def _positive_int(value, field_name):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ProjectValidationError(f"{field_name} must be a whole number.")
    if number <= 0:
        raise ProjectValidationError(f"{field_name} must be greater than 0.")
    return number


def create_project(mentor_profile, data: dict) -> Project:
    """
    Create a project owned by mentor_profile from a camelCase JSON payload.
    Initial visibility comes from the model default (PROJECTS_AUTO_PUBLISH).
    """
    if any(not data.get(field) for field in REQUIRED_FIELDS):
        raise ProjectValidationError("Missing required fields")
    purposes = data.get("purposes") or []
    if not purposes:
        raise ProjectValidationError("At least one purpose must be selected")

    valid_purposes = {key for key, _ in Project.PURPOSE_CHOICES}
    if any(p not in valid_purposes for p in purposes):
        raise ProjectValidationError("Unknown purpose.")
    if data["category"] not in {key for key, _ in Project.CATEGORY_CHOICES}:
        raise ProjectValidationError("Unknown category.")
    if data["difficulty"] not in {key for key, _ in Project.DIFFICULTY_CHOICES}:
        raise ProjectValidationError("Unknown difficulty.")
    learning_purpose = data.get("learningPurpose") or ""
    if learning_purpose and learning_purpose not in valid_purposes:
        raise ProjectValidationError("Unknown learning purpose.")

    try:
        price = Decimal(str(data["price"])).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        raise ProjectValidationError("price must be a number.")
    if price <= 0:
        raise ProjectValidationError("price must be greater than 0.")

    return Project.objects.create(
        mentor=mentor_profile,
        title=str(data["title"]).strip()[:200],
        description=data["description"],
        short_description=data.get("shortDescription") or "",
        category=data["category"],
        purposes=purposes,
        learning_purpose=learning_purpose,
        difficulty=data["difficulty"],
        duration=_positive_int(data["duration"], "duration"),
        price=price,
        currency=(data.get("currency") or "usd").lower()[:10],
        max_students=_positive_int(data["maxStudents"], "maxStudents"),
        **{field: _clean_list(data.get(field)) for field in LIST_FIELDS},
    )


def with_ratings(queryset):
    """Annotate projects with their average review rating and review count."""
    return queryset.annotate(avg_rating=Avg("reviews__rating"), review_count=Count("reviews", distinct=True))


def serialize_project(project, detail=False) -> dict:
    data = {
        "id": project.id,
        "title": project.title,
        "shortDescription": project.short_description,
        "category": project.category,
        "difficulty": project.difficulty,
        "duration": project.duration,
        "price": float(project.price),
        "currency": project.currency,
        "isFeatured": project.is_featured,
        "maxStudents": project.max_students,
        "currentStudents": project.current_students,
        "rating": float(getattr(project, "avg_rating", None) or 0),
        "totalReviews": getattr(project, "review_count", 0) or 0,
        "createdAt": project.created_at.isoformat(),
    }
    if detail:
        data.update({
            "description": project.description,
            "purposes": project.purposes,
            "learningPurpose": project.learning_purpose,
            "objectives": project.objectives,
            "prerequisites": project.prerequisites,
            "tools": project.tools,
            "deliverables": project.deliverables,
        })
    return data


def submit_category_suggestion(data: dict) -> CategorySuggestion:
    """Store a pending category suggestion. Name and contact email are required."""
    name = str(data.get("name") or "").strip()
    contact_email = str(data.get("contactEmail") or "").strip()
    if not name or not contact_email:
        raise ProjectValidationError("Name and email are required")
    try:
        validate_email(contact_email)
    except ValidationError:
        raise ProjectValidationError("Invalid email address")
    return CategorySuggestion.objects.create(
        name=name[:100],
        description=str(data.get("description") or ""),
        contact_email=contact_email,
        contact_name=str(data.get("contactName") or "").strip()[:200],
        comment=str(data.get("comment") or ""),
    )


def serialize_category_suggestion(suggestion) -> dict:
    return {
        "id": suggestion.id,
        "name": suggestion.name,
        "description": suggestion.description,
        "contactEmail": suggestion.contact_email,
        "contactName": suggestion.contact_name,
        "comment": suggestion.comment,
        "status": suggestion.status,
        "createdAt": suggestion.created_at.isoformat(),
    }
