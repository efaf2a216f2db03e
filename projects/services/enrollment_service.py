"""
Enrollment confirmation. Called from the Stripe checkout webhook once the
student has paid; keeps current_students <= max_students.
"""
import logging

from django.db import transaction

from projects.models import Enrollment, Project

logger = logging.getLogger(__name__)


class EnrollmentError(Exception):
    """Raised when an enrollment cannot be confirmed; message is safe to show to user."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@transaction.atomic()
def confirm_paid_enrollment(
    *,
    project_id,
    student_id,
    checkout_session_id: str,
    amount_cents: int,
    application_fee_cents: int,
    currency: str = "usd",
) -> Enrollment:
    """
    Create or confirm the enrollment paid through checkout_session_id.

    Idempotent: a second call with the same checkout session returns the
    existing enrollment and does not take another seat.

    Raises:
        EnrollmentError: the project is full.
        Project.DoesNotExist: unknown project.
    """
    project = Project.objects.select_for_update().get(id=project_id)

    existing = Enrollment.objects.filter(stripe_checkout_session_id=checkout_session_id).first()
    if existing and existing.status == "confirmed":
        return existing

    if project.current_students >= project.max_students:
        raise EnrollmentError("This project is full.")

    enrollment, _ = Enrollment.objects.update_or_create(
        stripe_checkout_session_id=checkout_session_id,
        defaults={
            "project": project,
            "student_id": student_id,
            "status": "confirmed",
            "amount_cents": amount_cents,
            "application_fee_cents": application_fee_cents,
            "currency": currency,
        },
    )
    project.current_students += 1
    project.save(update_fields=["current_students"])
    logger.info(
        "enrollment: confirmed project=%s student=%s seats=%s/%s",
        project.id, student_id, project.current_students, project.max_students,
    )
    return enrollment
