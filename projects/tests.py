from decimal import Decimal

from django.test import TestCase

from accounts.models import CustomUser, MentorProfile
from projects.models import Enrollment, Project
from projects.services import visibility_service
from projects.services.enrollment_service import EnrollmentError, confirm_paid_enrollment
from projects.services.project_service import ProjectValidationError, create_project


def make_mentor(email):
    user = CustomUser.objects.create_user(email=email, password="pw", role="mentor")
    return MentorProfile.objects.create(user=user)


def make_project(mentor, title="Build a compiler", max_students=10):
    return Project.objects.create(
        mentor=mentor, title=title, description="...", category="technology", purposes=["career"],
        difficulty="advanced", duration=6, price=Decimal("299.00"), max_students=max_students,
    )


class VisibilityTests(TestCase):
    def setUp(self):
        self.ada = make_mentor("ada@example.com")
        self.grace = make_mentor("grace@example.com")
        self.project = make_project(self.ada)

    def test_new_project_is_discoverable(self):
        self.assertEqual(visibility_service.visibility_state(self.project), visibility_service.ACTIVE)
        self.assertIn(self.project, visibility_service.discoverable())

    def test_admin_set_visibility_is_idempotent_both_ways(self):
        for value in (False, False, True, True):
            project = visibility_service.admin_set_visibility(self.project.id, value)
            self.assertEqual(project.is_active, value)
            self.assertEqual(Project.objects.discoverable().filter(id=self.project.id).exists(), value)

    def test_admin_set_visibility_requires_bool(self):
        with self.assertRaises(visibility_service.VisibilityError):
            visibility_service.admin_set_visibility(self.project.id, 0)

    def test_admin_set_visibility_unknown_project(self):
        with self.assertRaises(Project.DoesNotExist):
            visibility_service.admin_set_visibility(999999, False)

    def test_bulk_suppress_scope(self):
        second = make_project(self.ada, "Second")
        other = make_project(self.grace, "Other")

        updated = visibility_service.mentor_bulk_suppress(self.ada.id)

        self.assertEqual(updated, 2)
        self.assertFalse(Project.objects.filter(id__in=[self.project.id, second.id], is_active=True).exists())
        other.refresh_from_db()
        self.assertTrue(other.is_active)

    def test_bulk_restore_reactivates_individually_hidden_projects(self):
        visibility_service.admin_set_visibility(self.project.id, False)
        self.assertEqual(visibility_service.mentor_bulk_restore(self.ada.id), 1)
        self.project.refresh_from_db()
        self.assertTrue(self.project.is_active)

    def test_bulk_on_mentor_without_projects(self):
        self.assertEqual(visibility_service.mentor_bulk_suppress(self.grace.id), 0)

    def test_bulk_unknown_mentor(self):
        with self.assertRaises(MentorProfile.DoesNotExist):
            visibility_service.mentor_bulk_suppress(999999)


class EnrollmentCapacityTests(TestCase):
    def setUp(self):
        self.project = make_project(make_mentor("ada@example.com"), max_students=1)
        self.first = CustomUser.objects.create_user(email="one@example.com", password="pw")
        self.second = CustomUser.objects.create_user(email="two@example.com", password="pw")

    def _confirm(self, student, session_id):
        return confirm_paid_enrollment(
            project_id=self.project.id,
            student_id=student.id,
            checkout_session_id=session_id,
            amount_cents=29900,
            application_fee_cents=2542,
        )

    def test_webhook_replay_takes_one_seat(self):
        first = self._confirm(self.first, "cs_1")
        again = self._confirm(self.first, "cs_1")

        self.assertEqual(first.id, again.id)
        self.project.refresh_from_db()
        self.assertEqual(self.project.current_students, 1)

    def test_full_project_refuses_enrollment(self):
        self._confirm(self.first, "cs_1")
        with self.assertRaises(EnrollmentError):
            self._confirm(self.second, "cs_2")
        self.assertEqual(Enrollment.objects.count(), 1)
        self.project.refresh_from_db()
        self.assertFalse(self.project.has_capacity)


class CreateProjectTests(TestCase):
    def setUp(self):
        self.mentor = make_mentor("ada@example.com")
        self.payload = {
            "title": "Build a compiler",
            "description": "From tokens to bytecode.",
            "category": "technology",
            "difficulty": "advanced",
            "duration": 6,
            "price": 299.5,
            "maxStudents": 10,
            "purposes": ["career", "leisure"],
            "tools": ["Python", " "],
        }

    def test_valid_payload(self):
        project = create_project(self.mentor, self.payload)
        self.assertEqual(project.price, Decimal("299.50"))
        self.assertEqual(project.price_cents, 29950)
        self.assertEqual(project.tools, ["Python"])
        self.assertEqual(project.current_students, 0)

    def test_invalid_payloads(self):
        cases = [
            {"purposes": []},
            {"category": "cooking"},
            {"difficulty": "expert"},
            {"price": "-1"},
            {"price": "free"},
            {"maxStudents": "ten"},
            {"duration": -2},
        ]
        for override in cases:
            with self.subTest(override=override):
                with self.assertRaises(ProjectValidationError):
                    create_project(self.mentor, {**self.payload, **override})
        self.assertFalse(Project.objects.exists())
