import json
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from accounts.models import CustomUser, MentorProfile
from billing.models import SystemConfig
from projects.models import CategorySuggestion, Enrollment, Project


def make_mentor(email):
    user = CustomUser.objects.create_user(email=email, password="pw", role="mentor")
    return MentorProfile.objects.create(user=user, first_name=email.split("@")[0])


def make_project(mentor, title="Build a compiler"):
    return Project.objects.create(
        mentor=mentor, title=title, description="...", category="technology", purposes=["career"],
        difficulty="advanced", duration=6, price=Decimal("299.00"), max_students=10,
    )


class AdminConsoleAccessTests(TestCase):
    def test_anonymous_is_unauthorized(self):
        response = self.client.get(reverse("dashboard_admin:commission_rate"))
        self.assertEqual(response.status_code, 401)

    def test_mentor_is_forbidden(self):
        mentor = make_mentor("ada@example.com")
        self.client.force_login(mentor.user)
        response = self.client.post(reverse("dashboard_admin:mentor_suppress", args=[mentor.id]))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["message"], "Admin access required")


class CommissionRateTests(TestCase):
    def setUp(self):
        self.admin = CustomUser.objects.create_superuser(email="root@example.com", password="pw")
        self.client.force_login(self.admin)
        self.url = reverse("dashboard_admin:commission_rate")

    def _put(self, payload):
        return self.client.put(self.url, data=json.dumps(payload), content_type="application/json")

    def test_default_rate(self):
        self.assertEqual(self.client.get(self.url).json(), {"rate": 0.085})

    def test_update_rate(self):
        self.assertEqual(self._put({"rate": 0.1}).status_code, 200)
        self.assertEqual(self.client.get(self.url).json()["rate"], 0.1)

    def test_out_of_range_rate_is_rejected(self):
        self._put({"rate": 0.12})
        for rate in (-0.01, 1.0, "abc", None):
            response = self._put({"rate": rate})
            self.assertEqual(response.status_code, 400)
        self.assertEqual(SystemConfig.objects.get(key="COMMISSION_RATE").value, "0.12")


class ListingModerationTests(TestCase):
    def setUp(self):
        self.admin = CustomUser.objects.create_user(email="admin@example.com", password="pw", role="admin")
        self.client.force_login(self.admin)
        self.ada = make_mentor("ada@example.com")
        self.grace = make_mentor("grace@example.com")
        self.ada_projects = [make_project(self.ada, "One"), make_project(self.ada, "Two")]
        self.grace_project = make_project(self.grace, "COBOL")

    def _patch(self, project_id, payload):
        return self.client.patch(
            reverse("dashboard_admin:project_visibility", args=[project_id]),
            data=json.dumps(payload),
            content_type="application/json",
        )

    def test_patch_visibility_both_ways(self):
        project = self.ada_projects[0]
        response = self._patch(project.id, {"isActive": False})
        self.assertEqual(response.json()["visibility"], "suppressed")
        self.assertFalse(Project.objects.discoverable().filter(id=project.id).exists())

        response = self._patch(project.id, {"isActive": True})
        self.assertEqual(response.json()["visibility"], "active")
        self.assertTrue(Project.objects.discoverable().filter(id=project.id).exists())

    def test_patch_rejects_non_boolean(self):
        self.assertEqual(self._patch(self.grace_project.id, {"isActive": "false"}).status_code, 400)
        self.grace_project.refresh_from_db()
        self.assertTrue(self.grace_project.is_active)

    def test_patch_unknown_project(self):
        self.assertEqual(self._patch(999999, {"isActive": False}).status_code, 404)

    def test_bulk_suppress_only_touches_that_mentor(self):
        response = self.client.post(reverse("dashboard_admin:mentor_suppress", args=[self.ada.id]))

        self.assertEqual(response.json()["updated"], 2)
        self.assertFalse(Project.objects.filter(mentor=self.ada, is_active=True).exists())
        self.grace_project.refresh_from_db()
        self.assertTrue(self.grace_project.is_active)

    def test_bulk_restore(self):
        Project.objects.update(is_active=False)

        response = self.client.post(reverse("dashboard_admin:mentor_restore", args=[self.ada.id]))

        self.assertEqual(response.json()["updated"], 2)
        self.assertEqual(Project.objects.filter(is_active=True).count(), 2)
        self.grace_project.refresh_from_db()
        self.assertFalse(self.grace_project.is_active)

    def test_bulk_unknown_mentor(self):
        response = self.client.post(reverse("dashboard_admin:mentor_suppress", args=[999999]))
        self.assertEqual(response.status_code, 404)


class AdminReportTests(TestCase):
    def setUp(self):
        self.admin = CustomUser.objects.create_superuser(email="root@example.com", password="pw")
        self.client.force_login(self.admin)
        self.mentor = make_mentor("ada@example.com")
        self.project = make_project(self.mentor)
        student = CustomUser.objects.create_user(email="student@example.com", password="pw")
        Enrollment.objects.create(
            project=self.project, student=student, status="confirmed",
            amount_cents=29900, application_fee_cents=2542, stripe_checkout_session_id="cs_1",
        )
        Enrollment.objects.create(
            project=self.project, student=self.admin, status="cancelled",
            amount_cents=29900, application_fee_cents=2542, stripe_checkout_session_id="cs_2",
        )

    def test_mentor_earnings_count_paid_enrollments_only(self):
        hidden = make_project(self.mentor, "Hidden")
        Project.objects.filter(id=hidden.id).update(is_active=False)

        mentor = self.client.get(reverse("dashboard_admin:mentors")).json()["mentors"][0]

        self.assertEqual(mentor["totalProjects"], 2)
        self.assertEqual(mentor["activeProjectsCount"], 1)
        self.assertEqual(mentor["grossCents"], 29900)
        self.assertEqual(mentor["platformFeeCents"], 2542)
        self.assertEqual(mentor["earningsCents"], 27358)

    def test_statistics(self):
        Project.objects.filter(id=self.project.id).update(is_active=False)

        data = self.client.get(reverse("dashboard_admin:statistics")).json()

        self.assertEqual(data["users"]["mentors"], 1)
        self.assertEqual(data["users"]["admins"], 1)
        self.assertEqual(data["projects"]["pendingReview"], 1)
        self.assertEqual(data["enrollments"], {"total": 2, "paid": 1})
        self.assertEqual(data["revenue"]["platformFeeCents"], 2542)
        self.assertEqual(data["revenue"]["commissionRate"], 0.085)


class CategorySuggestionReviewTests(TestCase):
    def setUp(self):
        self.url = reverse("dashboard_admin:category_suggestions")
        self.older = CategorySuggestion.objects.create(name="Robotics", contact_email="a@example.com")
        self.newer = CategorySuggestion.objects.create(name="Cooking", contact_email="b@example.com")
        CategorySuggestion.objects.filter(id=self.older.id).update(created_at=timezone.now() - timedelta(days=1))

    def test_admin_lists_newest_first(self):
        self.client.force_login(CustomUser.objects.create_superuser(email="root@example.com", password="pw"))
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, 200)
        suggestions = response.json()["suggestions"]
        self.assertEqual([s["id"] for s in suggestions], [self.newer.id, self.older.id])
        self.assertEqual(suggestions[0]["contactEmail"], "b@example.com")
        self.assertEqual(suggestions[0]["status"], "pending")

    def test_non_admin_is_refused(self):
        self.assertEqual(self.client.get(self.url).status_code, 401)
        student = CustomUser.objects.create_user(email="s@example.com", password="pw")
        self.client.force_login(student)
        self.assertEqual(self.client.get(self.url).status_code, 403)
