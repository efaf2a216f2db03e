import json
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse

from accounts.models import CustomUser, MentorProfile
from journal.models import JournalPost, MentorSubscription
from projects.models import Enrollment, Project


def make_mentor(email):
    user = CustomUser.objects.create_user(email=email, password="pw", role="mentor")
    return MentorProfile.objects.create(user=user, first_name="Ada", last_name="Lovelace")


PROJECT_PAYLOAD = {
    "title": "Build a compiler",
    "description": "From tokens to bytecode.",
    "shortDescription": "Six weeks, one language.",
    "category": "technology",
    "difficulty": "advanced",
    "duration": 6,
    "price": "299.00",
    "maxStudents": 10,
    "purposes": ["career"],
    "objectives": ["Lexer", "  ", "Parser"],
}


class MentorProjectsTests(TestCase):
    def setUp(self):
        self.mentor = make_mentor("ada@example.com")
        self.client.force_login(self.mentor.user)
        self.url = reverse("dashboard_mentor:projects")

    def _post(self, payload):
        return self.client.post(self.url, data=json.dumps(payload), content_type="application/json")

    def test_create_project(self):
        response = self._post(PROJECT_PAYLOAD)

        self.assertEqual(response.status_code, 201)
        project = Project.objects.get(id=response.json()["projectId"])
        self.assertEqual(project.mentor, self.mentor)
        self.assertTrue(project.is_active)
        self.assertEqual(project.price, Decimal("299.00"))
        self.assertEqual(project.objectives, ["Lexer", "Parser"])

    def test_create_requires_a_purpose(self):
        response = self._post({**PROJECT_PAYLOAD, "purposes": []})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "At least one purpose must be selected")

    def test_create_requires_fields(self):
        payload = dict(PROJECT_PAYLOAD)
        del payload["title"]
        response = self._post(payload)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Missing required fields")

    def test_list_includes_suppressed_projects_and_enrollments(self):
        project = Project.objects.get(id=self._post(PROJECT_PAYLOAD).json()["projectId"])
        Project.objects.filter(id=project.id).update(is_active=False)
        student = CustomUser.objects.create_user(email="student@example.com", password="pw")
        Enrollment.objects.create(project=project, student=student, status="confirmed")

        projects = self.client.get(self.url).json()["projects"]

        self.assertEqual(len(projects), 1)
        self.assertFalse(projects[0]["isActive"])
        self.assertEqual(projects[0]["visibility"], "suppressed")
        self.assertEqual(projects[0]["enrollments"][0]["studentEmail"], "student@example.com")

    def test_students_cannot_use_mentor_dashboard(self):
        student = CustomUser.objects.create_user(email="student@example.com", password="pw")
        self.client.force_login(student)
        self.assertEqual(self.client.get(self.url).status_code, 404)

    def test_anonymous_is_unauthorized(self):
        self.client.logout()
        self.assertEqual(self.client.get(self.url).status_code, 401)


class MentorJournalTests(TestCase):
    def setUp(self):
        self.mentor = make_mentor("ada@example.com")
        self.client.force_login(self.mentor.user)

    def test_create_and_list_posts(self):
        response = self.client.post(
            reverse("dashboard_mentor:journal_posts"),
            data=json.dumps({"title": "Week 1", "content": "Tokens.", "isPublic": False}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 201)

        posts = self.client.get(reverse("dashboard_mentor:journal_posts")).json()["posts"]
        self.assertEqual([p["title"] for p in posts], ["Week 1"])

    def test_title_and_content_required(self):
        response = self.client.post(
            reverse("dashboard_mentor:journal_posts"),
            data=json.dumps({"title": "Week 1"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 400)

    def test_cannot_delete_another_mentors_post(self):
        other = make_mentor("grace@example.com")
        post = JournalPost.objects.create(mentor=other, title="Mine", content="...")

        response = self.client.delete(reverse("dashboard_mentor:journal_post_delete", args=[post.id]))

        self.assertEqual(response.status_code, 404)
        self.assertTrue(JournalPost.objects.filter(id=post.id).exists())

    def test_delete_own_post(self):
        post = JournalPost.objects.create(mentor=self.mentor, title="Mine", content="...")
        response = self.client.delete(reverse("dashboard_mentor:journal_post_delete", args=[post.id]))
        self.assertEqual(response.status_code, 200)
        self.assertFalse(JournalPost.objects.exists())

    def test_subscribers_lists_active_only(self):
        active = CustomUser.objects.create_user(email="a@example.com", password="pw")
        lapsed = CustomUser.objects.create_user(email="b@example.com", password="pw")
        MentorSubscription.objects.create(mentor=self.mentor, student=active)
        MentorSubscription.objects.create(mentor=self.mentor, student=lapsed, is_active=False)

        subscribers = self.client.get(reverse("dashboard_mentor:subscribers")).json()["subscribers"]

        self.assertEqual([s["email"] for s in subscribers], ["a@example.com"])


class MentorStudentsAndProfileTests(TestCase):
    def setUp(self):
        self.mentor = make_mentor("ada@example.com")
        self.client.force_login(self.mentor.user)

    def test_students_grouped_by_student(self):
        student = CustomUser.objects.create_user(email="student@example.com", password="pw")
        for title in ("One", "Two"):
            project = Project.objects.create(
                mentor=self.mentor, title=title, description="...", category="technology",
                difficulty="beginner", duration=1, price=Decimal("10.00"), max_students=5,
            )
            Enrollment.objects.create(project=project, student=student, status="confirmed")

        students = self.client.get(reverse("dashboard_mentor:students")).json()["students"]

        self.assertEqual(len(students), 1)
        self.assertEqual(sorted(p["title"] for p in students[0]["projects"]), ["One", "Two"])

    def test_patch_profile(self):
        response = self.client.patch(
            reverse("dashboard_mentor:profile"),
            data=json.dumps({"bio": "  Compilers.  ", "specialties": ["Rust", ""], "hourlyRate": "80"}),
            content_type="application/json",
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["bio"], "Compilers.")
        self.assertEqual(data["specialties"], ["Rust"])
        self.assertEqual(data["hourlyRate"], 80.0)
        self.mentor.refresh_from_db()
        self.assertEqual(self.mentor.hourly_rate, Decimal("80.00"))

    def test_patch_rejects_bad_rate(self):
        response = self.client.patch(
            reverse("dashboard_mentor:profile"),
            data=json.dumps({"hourlyRate": "lots"}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 400)
