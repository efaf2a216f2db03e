import json
from datetime import timedelta
from decimal import Decimal

from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from accounts.models import CustomUser, MentorProfile
from journal.models import JournalPost, MentorSubscription, PostView
from projects.models import CategorySuggestion, Project, Review
from projects.services.visibility_service import admin_set_visibility, mentor_bulk_suppress


def make_mentor(email, first_name="Ada", last_name="Lovelace"):
    user = CustomUser.objects.create_user(email=email, password="pw", role="mentor")
    return MentorProfile.objects.create(user=user, first_name=first_name, last_name=last_name)


def make_project(mentor, title="Build a compiler", **overrides):
    values = dict(
        title=title,
        description="From tokens to bytecode.",
        category="technology",
        purposes=["career"],
        difficulty="advanced",
        duration=6,
        price=Decimal("299.00"),
        max_students=10,
    )
    values.update(overrides)
    return Project.objects.create(mentor=mentor, **values)


class PublicProjectTests(TestCase):
    def setUp(self):
        self.mentor = make_mentor("ada@example.com")
        self.project = make_project(self.mentor)

    def _listed_ids(self):
        response = self.client.get(reverse("web:project_list"))
        self.assertEqual(response.status_code, 200)
        return [p["id"] for p in response.json()["projects"]]

    def test_new_project_is_listed_immediately(self):
        self.assertTrue(self.project.is_active)
        self.assertIn(self.project.id, self._listed_ids())

    @override_settings(PROJECTS_AUTO_PUBLISH=False)
    def test_new_project_hidden_when_auto_publish_is_off(self):
        hidden = make_project(self.mentor, title="Awaiting review")
        self.assertFalse(hidden.is_active)
        self.assertNotIn(hidden.id, self._listed_ids())

    def test_admin_suppress_and_restore(self):
        admin_set_visibility(self.project.id, False)
        self.assertNotIn(self.project.id, self._listed_ids())
        detail = self.client.get(reverse("web:project_detail", args=[self.project.id]))
        self.assertEqual(detail.status_code, 404)

        admin_set_visibility(self.project.id, True)
        self.assertIn(self.project.id, self._listed_ids())
        detail = self.client.get(reverse("web:project_detail", args=[self.project.id]))
        self.assertEqual(detail.status_code, 200)

    def test_list_is_newest_first_with_ratings(self):
        newer = make_project(self.mentor, title="Write a shell")
        Project.objects.filter(id=newer.id).update(created_at=timezone.now() + timedelta(hours=1))
        student = CustomUser.objects.create_user(email="s@example.com", password="pw")
        Review.objects.create(project=self.project, student=student, rating=4)

        projects = self.client.get(reverse("web:project_list")).json()["projects"]

        self.assertEqual([p["id"] for p in projects], [newer.id, self.project.id])
        self.assertEqual(projects[1]["rating"], 4.0)
        self.assertEqual(projects[1]["totalReviews"], 1)

    def test_category_filter(self):
        design = make_project(self.mentor, title="Logo design", category="design")
        response = self.client.get(reverse("web:project_list"), {"category": "design"})
        self.assertEqual([p["id"] for p in response.json()["projects"]], [design.id])


class PublicMentorTests(TestCase):
    def setUp(self):
        self.ada = make_mentor("ada@example.com")
        self.grace = make_mentor("grace@example.com", first_name="Grace", last_name="Hopper")
        self.ada_project = make_project(self.ada)
        make_project(self.grace, title="COBOL for fun")

    def test_only_mentors_with_active_projects_are_listed(self):
        mentor_bulk_suppress(self.grace.id)

        mentors = self.client.get(reverse("web:mentor_list")).json()["mentors"]

        self.assertEqual([m["id"] for m in mentors], [self.ada.id])
        self.assertEqual(mentors[0]["projectsCount"], 1)

    def test_search_matches_full_name_in_either_order(self):
        response = self.client.get(reverse("web:mentor_list"), {"q": "Hopper Grace"})
        self.assertEqual([m["id"] for m in response.json()["mentors"]], [self.grace.id])

    def test_detail_lists_only_active_projects(self):
        hidden = make_project(self.ada, title="Hidden")
        admin_set_visibility(hidden.id, False)

        data = self.client.get(reverse("web:mentor_detail", args=[self.ada.id])).json()

        self.assertEqual([p["id"] for p in data["projects"]], [self.ada_project.id])

    def test_detail_of_fully_suppressed_mentor_is_404(self):
        mentor_bulk_suppress(self.grace.id)
        response = self.client.get(reverse("web:mentor_detail", args=[self.grace.id]))
        self.assertEqual(response.status_code, 404)


class JournalFeedTests(TestCase):
    def setUp(self):
        self.mentor = make_mentor("ada@example.com")
        self.student = CustomUser.objects.create_user(email="student@example.com", password="pw")
        self.public = JournalPost.objects.create(mentor=self.mentor, title="Hello", content="...", is_public=True)
        self.private = JournalPost.objects.create(mentor=self.mentor, title="Members", content="...", is_public=False)

    def _feed_ids(self):
        response = self.client.get(reverse("web:mentor_posts", args=[self.mentor.id]))
        return {p["id"] for p in response.json()["posts"]}

    def test_anonymous_sees_public_posts_only(self):
        self.assertEqual(self._feed_ids(), {self.public.id})

    def test_subscriber_sees_private_posts(self):
        MentorSubscription.objects.create(mentor=self.mentor, student=self.student)
        self.client.force_login(self.student)
        self.assertEqual(self._feed_ids(), {self.public.id, self.private.id})

    def test_feed_is_limited_to_latest_five(self):
        for i in range(6):
            JournalPost.objects.create(mentor=self.mentor, title=f"Post {i}", content="...", is_public=True)
        response = self.client.get(reverse("web:mentor_posts", args=[self.mentor.id]))
        self.assertEqual(len(response.json()["posts"]), 5)

    def test_private_post_detail_requires_subscription(self):
        response = self.client.get(reverse("web:post_detail", args=[self.private.id]))
        self.assertEqual(response.status_code, 403)
        self.assertFalse(PostView.objects.exists())

    def test_post_detail_records_view(self):
        response = self.client.get(reverse("web:post_detail", args=[self.public.id]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["views"], 1)

    def test_subscribe_then_unsubscribe(self):
        self.client.force_login(self.student)
        url = reverse("web:mentor_subscribe", args=[self.mentor.id])

        response = self.client.post(url)
        self.assertEqual(response.json(), {"subscribed": True, "subscribers": 1})

        response = self.client.delete(url)
        self.assertEqual(response.json(), {"subscribed": False, "subscribers": 0})
        self.assertFalse(MentorSubscription.objects.get(mentor=self.mentor, student=self.student).is_active)

    def test_subscribe_requires_login(self):
        response = self.client.post(reverse("web:mentor_subscribe", args=[self.mentor.id]))
        self.assertEqual(response.status_code, 401)

    def test_subscribe_body_must_be_an_object(self):
        self.client.force_login(self.student)
        url = reverse("web:mentor_subscribe", args=[self.mentor.id])
        response = self.client.post(url, data="[]", content_type="application/json")
        self.assertEqual(response.status_code, 400)
        self.assertFalse(MentorSubscription.objects.exists())

    def test_subscribe_flag_must_be_boolean(self):
        self.client.force_login(self.student)
        url = reverse("web:mentor_subscribe", args=[self.mentor.id])
        response = self.client.post(url, data=json.dumps({"subscribe": "false"}), content_type="application/json")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "subscribe must be a boolean")
        self.assertFalse(MentorSubscription.objects.exists())

    def test_post_with_false_flag_unsubscribes(self):
        MentorSubscription.objects.create(mentor=self.mentor, student=self.student)
        self.client.force_login(self.student)
        url = reverse("web:mentor_subscribe", args=[self.mentor.id])
        response = self.client.post(url, data=json.dumps({"subscribe": False}), content_type="application/json")
        self.assertEqual(response.json(), {"subscribed": False, "subscribers": 0})


class CategorySuggestionTests(TestCase):
    def _post(self, payload):
        return self.client.post(
            reverse("web:suggest_category"), data=json.dumps(payload), content_type="application/json"
        )

    def test_anyone_can_suggest_a_category(self):
        response = self._post({
            "name": "Robotics",
            "description": "Hardware projects",
            "contactEmail": "visitor@example.com",
            "contactName": "Vi",
        })
        self.assertEqual(response.status_code, 201)
        suggestion = CategorySuggestion.objects.get()
        self.assertEqual(response.json(), {
            "message": "Category suggestion submitted successfully",
            "suggestionId": suggestion.id,
        })
        self.assertEqual(suggestion.status, "pending")
        self.assertEqual(suggestion.contact_name, "Vi")

    def test_name_and_email_are_required(self):
        for payload in ({"contactEmail": "visitor@example.com"}, {"name": "Robotics"}, {"name": " ", "contactEmail": "v@example.com"}):
            response = self._post(payload)
            self.assertEqual(response.status_code, 400)
            self.assertEqual(response.json()["message"], "Name and email are required")
        self.assertFalse(CategorySuggestion.objects.exists())

    def test_bad_email_is_rejected(self):
        response = self._post({"name": "Robotics", "contactEmail": "not-an-email"})
        self.assertEqual(response.status_code, 400)
        self.assertFalse(CategorySuggestion.objects.exists())
