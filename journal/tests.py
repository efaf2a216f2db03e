from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from accounts.models import CustomUser, MentorProfile
from journal.models import JournalPost, MentorSubscription
from journal.services import journal_service


class JournalServiceTests(TestCase):
    def setUp(self):
        user = CustomUser.objects.create_user(email="ada@example.com", password="pw", role="mentor")
        self.mentor = MentorProfile.objects.create(user=user)
        self.student = CustomUser.objects.create_user(email="s@example.com", password="pw")
        self.public = journal_service.create_post(self.mentor, {"title": "Hello", "content": "...", "isPublic": True})
        self.private = journal_service.create_post(self.mentor, {"title": "Members", "content": "..."})

    def _visible(self, viewer):
        return set(journal_service.posts_visible_to(self.mentor, viewer).values_list("id", flat=True))

    def test_posts_are_private_by_default(self):
        self.assertFalse(self.private.is_public)

    def test_create_post_requires_title_and_content(self):
        with self.assertRaises(journal_service.JournalError):
            journal_service.create_post(self.mentor, {"title": "  ", "content": "..."})

    def test_visibility_by_viewer(self):
        both = {self.public.id, self.private.id}
        self.assertEqual(self._visible(AnonymousUser()), {self.public.id})
        self.assertEqual(self._visible(self.student), {self.public.id})
        self.assertEqual(self._visible(self.mentor.user), both)

        journal_service.set_subscription(self.mentor, self.student, True)
        self.assertEqual(self._visible(self.student), both)

    def test_resubscribe_reactivates_the_same_row(self):
        journal_service.set_subscription(self.mentor, self.student, True)
        journal_service.set_subscription(self.mentor, self.student, False)
        self.assertEqual(journal_service.subscriber_count(self.mentor), 0)

        journal_service.set_subscription(self.mentor, self.student, True)

        self.assertEqual(MentorSubscription.objects.count(), 1)
        self.assertEqual(list(journal_service.active_subscribers(self.mentor)), list(MentorSubscription.objects.all()))

    def test_views_are_counted(self):
        journal_service.record_view(self.public, AnonymousUser())
        journal_service.record_view(self.public, self.student)
        post = journal_service.posts_visible_to(self.mentor, None).get(id=self.public.id)
        self.assertEqual(journal_service.serialize_post(post)["views"], 2)

    def test_delete_is_scoped_to_owner(self):
        other_user = CustomUser.objects.create_user(email="grace@example.com", password="pw", role="mentor")
        other = MentorProfile.objects.create(user=other_user)
        with self.assertRaises(JournalPost.DoesNotExist):
            journal_service.delete_post(other, self.public.id)
        journal_service.delete_post(self.mentor, self.public.id)
        self.assertFalse(JournalPost.objects.filter(id=self.public.id).exists())
