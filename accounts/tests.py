from types import SimpleNamespace

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase

from accounts.models import CustomUser, MentorProfile, StudentProfile
from accounts.permissions import (
    can_edit_listing,
    can_manage_payout_account,
    can_manage_platform_config,
    can_moderate_listings,
    is_admin,
    is_mentor,
)


class CustomUserManagerTests(TestCase):
    def test_email_is_normalized(self):
        user = CustomUser.objects.create_user(email="Ada@Example.COM ", password="pw")
        self.assertEqual(user.email, "ada@example.com")
        self.assertEqual(user.role, "student")

    def test_superuser_gets_admin_role(self):
        user = CustomUser.objects.create_superuser(email="root@example.com", password="pw")
        self.assertEqual(user.role, "admin")
        self.assertTrue(is_admin(user))

    def test_display_name_falls_back(self):
        user = CustomUser.objects.create_user(email="s@example.com", password="pw")
        self.assertEqual(user.display_name, "Anonymous")
        StudentProfile.objects.create(user=user, first_name="Sam")
        user = CustomUser.objects.get(id=user.id)
        self.assertEqual(user.display_name, "Sam")


class AuthorizationPolicyTests(TestCase):
    def setUp(self):
        self.admin = CustomUser.objects.create_user(email="admin@example.com", password="pw", role="admin")
        mentor_user = CustomUser.objects.create_user(email="ada@example.com", password="pw", role="mentor")
        self.mentor = MentorProfile.objects.create(user=mentor_user, stripe_account_id="acct_ada")
        other_user = CustomUser.objects.create_user(email="grace@example.com", password="pw", role="mentor")
        self.other = MentorProfile.objects.create(user=other_user, stripe_account_id="acct_grace")
        self.student = CustomUser.objects.create_user(email="s@example.com", password="pw")

    def test_only_admins_moderate_and_configure(self):
        self.assertTrue(can_moderate_listings(self.admin))
        self.assertTrue(can_manage_platform_config(self.admin))
        for actor in (self.mentor.user, self.student, AnonymousUser(), None):
            self.assertFalse(can_moderate_listings(actor))
            self.assertFalse(can_manage_platform_config(actor))

    def test_listing_edit_is_owner_or_admin(self):
        project = SimpleNamespace(mentor_id=self.mentor.id)
        self.assertTrue(can_edit_listing(self.mentor.user, project))
        self.assertTrue(can_edit_listing(self.admin, project))
        self.assertFalse(can_edit_listing(self.other.user, project))
        self.assertFalse(can_edit_listing(self.student, project))

    def test_payout_account_belongs_to_its_mentor(self):
        self.assertTrue(can_manage_payout_account(self.mentor.user, "acct_ada"))
        self.assertFalse(can_manage_payout_account(self.other.user, "acct_ada"))
        self.assertFalse(can_manage_payout_account(self.admin, "acct_ada"))
        self.assertFalse(can_manage_payout_account(self.mentor.user, ""))

    def test_mentor_is_decided_by_profile(self):
        self.assertTrue(is_mentor(self.mentor.user))
        self.assertFalse(is_mentor(self.student))
