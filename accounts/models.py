from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models
from django.utils import timezone
from .managers import CustomUserManager

class CustomUser(AbstractBaseUser, PermissionsMixin):
    ROLE_STUDENT = "student"
    ROLE_MENTOR = "mentor"
    ROLE_ADMIN = "admin"
    ROLE_CHOICES = [
        (ROLE_STUDENT, "Student"),
        (ROLE_MENTOR, "Mentor"),
        (ROLE_ADMIN, "Admin"),
    ]

    email = models.EmailField("email address", unique=True)
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_STUDENT)
    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(default=timezone.now)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = []

    objects = CustomUserManager()

    class Meta:
        verbose_name = "User"
        verbose_name_plural = "Users"

    def save(self, *args, **kwargs):
        """Override save to ensure email is always stored in lowercase"""
        if self.email:
            self.email = self.email.lower().strip()
        super().save(*args, **kwargs)

    def __str__(self):
        return self.email

    @property
    def profile(self):
        """Return the MentorProfile or StudentProfile of this user, or None"""
        try:
            return self.mentor_profile
        except MentorProfile.DoesNotExist:
            try:
                return self.student_profile
            except StudentProfile.DoesNotExist:
                return None

    @property
    def display_name(self):
        profile = self.profile
        if profile is not None:
            name = f"{profile.first_name} {profile.last_name}".strip()
            if name:
                return name
        return "Anonymous"


class StudentProfile(models.Model):
    """Profile for students (learners)"""
    user = models.OneToOneField("accounts.CustomUser", on_delete=models.CASCADE, related_name="student_profile")
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    bio = models.TextField(blank=True)
    interests = models.JSONField(default=list, blank=True)  # Array of free-text interests

    class Meta:
        verbose_name = "Student Profile"
        verbose_name_plural = "Student Profiles"

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.user.email})"


class MentorProfile(models.Model):
    """Profile for mentors (service providers)"""
    # Basic Info
    user = models.OneToOneField("accounts.CustomUser", on_delete=models.CASCADE, related_name="mentor_profile")
    first_name = models.CharField(max_length=150, blank=True)
    last_name = models.CharField(max_length=150, blank=True)
    bio = models.TextField(blank=True)
    experience = models.TextField(blank=True)
    specialties = models.JSONField(default=list, blank=True)  # Array of specialty strings
    qualifications = models.JSONField(default=list, blank=True)
    languages = models.JSONField(default=list, blank=True)
    teaching_methods = models.JSONField(default=list, blank=True)
    hourly_rate = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)
    is_verified = models.BooleanField(default=False)

    # Links
    website = models.URLField(blank=True)
    linkedin = models.CharField(max_length=200, blank=True)
    github = models.CharField(max_length=200, blank=True)
    twitter = models.CharField(max_length=200, blank=True)
    instagram = models.CharField(max_length=200, blank=True)
    portfolio = models.URLField(blank=True)

    # Stripe Connect account that receives destination charges.
    # Status flags are never stored here; they are re-fetched from Stripe.
    stripe_account_id = models.CharField(max_length=255, blank=True, db_index=True)

    class Meta:
        verbose_name = "Mentor Profile"
        verbose_name_plural = "Mentor Profiles"

    def __str__(self):
        return f"{self.first_name} {self.last_name} ({self.user.email})"
