from decimal import Decimal, ROUND_HALF_UP

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


def default_is_active():
    """Initial visibility of a new project (self-publish unless disabled in settings)."""
    return bool(getattr(settings, "PROJECTS_AUTO_PUBLISH", True))


class ProjectQuerySet(models.QuerySet):
    def discoverable(self):
        """Projects students may see. Every student-facing read must go through this."""
        return self.filter(is_active=True)

    def owned_by(self, mentor_id):
        return self.filter(mentor_id=mentor_id)


class Project(models.Model):
    """A mentor's project listing that students can discover and enroll in"""
    CATEGORY_CHOICES = [
        ('technology', 'Technology'),
        ('business', 'Business'),
        ('design', 'Design'),
        ('academic', 'Academic'),
        ('language', 'Language'),
        ('creative', 'Creative'),
        ('other', 'Other'),
    ]

    DIFFICULTY_CHOICES = [
        ('beginner', 'Beginner'),
        ('intermediate', 'Intermediate'),
        ('advanced', 'Advanced'),
    ]

    PURPOSE_CHOICES = [
        ('monetarize', 'Monetarize'),
        ('leisure', 'Leisure'),
        ('career', 'Career'),
        ('academic', 'Academic'),
    ]

    # Ownership never changes after creation
    mentor = models.ForeignKey("accounts.MentorProfile", on_delete=models.CASCADE, related_name="projects")

    title = models.CharField(max_length=200)
    short_description = models.CharField(max_length=300, blank=True)
    description = models.TextField()
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    purposes = models.JSONField(default=list, blank=True)  # Array of PURPOSE_CHOICES keys
    learning_purpose = models.CharField(max_length=20, choices=PURPOSE_CHOICES, blank=True)
    difficulty = models.CharField(max_length=20, choices=DIFFICULTY_CHOICES)
    duration = models.PositiveIntegerField(help_text="Duration in weeks")
    price = models.DecimalField(max_digits=10, decimal_places=2)
    currency = models.CharField(max_length=10, default="usd")
    objectives = models.JSONField(default=list, blank=True)
    prerequisites = models.JSONField(default=list, blank=True)
    tools = models.JSONField(default=list, blank=True)
    deliverables = models.JSONField(default=list, blank=True)

    # Capacity; current_students <= max_students is enforced by enrollment_service
    max_students = models.PositiveIntegerField()
    current_students = models.PositiveIntegerField(default=0)

    # Visibility: the only discoverability gate
    is_active = models.BooleanField(default=default_is_active)
    is_featured = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ProjectQuerySet.as_manager()

    class Meta:
        verbose_name = "Project"
        verbose_name_plural = "Projects"
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['is_active', '-created_at'], name='project_active_created_idx'),
            models.Index(fields=['mentor', 'is_active'], name='project_mentor_active_idx'),
        ]

    def __str__(self):
        return self.title

    @property
    def price_cents(self) -> int:
        return int((Decimal(self.price or 0) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @property
    def has_capacity(self) -> bool:
        return self.current_students < self.max_students


class Enrollment(models.Model):
    """A student's seat in a project. Confirmed by the Stripe checkout webhook."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('confirmed', 'Confirmed'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    project = models.ForeignKey("projects.Project", on_delete=models.CASCADE, related_name="enrollments")
    student = models.ForeignKey("accounts.CustomUser", on_delete=models.CASCADE, related_name="enrollments")
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    progress = models.PositiveSmallIntegerField(default=0, validators=[MaxValueValidator(100)])

    amount_cents = models.IntegerField(default=0)
    application_fee_cents = models.IntegerField(default=0)
    currency = models.CharField(max_length=10, default="usd")
    stripe_checkout_session_id = models.CharField(max_length=255, unique=True, null=True, blank=True)

    enrolled_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Enrollment"
        verbose_name_plural = "Enrollments"
        ordering = ['-enrolled_at']

    def __str__(self):
        return f"Enrollment {self.student} -> {self.project} ({self.status})"


class Review(models.Model):
    project = models.ForeignKey("projects.Project", on_delete=models.CASCADE, related_name="reviews")
    student = models.ForeignKey("accounts.CustomUser", on_delete=models.CASCADE, related_name="project_reviews")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        unique_together = ['project', 'student']

    def __str__(self):
        return f"{self.rating}/5 for {self.project}"


class CategorySuggestion(models.Model):
    """A visitor's proposal for a new project category, reviewed by admins."""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    contact_email = models.EmailField()
    contact_name = models.CharField(max_length=200, blank=True)
    comment = models.TextField(blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.name} ({self.status})"
