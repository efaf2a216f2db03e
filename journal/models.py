from django.db import models
from django.utils import timezone


class JournalPost(models.Model):
    """Journal entry written by a mentor. Non-public posts are for subscribers only."""
    mentor = models.ForeignKey("accounts.MentorProfile", on_delete=models.CASCADE, related_name="journal_posts")
    title = models.CharField(max_length=200)
    content = models.TextField()
    excerpt = models.CharField(max_length=500, blank=True)
    is_public = models.BooleanField(default=False)
    attachments = models.JSONField(default=list, blank=True)  # Array of attachment URLs
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = "Journal Post"
        verbose_name_plural = "Journal Posts"
        ordering = ['-created_at']

    def __str__(self):
        return self.title


class PostView(models.Model):
    post = models.ForeignKey("journal.JournalPost", on_delete=models.CASCADE, related_name="views")
    user = models.ForeignKey("accounts.CustomUser", on_delete=models.SET_NULL, null=True, blank=True, related_name="post_views")
    viewed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-viewed_at']

    def __str__(self):
        return f"View of {self.post_id} by {self.user_id or 'anonymous'}"


class MentorSubscription(models.Model):
    """Student following a mentor's journal. Unsubscribing deactivates, never deletes."""
    mentor = models.ForeignKey("accounts.MentorProfile", on_delete=models.CASCADE, related_name="subscriptions")
    student = models.ForeignKey("accounts.CustomUser", on_delete=models.CASCADE, related_name="mentor_subscriptions")
    is_active = models.BooleanField(default=True)
    subscribed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = "Mentor Subscription"
        verbose_name_plural = "Mentor Subscriptions"
        ordering = ['-subscribed_at']
        unique_together = ['mentor', 'student']

    def __str__(self):
        return f"{self.student} -> {self.mentor} ({'active' if self.is_active else 'inactive'})"
