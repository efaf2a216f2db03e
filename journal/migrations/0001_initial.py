import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="JournalPost",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("content", models.TextField()),
                ("excerpt", models.CharField(blank=True, max_length=500)),
                ("is_public", models.BooleanField(default=False)),
                ("attachments", models.JSONField(blank=True, default=list)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("mentor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="journal_posts", to="accounts.mentorprofile")),
            ],
            options={
                "verbose_name": "Journal Post",
                "verbose_name_plural": "Journal Posts",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="PostView",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("viewed_at", models.DateTimeField(auto_now_add=True)),
                ("post", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="views", to="journal.journalpost")),
                ("user", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="post_views", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-viewed_at"],
            },
        ),
        migrations.CreateModel(
            name="MentorSubscription",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True)),
                ("subscribed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("mentor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="subscriptions", to="accounts.mentorprofile")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="mentor_subscriptions", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Mentor Subscription",
                "verbose_name_plural": "Mentor Subscriptions",
                "ordering": ["-subscribed_at"],
                "unique_together": {("mentor", "student")},
            },
        ),
    ]
