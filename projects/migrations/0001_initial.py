import django.core.validators
import django.db.models.deletion
import projects.models
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
            name="Project",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200)),
                ("short_description", models.CharField(blank=True, max_length=300)),
                ("description", models.TextField()),
                ("category", models.CharField(choices=[("technology", "Technology"), ("business", "Business"), ("design", "Design"), ("academic", "Academic"), ("language", "Language"), ("creative", "Creative"), ("other", "Other")], max_length=20)),
                ("purposes", models.JSONField(blank=True, default=list)),
                ("learning_purpose", models.CharField(blank=True, choices=[("monetarize", "Monetarize"), ("leisure", "Leisure"), ("career", "Career"), ("academic", "Academic")], max_length=20)),
                ("difficulty", models.CharField(choices=[("beginner", "Beginner"), ("intermediate", "Intermediate"), ("advanced", "Advanced")], max_length=20)),
                ("duration", models.PositiveIntegerField(help_text="Duration in weeks")),
                ("price", models.DecimalField(decimal_places=2, max_digits=10)),
                ("currency", models.CharField(default="usd", max_length=10)),
                ("objectives", models.JSONField(blank=True, default=list)),
                ("prerequisites", models.JSONField(blank=True, default=list)),
                ("tools", models.JSONField(blank=True, default=list)),
                ("deliverables", models.JSONField(blank=True, default=list)),
                ("max_students", models.PositiveIntegerField()),
                ("current_students", models.PositiveIntegerField(default=0)),
                ("is_active", models.BooleanField(default=projects.models.default_is_active)),
                ("is_featured", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("mentor", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="projects", to="accounts.mentorprofile")),
            ],
            options={
                "verbose_name": "Project",
                "verbose_name_plural": "Projects",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "-created_at"], name="project_active_created_idx"),
                    models.Index(fields=["mentor", "is_active"], name="project_mentor_active_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Enrollment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("pending", "Pending"), ("confirmed", "Confirmed"), ("completed", "Completed"), ("cancelled", "Cancelled")], default="pending", max_length=20)),
                ("progress", models.PositiveSmallIntegerField(default=0, validators=[django.core.validators.MaxValueValidator(100)])),
                ("amount_cents", models.IntegerField(default=0)),
                ("application_fee_cents", models.IntegerField(default=0)),
                ("currency", models.CharField(default="usd", max_length=10)),
                ("stripe_checkout_session_id", models.CharField(blank=True, max_length=255, null=True, unique=True)),
                ("enrolled_at", models.DateTimeField(auto_now_add=True)),
                ("project", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="enrollments", to="projects.project")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="enrollments", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "verbose_name": "Enrollment",
                "verbose_name_plural": "Enrollments",
                "ordering": ["-enrolled_at"],
            },
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("rating", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("comment", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("project", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="projects.project")),
                ("student", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="project_reviews", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-created_at"],
                "unique_together": {("project", "student")},
            },
        ),
    ]
