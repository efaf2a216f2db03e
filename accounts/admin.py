from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.models import Group
from .models import CustomUser, StudentProfile, MentorProfile
from .forms import CustomUserCreationForm, CustomUserChangeForm
from projects.services.visibility_service import mentor_bulk_restore, mentor_bulk_suppress

# Hide Authentication and Authorization groups
admin.site.unregister(Group)

class UserAdmin(BaseUserAdmin):
    add_form = CustomUserCreationForm
    form = CustomUserChangeForm
    model = CustomUser
    list_display = ("email", "role", "is_active", "is_staff", "is_superuser")
    list_filter = ("role", "is_active", "is_staff", "is_superuser")
    search_fields = ("email",)
    ordering = ("email",)
    fieldsets = (
        (None, {"fields": ("email", "password", "role")}),
        ("Permissions", {"fields": ("is_active", "is_staff", "is_superuser", "user_permissions")}),
        ("Important dates", {"fields": ("last_login", "date_joined")}),
    )
    add_fieldsets = (
        (None, {"classes": ("wide",), "fields": ("email", "role", "password1", "password2")}),
    )


class StudentProfileAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'email_display')
    search_fields = ('first_name', 'last_name', 'user__email')

    def email_display(self, obj):
        return obj.user.email
    email_display.short_description = 'Email'


class MentorProfileAdmin(admin.ModelAdmin):
    list_display = ('first_name', 'last_name', 'email_display', 'is_verified', 'stripe_account_id')
    list_filter = ('is_verified',)
    search_fields = ('first_name', 'last_name', 'user__email', 'stripe_account_id')
    readonly_fields = ('stripe_account_id',)
    actions = ['suppress_projects', 'restore_projects']

    fieldsets = (
        ('User Information', {
            'fields': ('user', 'is_verified')
        }),
        ('Basic Information', {
            'fields': ('first_name', 'last_name', 'bio', 'experience', 'hourly_rate')
        }),
        ('Expertise', {
            'fields': ('specialties', 'qualifications', 'languages', 'teaching_methods')
        }),
        ('Links', {
            'fields': ('website', 'linkedin', 'github', 'twitter', 'instagram', 'portfolio'),
            'classes': ('collapse',)
        }),
        ('Payouts', {
            'fields': ('stripe_account_id',),
            'description': 'Connected Stripe account. Onboarding status is always read live from Stripe.'
        }),
    )

    def email_display(self, obj):
        return obj.user.email
    email_display.short_description = 'Email'

    def suppress_projects(self, request, queryset):
        """Admin action to hide every project of the selected mentors"""
        updated = sum(mentor_bulk_suppress(mentor.id) for mentor in queryset)
        self.message_user(request, f"{updated} project(s) hidden.")
    suppress_projects.short_description = "Hide all projects of selected mentors"

    def restore_projects(self, request, queryset):
        """Admin action to re-publish every project of the selected mentors"""
        updated = sum(mentor_bulk_restore(mentor.id) for mentor in queryset)
        self.message_user(request, f"{updated} project(s) restored.")
    restore_projects.short_description = "Restore all projects of selected mentors"


admin.site.register(CustomUser, UserAdmin)
admin.site.register(StudentProfile, StudentProfileAdmin)
admin.site.register(MentorProfile, MentorProfileAdmin)
