from django.contrib import admin
from .models import CategorySuggestion, Project, Enrollment, Review
from .services.visibility_service import admin_set_visibility


class EnrollmentInline(admin.TabularInline):
    model = Enrollment
    extra = 0
    fields = ('student', 'status', 'amount_cents', 'application_fee_cents', 'enrolled_at')
    readonly_fields = ('amount_cents', 'application_fee_cents', 'enrolled_at')


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ('title', 'mentor', 'category', 'price', 'current_students', 'max_students', 'is_active', 'is_featured', 'created_at')
    list_filter = ('is_active', 'is_featured', 'category', 'difficulty')
    search_fields = ('title', 'mentor__first_name', 'mentor__last_name', 'mentor__user__email')
    readonly_fields = ('current_students', 'created_at', 'updated_at')
    inlines = [EnrollmentInline]
    actions = ['activate', 'deactivate']

    def activate(self, request, queryset):
        updated = len([admin_set_visibility(project.id, True) for project in queryset])
        self.message_user(request, f"{updated} project(s) activated.")
    activate.short_description = "Activate selected projects"

    def deactivate(self, request, queryset):
        updated = len([admin_set_visibility(project.id, False) for project in queryset])
        self.message_user(request, f"{updated} project(s) hidden.")
    deactivate.short_description = "Hide selected projects"


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ('project', 'student', 'status', 'amount_cents', 'application_fee_cents', 'currency', 'enrolled_at')
    list_filter = ('status', 'currency')
    search_fields = ('stripe_checkout_session_id', 'student__email', 'project__title')
    readonly_fields = ('stripe_checkout_session_id', 'enrolled_at')


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('project', 'student', 'rating', 'created_at')
    list_filter = ('rating',)


@admin.register(CategorySuggestion)
class CategorySuggestionAdmin(admin.ModelAdmin):
    list_display = ('name', 'contact_email', 'status', 'created_at')
    list_filter = ('status',)
    search_fields = ('name', 'contact_email', 'contact_name')
    readonly_fields = ('created_at',)
