from django.contrib import admin
from .models import JournalPost, PostView, MentorSubscription


@admin.register(JournalPost)
class JournalPostAdmin(admin.ModelAdmin):
    list_display = ('title', 'mentor', 'is_public', 'created_at')
    list_filter = ('is_public', 'created_at')
    search_fields = ('title', 'content', 'mentor__user__email')
    date_hierarchy = 'created_at'


@admin.register(PostView)
class PostViewAdmin(admin.ModelAdmin):
    list_display = ('post', 'user', 'viewed_at')
    readonly_fields = ('viewed_at',)


@admin.register(MentorSubscription)
class MentorSubscriptionAdmin(admin.ModelAdmin):
    list_display = ('mentor', 'student', 'is_active', 'subscribed_at')
    list_filter = ('is_active',)
    search_fields = ('mentor__user__email', 'student__email')
