from django.urls import path
from . import views

app_name = "dashboard_mentor"

urlpatterns = [
    path('projects/', views.projects, name='projects'),
    path('journal/', views.journal_posts, name='journal_posts'),
    path('journal/<int:post_id>/', views.journal_post_delete, name='journal_post_delete'),
    path('subscribers/', views.subscribers, name='subscribers'),
    path('students/', views.students, name='students'),
    path('profile/', views.profile, name='profile'),
]
