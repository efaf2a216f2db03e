from django.urls import path
from . import views
app_name = "web"
urlpatterns = [
    path("projects/", views.project_list, name="project_list"),
    path("projects/<int:project_id>/", views.project_detail, name="project_detail"),
    path("mentors/", views.mentor_list, name="mentor_list"),
    path("mentors/<int:mentor_id>/", views.mentor_detail, name="mentor_detail"),
    path("mentors/<int:mentor_id>/posts/", views.mentor_posts, name="mentor_posts"),
    path("mentors/<int:mentor_id>/subscribe/", views.mentor_subscribe, name="mentor_subscribe"),
    path("posts/<int:post_id>/", views.post_detail, name="post_detail"),
    path("suggest-category/", views.suggest_category, name="suggest_category"),
]
