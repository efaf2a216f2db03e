from django.urls import path
from . import views

app_name = "dashboard_admin"

urlpatterns = [
    path('commission-rate/', views.commission_rate, name='commission_rate'),
    path('projects/<int:project_id>/', views.project_visibility, name='project_visibility'),
    path('mentors/', views.mentors, name='mentors'),
    path('mentors/<int:mentor_id>/suppress/', views.mentor_suppress, name='mentor_suppress'),
    path('mentors/<int:mentor_id>/restore/', views.mentor_restore, name='mentor_restore'),
    path('statistics/', views.statistics, name='statistics'),
    path('category-suggestions/', views.category_suggestions, name='category_suggestions'),
]
