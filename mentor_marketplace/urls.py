from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("web.urls", namespace="web")),
    path("api/mentor/", include("dashboard_mentor.urls", namespace="dashboard_mentor")),
    path("api/admin/", include("dashboard_admin.urls", namespace="dashboard_admin")),
    path("api/stripe/", include("billing.urls", namespace="billing")),
]
