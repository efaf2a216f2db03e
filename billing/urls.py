from django.urls import path
from . import views

app_name = "billing"

urlpatterns = [
    path("status/", views.stripe_status, name="stripe_status"),
    path("connect/account/", views.connect_account, name="connect_account"),
    path("connect/<str:account_id>/link/", views.connect_account_link, name="connect_account_link"),
    path("connect/<str:account_id>/status/", views.connect_account_status, name="connect_account_status"),
    path("checkout/create-session/", views.create_checkout_session, name="create_checkout_session"),
    path("webhook/", views.stripe_webhook, name="stripe_webhook"),
]
