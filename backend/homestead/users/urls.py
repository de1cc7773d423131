# users/urls.py
from django.urls import path, include
from rest_framework.routers import DefaultRouter
from .views import (
    LoginView, LogoutView, MeView, UserViewSet, InvitationViewSet, InvitationTokenView
)

router = DefaultRouter()
router.register(r'users', UserViewSet, basename='users')
router.register(r'invitations', InvitationViewSet, basename='invitations')

urlpatterns = [
    path("auth/login/", LoginView.as_view()),
    path("auth/logout/", LogoutView.as_view()),
    path("auth/me/", MeView.as_view()),
    path("invitations/token/<str:token>/", InvitationTokenView.as_view(), name="invitation-token"),
    path("", include(router.urls)),
]
