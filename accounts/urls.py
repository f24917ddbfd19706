from django.urls import path
from .views import SignupView, LoginView, LogoutView, MeView, ProfileSearchView

urlpatterns = [
    path("signup", SignupView.as_view(), name="signup"),
    path("login", LoginView.as_view(), name="login"),
    path("logout", LogoutView.as_view(), name="logout"),
    path("me", MeView.as_view(), name="me"),
    path("profiles/", ProfileSearchView.as_view(), name="profile-search"),
]
