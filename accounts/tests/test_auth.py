from django.contrib.auth.models import User
from django.test import TestCase
from rest_framework.test import APIClient

from accounts.models import Profile, display_name


class SignupLoginTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def signup(self, **overrides):
        data = {"username": "jane", "password": "Password123!", "name": "janeplays", "email": "Jane@Example.com"}
        data.update(overrides)
        return self.client.post("/api/auth/signup", data, format="json")

    def test_signup_creates_user_and_profile(self):
        resp = self.signup()
        self.assertEqual(resp.status_code, 201)
        user = User.objects.get(username="jane")
        self.assertEqual(user.email, "jane@example.com")
        self.assertEqual(user.profile.name, "janeplays")
        self.assertEqual(display_name(user), "janeplays")
        # Signed in by the signup call
        self.assertEqual(self.client.get("/api/auth/me").status_code, 200)

    def test_signup_requires_all_fields(self):
        self.assertEqual(self.signup(name="").status_code, 400)

    def test_handle_is_unique_case_insensitively(self):
        self.signup()
        resp = self.signup(username="other", email="other@example.com", name="JanePlays")
        self.assertEqual(resp.status_code, 400)
        self.assertFalse(User.objects.filter(username="other").exists())

    def test_duplicate_email_rejected(self):
        self.signup()
        resp = self.signup(username="jane2", name="jane2")
        self.assertEqual(resp.status_code, 400)

    def test_login_and_logout(self):
        User.objects.create_user(username="omar", password="secret123")
        resp = self.client.post("/api/auth/login", {"username": "omar", "password": "nope"}, format="json")
        self.assertEqual(resp.status_code, 400)

        resp = self.client.post("/api/auth/login", {"username": "omar", "password": "secret123"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["username"], "omar")
        self.assertIsNone(resp.data["profile"])
        self.assertFalse(resp.data["staff"]["is_staff"])

        self.client.post("/api/auth/logout")
        self.assertEqual(self.client.get("/api/auth/me").status_code, 403)


class ProfileTests(TestCase):

    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(username="jane", password="pass12345")
        Profile.objects.create(user=self.user, name="janeplays")
        self.client.force_authenticate(self.user)

    def test_patch_updates_profile(self):
        resp = self.client.patch("/api/auth/me", {"full_name": "Jane Doe", "phone": "501234567"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["profile"]["full_name"], "Jane Doe")

    def test_patch_rejects_bad_phone(self):
        resp = self.client.patch("/api/auth/me", {"phone": "0123"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_patch_rejects_taken_handle(self):
        other = User.objects.create_user(username="omar", password="pass12345")
        Profile.objects.create(user=other, name="omarx")
        resp = self.client.patch("/api/auth/me", {"name": "OMARX"}, format="json")
        self.assertEqual(resp.status_code, 400)

    def test_user_without_profile_picks_handle(self):
        bare = User.objects.create_user(username="bare", password="pass12345")
        self.client.force_authenticate(bare)
        self.assertEqual(display_name(bare), "bare")
        resp = self.client.patch("/api/auth/me", {"name": "bare_gamer"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(Profile.objects.get(user=bare).name, "bare_gamer")

    def test_profile_search_by_prefix(self):
        other = User.objects.create_user(username="omar", password="pass12345")
        Profile.objects.create(user=other, name="jango")
        resp = self.client.get("/api/auth/profiles/", {"q": "jan"})
        self.assertEqual([p["name"] for p in resp.data], ["janeplays", "jango"])
