import shutil
import tempfile
from io import BytesIO

from django.contrib.auth.models import User
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework.test import APIClient

from gallery.models import GalleryItem, PhotoComment
from staff.models import StaffRole

MEDIA_ROOT = tempfile.mkdtemp()


def png_upload(size=(1600, 1200), name="shot.png"):
    buf = BytesIO()
    Image.new("RGB", size, (10, 120, 200)).save(buf, format="PNG")
    return SimpleUploadedFile(name, buf.getvalue(), content_type="image/png")


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class GalleryApiTests(TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.client = APIClient()
        self.jane = User.objects.create_user(username="jane", password="pass12345")
        self.omar = User.objects.create_user(username="omar", password="pass12345")
        self.mod = User.objects.create_user(username="mod", password="pass12345")
        StaffRole.objects.create(user=self.mod, role=StaffRole.GALLERY_MODERATOR)

    def photo(self, user=None, visibility=GalleryItem.VISIBILITY_PUBLIC, **extra):
        return GalleryItem.objects.create(
            user=user or self.jane, image="gallery/feed/x.jpg", visibility=visibility, **extra
        )

    def test_customer_upload_with_crop_goes_to_review(self):
        self.client.force_authenticate(self.jane)
        resp = self.client.post(
            "/api/gallery/photos/",
            {"image": png_upload(), "caption": "GG", "frame_w": 400, "frame_h": 400, "scale": 0.5, "official": True},
            format="multipart",
        )
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["visibility"], "pending")
        self.assertEqual(resp.data["aspect"], "square")
        self.assertEqual((resp.data["width"], resp.data["height"]), (1080, 1080))
        self.assertFalse(resp.data["is_official"])
        item = GalleryItem.objects.get()
        self.assertIn("_square_feed", item.image.name)
        self.assertIn("_square_thumb", item.thumbnail.name)

    def test_moderator_upload_is_public_and_official(self):
        self.client.force_authenticate(self.mod)
        resp = self.client.post(
            "/api/gallery/photos/", {"image": png_upload((800, 600)), "official": True}, format="multipart"
        )
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["visibility"], "public")
        self.assertEqual(resp.data["aspect"], "original")
        self.assertEqual(resp.data["author_name"], "Pixoul Hub")

    def test_partial_crop_fields_rejected(self):
        self.client.force_authenticate(self.jane)
        resp = self.client.post(
            "/api/gallery/photos/", {"image": png_upload(), "frame_w": 400}, format="multipart"
        )
        self.assertEqual(resp.status_code, 400)

    def test_anonymous_reads_public_feed_only(self):
        self.photo()
        self.photo(visibility=GalleryItem.VISIBILITY_PENDING)
        resp = self.client.get("/api/gallery/photos/")
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(self.client.post("/api/gallery/photos/", {}).status_code, 403)

    def test_mine_and_moderation_queue(self):
        self.photo()
        self.photo(visibility=GalleryItem.VISIBILITY_PENDING)
        self.photo(user=self.omar, visibility=GalleryItem.VISIBILITY_PENDING)

        self.client.force_authenticate(self.jane)
        self.assertEqual(len(self.client.get("/api/gallery/photos/", {"mine": "1"}).data), 2)
        # Only moderators can filter by visibility
        self.assertEqual(len(self.client.get("/api/gallery/photos/", {"visibility": "pending"}).data), 1)

        self.client.force_authenticate(self.mod)
        self.assertEqual(len(self.client.get("/api/gallery/photos/", {"visibility": "pending"}).data), 2)

    def test_like_toggles(self):
        item = self.photo()
        self.client.force_authenticate(self.omar)
        resp = self.client.post(f"/api/gallery/photos/{item.id}/like/")
        self.assertEqual(resp.data, {"liked": True, "like_count": 1})
        self.assertTrue(self.client.get(f"/api/gallery/photos/{item.id}/").data["user_has_liked"])
        resp = self.client.post(f"/api/gallery/photos/{item.id}/like/")
        self.assertEqual(resp.data, {"liked": False, "like_count": 0})

    def test_popular_sort(self):
        quiet = self.photo(like_count=1)
        loud = self.photo(like_count=9)
        ids = [p["id"] for p in self.client.get("/api/gallery/photos/", {"sort": "popular"}).data]
        self.assertEqual(ids, [loud.id, quiet.id])

    def test_comments(self):
        item = self.photo()
        self.client.force_authenticate(self.omar)
        url = f"/api/gallery/photos/{item.id}/comments/"
        self.assertEqual(self.client.post(url, {"text": "  "}, format="json").status_code, 400)
        resp = self.client.post(url, {"text": "Clean shot"}, format="json")
        self.assertEqual(resp.status_code, 201)
        comment_id = resp.data["id"]
        item.refresh_from_db()
        self.assertEqual(item.comment_count, 1)

        self.client.force_authenticate(self.jane)
        self.assertEqual(self.client.delete(f"{url}{comment_id}/").status_code, 403)
        self.client.force_authenticate(self.mod)
        self.assertEqual(self.client.delete(f"{url}{comment_id}/").status_code, 204)
        self.assertFalse(PhotoComment.objects.exists())
        item.refresh_from_db()
        self.assertEqual(item.comment_count, 0)

    def test_owner_cannot_publish(self):
        item = self.photo(visibility=GalleryItem.VISIBILITY_PENDING)
        self.client.force_authenticate(self.jane)
        url = f"/api/gallery/photos/{item.id}/visibility/"
        self.assertEqual(self.client.post(url, {"visibility": "public"}, format="json").status_code, 403)
        self.assertEqual(self.client.post(url, {"visibility": "private"}, format="json").status_code, 200)

        self.client.force_authenticate(self.mod)
        resp = self.client.post(url, {"visibility": "public"}, format="json")
        self.assertEqual(resp.data["visibility"], "public")

    def test_only_owner_or_moderator_deletes(self):
        item = self.photo()
        self.client.force_authenticate(self.omar)
        self.assertEqual(self.client.delete(f"/api/gallery/photos/{item.id}/").status_code, 403)
        self.client.force_authenticate(self.jane)
        self.assertEqual(self.client.delete(f"/api/gallery/photos/{item.id}/").status_code, 204)
