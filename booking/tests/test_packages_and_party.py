import shutil
import tempfile
from decimal import Decimal
from io import BytesIO

from django.contrib.auth.models import User
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase, override_settings
from PIL import Image
from rest_framework.test import APIClient

from booking.models import BookingPackage, PartyGalleryImage, PartyGalleryItem, PartyPricingContent
from booking.services.package_catalog import get_package_option
from snacks.services.cart_service import CartError, CartService
from staff.models import StaffRole

MEDIA_ROOT = tempfile.mkdtemp()
VIP_1H = "22222222-2222-4222-8222-222222222221"


def png_upload(name="party.png"):
    buf = BytesIO()
    Image.new("RGB", (40, 30), (200, 60, 90)).save(buf, format="PNG")
    return SimpleUploadedFile(name, buf.getvalue(), content_type="image/png")


class StaffClientMixin:

    def setUp(self):
        self.client = APIClient()
        self.customer = User.objects.create_user(username="jane", password="pass12345")
        self.staff = User.objects.create_user(username="desk", password="pass12345")
        StaffRole.objects.create(user=self.staff, role=StaffRole.BOOKING)


class BookingPackageTests(StaffClientMixin, TestCase):

    def option(self, group_key="vip", package_name="VIP Rooms", label="1 Hour", price="30.00", **extra):
        fields = {
            "group_key": group_key,
            "group_title": group_key.upper(),
            "group_subtitle": "",
            "package_name": package_name,
            "option_label": label,
            "duration_hours": 1,
            "price": Decimal(price),
        }
        fields.update(extra)
        return BookingPackage.objects.create(**fields)

    def test_fixed_catalog_until_a_row_is_active(self):
        self.option(is_active=False)
        resp = self.client.get("/api/packages/")
        self.assertEqual([g["id"] for g in resp.data["groups"]], ["pc-gaming", "social-gaming"])

    def test_active_rows_replace_fixed_catalog(self):
        four = self.option(label="4 Hours", price="95.00", duration_hours=4, sort_order=1)
        one = self.option(sort_order=0)
        self.option(group_key="social", package_name="Package 1", price="300.00", description="Food for 5 pax")

        groups = self.client.get("/api/packages/").data["groups"]
        self.assertEqual([g["id"] for g in groups], ["social", "vip"])
        vip = groups[1]
        self.assertEqual(vip["title"], "VIP")
        self.assertEqual([item["id"] for item in vip["items"]], ["vip-vip-rooms"])
        options = vip["items"][0]["options"]
        self.assertEqual([o["label"] for o in options], ["1 Hour", "4 Hours"])
        self.assertEqual([o["menu_item_id"] for o in options], [str(one.id), str(four.id)])
        self.assertEqual(options[1]["price"], "95.00")
        self.assertEqual(groups[0]["items"][0]["description"], "Food for 5 pax")

    def test_customers_see_active_rows_only(self):
        self.option()
        self.option(label="4 Hours", is_active=False)
        self.client.force_authenticate(self.customer)
        self.assertEqual(len(self.client.get("/api/booking-packages/").data), 1)
        self.client.force_authenticate(self.staff)
        self.assertEqual(len(self.client.get("/api/booking-packages/").data), 2)

    def test_writes_need_booking_role(self):
        payload = {
            "group_key": "vip",
            "group_title": "VIP",
            "package_name": "VIP Rooms",
            "option_label": "1 Hour",
            "duration_hours": 1,
            "price": "30.00",
        }
        self.client.force_authenticate(self.customer)
        self.assertEqual(self.client.post("/api/booking-packages/", payload, format="json").status_code, 403)

        self.client.force_authenticate(self.staff)
        resp = self.client.post("/api/booking-packages/", payload, format="json")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertTrue(resp.data["is_active"])
        url = f"/api/booking-packages/{resp.data['id']}/"

        resp = self.client.patch(url, {"is_active": False}, format="json")
        self.assertFalse(resp.data["is_active"])
        self.assertEqual(self.client.delete(url).status_code, 204)
        self.assertFalse(BookingPackage.objects.exists())

    def test_invalid_rows_rejected(self):
        self.client.force_authenticate(self.staff)
        base = {"group_key": "vip", "group_title": "VIP", "package_name": "VIP Rooms", "option_label": "1 Hour"}
        for bad in ({"package_name": "   "}, {"duration_hours": 0}, {"price": "-5.00"}):
            payload = {**base, "duration_hours": 1, "price": "30.00", **bad}
            resp = self.client.post("/api/booking-packages/", payload, format="json")
            self.assertEqual(resp.status_code, 400, bad)

    def test_cart_prices_active_rows(self):
        row = self.option(label="4 Hours", price="95.00", duration_hours=4)
        line = CartService.add_to_cart(self.customer, str(row.id).upper())
        self.assertEqual(line.name, "VIP Rooms (4 Hours)")
        self.assertEqual(line.unit_price, Decimal("95.00"))
        self.assertEqual(line.menu_item_id, str(row.id))

        row.is_active = False
        row.save()
        with self.assertRaises(CartError):
            CartService.add_to_cart(self.customer, str(row.id))

    def test_fixed_options_still_resolve_for_open_carts(self):
        self.option()
        self.assertEqual(get_package_option(VIP_1H)["name"], "VIP Rooms")


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class PartyGalleryTests(StaffClientMixin, TestCase):

    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def upload(self, count=1, **fields):
        self.client.force_authenticate(self.staff)
        data = {"images": [png_upload(f"p{i}.png") for i in range(count)], **fields}
        return self.client.post("/api/party-gallery/", data, format="multipart")

    def test_staff_upload_album(self):
        resp = self.upload(2, category="birthday", caption="Zaid turns 8")
        self.assertEqual(resp.status_code, 201, resp.data)
        self.assertEqual(resp.data["caption"], "Zaid turns 8")
        self.assertEqual([img["position"] for img in resp.data["images"]], [0, 1])
        self.assertTrue(all("party-gallery/" in img["image"] for img in resp.data["images"]))

    def test_upload_needs_one_to_ten_images(self):
        self.assertEqual(self.upload(0, caption="empty").status_code, 400)
        self.assertEqual(self.upload(11).status_code, 400)
        self.assertFalse(PartyGalleryItem.objects.exists())

    def test_customers_cannot_upload(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.post("/api/party-gallery/", {"images": [png_upload()]}, format="multipart")
        self.assertEqual(resp.status_code, 403)

    def test_list_filters_by_category(self):
        PartyGalleryItem.objects.create(category="birthday", caption="cake")
        PartyGalleryItem.objects.create(category="other", caption="graduation")
        newest = PartyGalleryItem.objects.create(category="birthday", caption="balloons")

        client = APIClient()
        captions = [a["caption"] for a in client.get("/api/party-gallery/").data]
        self.assertEqual(captions, ["balloons", "cake"])
        self.assertEqual(client.get(f"/api/party-gallery/{newest.id}/").data["caption"], "balloons")
        captions = [a["caption"] for a in client.get("/api/party-gallery/", {"category": "other"}).data]
        self.assertEqual(captions, ["graduation"])

    def test_edit_appends_images(self):
        album_id = self.upload(1, caption="cake").data["id"]
        resp = self.client.patch(
            f"/api/party-gallery/{album_id}/",
            {"caption": "cake and candles", "images": [png_upload("more.png")]},
            format="multipart",
        )
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["caption"], "cake and candles")
        self.assertEqual([img["position"] for img in resp.data["images"]], [0, 1])

    def test_delete_album(self):
        album_id = self.upload(2).data["id"]
        self.assertEqual(self.client.delete(f"/api/party-gallery/{album_id}/").status_code, 204)
        self.assertFalse(PartyGalleryImage.objects.exists())


class PartyPricingTests(StaffClientMixin, TestCase):

    def test_defaults_before_first_edit(self):
        resp = APIClient().get("/api/party-pricing/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data["title"], "Birthday Bash pricing")
        self.assertEqual(resp.data["weekday_text"], "Weekdays (Mon-Thu): AED 199 / kid")
        self.assertEqual(resp.data["weekend_text"], "Weekends (Fri-Sun): AED 235 / kid")
        self.assertIsNone(resp.data["updated_at"])

    def test_staff_upsert(self):
        self.client.force_authenticate(self.staff)
        resp = self.client.put(
            "/api/party-pricing/",
            {"title": "  ", "weekday_text": "Mon-Thu: AED 210 / kid", "weekend_text": "Fri-Sun: AED 250 / kid"},
            format="json",
        )
        self.assertEqual(resp.status_code, 200, resp.data)
        self.assertEqual(resp.data["title"], "Birthday Bash pricing")
        self.assertEqual(resp.data["weekday_text"], "Mon-Thu: AED 210 / kid")

        resp = self.client.patch("/api/party-pricing/", {"weekend_text": "Fri-Sun: AED 260 / kid"}, format="json")
        self.assertEqual(resp.data["weekday_text"], "Mon-Thu: AED 210 / kid")
        self.assertEqual(resp.data["weekend_text"], "Fri-Sun: AED 260 / kid")
        self.assertEqual(PartyPricingContent.objects.count(), 1)
        self.assertIsNotNone(resp.data["updated_at"])

    def test_customers_cannot_edit(self):
        self.client.force_authenticate(self.customer)
        resp = self.client.put("/api/party-pricing/", {"title": "Free parties"}, format="json")
        self.assertEqual(resp.status_code, 403)
        self.assertFalse(PartyPricingContent.objects.exists())
