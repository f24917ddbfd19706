from decimal import Decimal

from django.test import SimpleTestCase

from booking.services.package_catalog import PACKAGE_GROUPS, get_package_option, is_package_menu_item
from booking.services.price_display import PriceDisplayService, format_price


class FormatPriceTests(SimpleTestCase):

    def test_whole_amounts_drop_decimals(self):
        self.assertEqual(format_price(220), "AED 220")
        self.assertEqual(format_price(Decimal("30.00")), "AED 30")

    def test_fractional_amounts_keep_significant_digits(self):
        self.assertEqual(format_price("20.50"), "AED 20.5")
        self.assertEqual(format_price(Decimal("99.99")), "AED 99.99")

    def test_garbage_formats_as_zero(self):
        self.assertEqual(format_price("abc"), "AED 0")
        self.assertEqual(format_price(None), "AED 0")

    def test_booking_total(self):
        class FakeRoom:
            hourly_rate = Decimal("40.00")

        self.assertEqual(PriceDisplayService.booking_total(FakeRoom(), 3), Decimal("120.00"))


class PackageCatalogTests(SimpleTestCase):

    def test_option_ids_are_unique(self):
        ids = [
            option["menu_item_id"]
            for group in PACKAGE_GROUPS
            for item in group["items"]
            for option in item["options"]
        ]
        self.assertEqual(len(ids), len(set(ids)))

    def test_lookup(self):
        option = get_package_option("44444444-4444-4444-8444-444444444443")
        self.assertEqual(option["name"], "Package 3")
        self.assertEqual(option["price"], Decimal("1000"))
        self.assertEqual(option["group_id"], "social-gaming")
        self.assertTrue(is_package_menu_item("11111111-1111-4111-8111-111111111111"))
        self.assertFalse(is_package_menu_item("12"))
        self.assertFalse(is_package_menu_item(None))
