# booking/services/price_display.py
#
# Purpose:
# - One place that formats prices for the venue (AED, no trailing ".00").
# - Booking totals (hourly rate x duration).

from decimal import Decimal, InvalidOperation


class PriceDisplayService:
    """
    Price formatting for rooms, packages, snacks, orders and emails.

    Rules:
    1. Currency prefix "AED " followed by the amount
    2. Whole amounts print without decimals ("AED 220")
    3. Fractional amounts keep significant decimals only ("AED 20.5")
    """

    @staticmethod
    def format_price(price, currency="AED"):
        """
        Args:
            price: Price value (Decimal, float, int, or string)
            currency: Currency code to prepend

        Returns:
            str: Formatted price (e.g., "AED 220")
        """
        try:
            amount = Decimal(str(price)).quantize(Decimal("0.01"))
        except (ValueError, TypeError, InvalidOperation):
            return f"{currency} 0"
        if amount == amount.to_integral_value():
            return f"{currency} {int(amount)}"
        return f"{currency} {amount.normalize()}"

    @staticmethod
    def booking_total(room, duration_hours):
        return Decimal(room.hourly_rate) * int(duration_hours)


def format_price(price):
    return PriceDisplayService.format_price(price)
