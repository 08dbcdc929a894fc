from decimal import Decimal
from .base import BaseDiscountStrategy


class PercentageDiscountStrategy(BaseDiscountStrategy):
    """discount_value percent of the qualified value, kept exact (no rounding)"""

    def compute_discount(self, level, qualified_value: Decimal) -> Decimal:
        discount_percentage = Decimal(str(level.discount_value or 0))
        return qualified_value * discount_percentage / 100
