from decimal import Decimal
from .base import BaseDiscountStrategy


class FixedAmountDiscountStrategy(BaseDiscountStrategy):
    def compute_discount(self, level, qualified_value: Decimal) -> Decimal:
        return Decimal(str(level.discount_value or 0))
