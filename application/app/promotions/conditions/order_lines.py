from dataclasses import dataclass
from decimal import Decimal
from typing import List

from app.dto.promotions import OrderLine


@dataclass(frozen=True)
class ConditionMatch:
    total_quantity: Decimal
    total_value: Decimal
    min_value: Decimal

    @property
    def met(self) -> bool:
        return self.total_value >= self.min_value


def _same(expected, actual) -> bool:
    # an unset discriminator on either side never matches
    return expected is not None and actual is not None and expected == actual


def line_matches(condition, line: OrderLine) -> bool:
    """True when any condition product names the line's product, category or group."""
    for criterion in condition.products:
        if (
            _same(criterion.product_id, line.product_id)
            or _same(criterion.category_id, line.category_id)
            or _same(criterion.product_group, line.product_group)
        ):
            return True
    return False


def evaluate(condition, order_lines: List[OrderLine]) -> ConditionMatch:
    """
    Accumulate quantity and value of the order lines matching a condition.

    Args:
        condition: PromotionCondition with its active condition products loaded
        order_lines: Lines supplied by the caller

    Returns:
        ConditionMatch; `met` is true when the matched value reaches min_value
    """
    total_quantity = Decimal("0")
    total_value = Decimal("0")

    for line in order_lines:
        if not line_matches(condition, line):
            continue
        quantity = Decimal(str(line.quantity or 0))
        unit_price = Decimal(str(line.unit_price or 0))
        total_quantity += quantity
        total_value += quantity * unit_price

    min_value = Decimal(str(condition.min_value or 0))
    return ConditionMatch(total_quantity=total_quantity, total_value=total_value, min_value=min_value)
