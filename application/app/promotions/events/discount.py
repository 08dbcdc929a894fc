from decimal import Decimal

from app.core.constants import PromotionDiscountType
from app.promotions.strategy.percentage import PercentageDiscountStrategy
from app.promotions.strategy.fixed_amount import FixedAmountDiscountStrategy
from app.logging.utils import get_app_logger

logger = get_app_logger("app.promotions.events.discount")

DISCOUNT_STRATEGIES = {
    PromotionDiscountType.PERCENTAGE: PercentageDiscountStrategy(),
    PromotionDiscountType.FIXED_AMOUNT: FixedAmountDiscountStrategy(),
}


def compute(level, qualified_value: Decimal) -> Decimal:
    """Discount granted by a level; unknown discount types grant nothing."""
    strategy = DISCOUNT_STRATEGIES.get(level.discount_type)
    if strategy is None:
        logger.warning(f"unsupported_discount_type | level_id={level.id} discount_type={level.discount_type}")
        return Decimal("0")
    return strategy.compute_discount(level, qualified_value)
