from decimal import Decimal
from typing import List

from app.core.constants import PromotionBenefitType
from app.dto.promotions import FreeProduct


def get_free_products(level) -> List[FreeProduct]:
    """
    Extract free-product benefits from a level.

    Args:
        level: PromotionLevel with its active benefits (and their products) loaded

    Returns:
        One FreeProduct per FREE_PRODUCT benefit, in stored order
    """
    free_products = []
    for benefit in level.benefits:
        if benefit.benefit_type != PromotionBenefitType.FREE_PRODUCT:
            continue
        product = benefit.product
        free_products.append(FreeProduct(
            product_id=benefit.product_id,
            product_name=product.name if product else None,
            product_code=product.code if product else None,
            quantity=Decimal(str(benefit.benefit_value or 0)),
            gift_limit=benefit.gift_limit or 0,
        ))
    return free_products
