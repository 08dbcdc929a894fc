from decimal import Decimal
from typing import List, Optional, Tuple

from fastapi import HTTPException

# Repository
from app.repository.promotions import PromotionsRepository

# DTOs
from app.dto.promotions import CalculatePromotionsRequest, CalculationSummary, EligiblePromotion, OrderLine

# Eligibility, conditions, levels and benefits
from app.promotions.eligibility import EligibilityFilter, EvaluationContext
from app.promotions.conditions import order_lines as condition_matcher
from app.promotions.levels import select_level
from app.promotions.events import discount, free_product

# Utils
from app.utils.datetime_helpers import ensure_aware, get_now

# Logging
from app.logging.utils import get_app_logger
logger = get_app_logger("app.promotions_engine")


class PromotionEngine:
    """Resolves which promotions an order qualifies for and what each one grants."""

    def __init__(self, repository: Optional[PromotionsRepository] = None):
        """Initialize the promotion engine with optional dependency injection.
        Args:
            repository: Optional PromotionsRepository instance for dependency injection
        """
        self.repository = repository or PromotionsRepository()

    async def calculate(self, request: CalculatePromotionsRequest) -> Tuple[List[EligiblePromotion], CalculationSummary]:
        """Evaluate every active promotion against the request context and order lines.

        Args:
            request: Validated calculation request (customer_id and order_lines present)

        Returns:
            Eligible promotion records and their summary

        Raises:
            HTTPException: 500 when the data store or evaluation fails
        """
        try:
            check_date = ensure_aware(request.order_date) or get_now()

            customer_type = await self.repository.get_customer_type(request.customer_id)
            promotions = await self.repository.get_active_promotions(check_date, request.platform)

            category_codes = {}
            if customer_type:
                category_ids = [entry.customer_category_id for promotion in promotions for entry in promotion.customer_categories]
                category_codes = await self.repository.get_category_codes(category_ids)

            context = EvaluationContext(
                customer_id=request.customer_id,
                order_date=check_date,
                customer_type=customer_type,
                depot_id=request.depot_id,
                salesman_id=request.salesman_id,
                route_id=request.route_id,
                platform=request.platform,
            )

            eligible_promotions = []
            for promotion in promotions:
                if not EligibilityFilter.is_eligible(promotion, context, category_codes):
                    continue
                result = self.evaluate_promotion(promotion, request.order_lines)
                if result is not None:
                    eligible_promotions.append(result)

            summary = self.build_summary(eligible_promotions)
            logger.info(
                f"calculate_result | customer_id={request.customer_id} candidates={len(promotions)} "
                f"eligible={summary.total_eligible} total_discount={summary.total_discount}"
            )
            return eligible_promotions, summary

        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"calculate_error | customer_id={request.customer_id} error={e}", exc_info=True)
            raise HTTPException(status_code=500, detail=str(e))

    def evaluate_promotion(self, promotion, order_lines: List[OrderLine]) -> Optional[EligiblePromotion]:
        """Walk conditions in stored order; the first one that is met and reaches a level wins."""
        for condition in promotion.conditions:
            match = condition_matcher.evaluate(condition, order_lines)
            if not match.met:
                continue

            level = select_level(promotion.levels, match.total_value)
            if level is None:
                logger.info(f"no_level_reached | promotion_id={promotion.id} condition_id={condition.id} value={match.total_value}")
                continue

            discount_amount = discount.compute(level, match.total_value)
            logger.info(
                f"promotion_qualified | promotion_id={promotion.id} condition_id={condition.id} "
                f"level={level.level_number} value={match.total_value} discount={discount_amount}"
            )
            return EligiblePromotion(
                promotion_id=promotion.id,
                promotion_name=promotion.name,
                promotion_code=promotion.code,
                level_number=level.level_number,
                discount_type=level.discount_type,
                discount_amount=discount_amount,
                free_products=free_product.get_free_products(level),
                qualified_quantity=match.total_quantity,
                qualified_value=match.total_value,
                threshold_met=match.total_value,
            )
        return None

    @staticmethod
    def build_summary(eligible_promotions: List[EligiblePromotion]) -> CalculationSummary:
        total_discount = sum((p.discount_amount for p in eligible_promotions), Decimal("0"))
        return CalculationSummary(total_eligible=len(eligible_promotions), total_discount=total_discount)
