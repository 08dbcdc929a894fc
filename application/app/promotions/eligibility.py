from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from app.core.constants import ActiveFlag

# Logging
from app.logging.utils import get_app_logger
logger = get_app_logger("app.promotions.eligibility")


@dataclass(frozen=True)
class EvaluationContext:
    """Who is ordering, from where, and when"""
    customer_id: int
    order_date: datetime
    customer_type: Optional[str] = None
    depot_id: Optional[int] = None
    salesman_id: Optional[int] = None
    route_id: Optional[int] = None
    platform: Optional[str] = None


class EligibilityFilter:
    """Decides whether a promotion applies to a customer/depot/salesperson/route context"""

    @staticmethod
    def is_excluded(promotion, customer_id: int) -> bool:
        return any(
            exclusion.customer_id == customer_id and exclusion.is_excluded == ActiveFlag.YES
            for exclusion in promotion.exclusions
        )

    @staticmethod
    def is_open(promotion) -> bool:
        """An open promotion carries no depot, salesperson, route or customer-category restriction."""
        return not (
            promotion.depots
            or promotion.salespersons
            or promotion.routes
            or promotion.customer_categories
        )

    @staticmethod
    def matches_restrictions(promotion, context: EvaluationContext, category_codes: Dict[int, str]) -> bool:
        """
        OR across the populated restriction lists: one hit on depot, salesperson,
        route or customer category is enough.

        Args:
            promotion: Promotion with its active restriction rows loaded
            context: Evaluation context
            category_codes: customer_category id -> category_code, resolved up front
        """
        if context.depot_id is not None and any(d.depot_id == context.depot_id for d in promotion.depots):
            return True

        if context.salesman_id is not None and any(s.salesperson_id == context.salesman_id for s in promotion.salespersons):
            return True

        if context.route_id is not None and any(r.route_id == context.route_id for r in promotion.routes):
            return True

        if context.customer_type:
            for entry in promotion.customer_categories:
                if category_codes.get(entry.customer_category_id) == context.customer_type:
                    return True

        return False

    @staticmethod
    def is_eligible(promotion, context: EvaluationContext, category_codes: Dict[int, str]) -> bool:
        if EligibilityFilter.is_excluded(promotion, context.customer_id):
            logger.info(f"promotion_skipped_excluded | promotion_id={promotion.id} customer_id={context.customer_id}")
            return False

        if EligibilityFilter.is_open(promotion):
            return True

        eligible = EligibilityFilter.matches_restrictions(promotion, context, category_codes)
        if not eligible:
            logger.info(
                f"promotion_skipped_restricted | promotion_id={promotion.id} depot_id={context.depot_id} "
                f"salesman_id={context.salesman_id} route_id={context.route_id} customer_type={context.customer_type}"
            )
        return eligible
