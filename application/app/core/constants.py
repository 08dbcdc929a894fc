"""
Core constants for the SFA promotions service

Flags, discount/benefit types and tracking action types shared by the
promotion engine, repository and routes.
"""

class ActiveFlag:
    """Single-character flags used by the back-office schema"""
    YES = "Y"
    NO = "N"


class PromotionDiscountType:
    PERCENTAGE = "PERCENTAGE"
    FIXED_AMOUNT = "FIXED_AMOUNT"


class PromotionBenefitType:
    FREE_PRODUCT = "FREE_PRODUCT"


class PromotionActionType:
    """Values written to promotion_tracking.action_type"""
    APPLIED = "APPLIED"
    ACTIVATED = "ACTIVATED"
    DEACTIVATED = "DEACTIVATED"
    PERIOD_SETTLEMENT = "PERIOD_SETTLEMENT"


class PromotionMessages:
    CALCULATED = "Eligible promotions calculated"
    APPLIED = "Promotion applied successfully"
    SETTLED = "Period promotion settled successfully"
    ACTIVATED = "Promotion activated successfully"
    DEACTIVATED = "Promotion deactivated successfully"
    NOT_FOUND = "Promotion not found"
    CALCULATE_REQUIRED = "customer_id and order_lines are required"
    APPLY_REQUIRED = "Promotion Id and customer ID are required"
    SETTLE_REQUIRED = "period_start, period_end, and customer_ids are required"
    IDS_MUST_BE_LIST = "Promotion Ids must be an array"
    ACTIVE_REPORT = "Active promotions report generated"
    TRACKING_REPORT = "Promotion tracking report generated"
    USAGE_REPORT = "Promotion usage report generated"
    PERFORMANCE_REPORT = "Promotion performance report generated"
    CUSTOMER_QUALIFIED_REPORT = "Customer qualified report generated"
    PROMOTION_ID_REQUIRED = "promotion_id is required"
