from fastapi import HTTPException

# DTOs
from app.dto.promotions import (
    ApplyPromotionRequest, BulkPromotionIdsRequest, CalculatePromotionsRequest, SettlePeriodRequest,
)

# Constants
from app.core.constants import PromotionMessages

from app.logging.utils import get_app_logger
logger = get_app_logger("app.promotions_validator")


class PromotionRequestValidator:
    """Rejects incomplete promotion requests before any data access."""

    @staticmethod
    def _reject(event: str, message: str):
        logger.warning(f"{event} | message={message}")
        raise HTTPException(status_code=400, detail=message)

    @classmethod
    def validate_calculate(cls, request: CalculatePromotionsRequest):
        if request.customer_id is None or not request.order_lines:
            cls._reject("calculate_validation_failed", PromotionMessages.CALCULATE_REQUIRED)

    @classmethod
    def validate_apply(cls, request: ApplyPromotionRequest):
        if request.promotion_id is None or request.customer_id is None:
            cls._reject("apply_validation_failed", PromotionMessages.APPLY_REQUIRED)

    @classmethod
    def validate_settle(cls, request: SettlePeriodRequest):
        if not request.period_start or not request.period_end or request.customer_ids is None:
            cls._reject("settle_validation_failed", PromotionMessages.SETTLE_REQUIRED)

    @classmethod
    def validate_bulk(cls, request: BulkPromotionIdsRequest):
        if request.promotion_ids is None:
            cls._reject("bulk_validation_failed", PromotionMessages.IDS_MUST_BE_LIST)

    @classmethod
    def validate_report_promotion(cls, promotion_id):
        if not promotion_id:
            cls._reject("report_validation_failed", PromotionMessages.PROMOTION_ID_REQUIRED)
