import json
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException

# Engine and repository
from app.promotions.engine import PromotionEngine
from app.repository.promotions import PromotionsRepository

# DTOs
from app.dto.promotions import (
    AppliedPromotion, ApplyPromotionRequest, ApplyPromotionResponse, BulkPromotionIdsRequest,
    CalculatePromotionsRequest, CalculatePromotionsResponse, PromotionApiResponse, SettlePeriodRequest,
)

# Validations
from app.validations.promotions import PromotionRequestValidator

# Constants
from app.core.constants import PromotionActionType, PromotionMessages

# Utils
from app.utils.datetime_helpers import ensure_aware, get_now, start_of_month
from app.utils.promotion_utils import apply_comment, settlement_comment

# Sentry
from app.config.sentry import set_promotion_tags

# Request context
from app.middlewares.request_context import set_business_context

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

# Logging
from app.logging.utils import get_app_logger
logger = get_app_logger("app.core.promotion_functions")


async def _ensure_promotion(repository: PromotionsRepository, promotion_id: int):
    if not await repository.promotion_exists(promotion_id):
        logger.warning(f"promotion_not_found | promotion_id={promotion_id}")
        raise HTTPException(status_code=404, detail=PromotionMessages.NOT_FOUND)


async def calculate_eligible_promotions_core(request: CalculatePromotionsRequest) -> CalculatePromotionsResponse:
    """
    Core function to calculate every promotion an order qualifies for

    Args:
        request: CalculatePromotionsRequest with customer, context and order lines
    Returns:
        CalculatePromotionsResponse with eligible promotion records and summary
    """
    try:
        PromotionRequestValidator.validate_calculate(request)
        logger.info(
            f"calculate_eligible_promotions_core | customer_id={request.customer_id} lines={len(request.order_lines)} "
            f"depot_id={request.depot_id} salesman_id={request.salesman_id} route_id={request.route_id} platform={request.platform}"
        )
        set_promotion_tags(customer_id=request.customer_id)
        set_business_context(customer_id=request.customer_id, depot_id=request.depot_id)

        engine = PromotionEngine()
        eligible_promotions, summary = await engine.calculate(request)
        return CalculatePromotionsResponse(message=PromotionMessages.CALCULATED, data=eligible_promotions, summary=summary)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"calculate_eligible_promotions_core_error | customer_id={request.customer_id} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def apply_promotion_core(request: ApplyPromotionRequest, user_id: int) -> ApplyPromotionResponse:
    """
    Core function to record that a promotion was applied to an order.
    Only an APPLIED tracking row is written; the order itself is not touched.
    """
    try:
        PromotionRequestValidator.validate_apply(request)
        set_promotion_tags(promotion_id=request.promotion_id, customer_id=request.customer_id)
        set_business_context(customer_id=request.customer_id, promotion_id=request.promotion_id)

        repository = PromotionsRepository()
        await _ensure_promotion(repository, request.promotion_id)

        applied_at = get_now()
        free_products_json = json.dumps(request.free_products, default=str)
        comment = apply_comment(request.order_id, request.customer_id, request.discount_amount, free_products_json)
        await repository.create_tracking(
            promotion_id=request.promotion_id,
            action_type=PromotionActionType.APPLIED,
            user_id=user_id,
            comments=[comment],
            action_date=applied_at,
        )

        logger.info(
            f"apply_promotion_core_response | promotion_id={request.promotion_id} order_id={request.order_id} "
            f"customer_id={request.customer_id} discount={request.discount_amount} user_id={user_id}"
        )
        return ApplyPromotionResponse(
            message=PromotionMessages.APPLIED,
            data=AppliedPromotion(
                promotion_id=request.promotion_id,
                order_id=request.order_id,
                customer_id=request.customer_id,
                discount_amount=request.discount_amount,
                free_products=request.free_products,
                applied_at=applied_at,
            ),
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"apply_promotion_core_error | promotion_id={request.promotion_id} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def settle_period_promotion_core(promotion_id: int, request: SettlePeriodRequest, user_id: int) -> PromotionApiResponse:
    try:
        PromotionRequestValidator.validate_settle(request)

        repository = PromotionsRepository()
        await _ensure_promotion(repository, promotion_id)

        comments = [settlement_comment(customer_id, request.period_start, request.period_end) for customer_id in request.customer_ids]
        await repository.create_tracking(
            promotion_id=promotion_id,
            action_type=PromotionActionType.PERIOD_SETTLEMENT,
            user_id=user_id,
            comments=comments,
            action_date=get_now(),
        )

        logger.info(f"settle_period_promotion_core_response | promotion_id={promotion_id} customers={len(request.customer_ids)}")
        return PromotionApiResponse(
            message=PromotionMessages.SETTLED,
            data=[{"customer_id": customer_id, "settled": True} for customer_id in request.customer_ids],
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"settle_period_promotion_core_error | promotion_id={promotion_id} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def set_promotion_active_core(promotion_id: int, active: bool, user_id: int) -> PromotionApiResponse:
    """Activate or deactivate one promotion, tracking the change."""
    try:
        repository = PromotionsRepository()
        promotion = await repository.set_promotion_active(promotion_id, active, user_id, get_now())
        if promotion is None:
            logger.warning(f"promotion_not_found | promotion_id={promotion_id}")
            raise HTTPException(status_code=404, detail=PromotionMessages.NOT_FOUND)

        message = PromotionMessages.ACTIVATED if active else PromotionMessages.DEACTIVATED
        return PromotionApiResponse(message=message, data=promotion)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"set_promotion_active_core_error | promotion_id={promotion_id} active={active} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def bulk_set_active_core(request: BulkPromotionIdsRequest, active: bool, user_id: int) -> PromotionApiResponse:
    """Bulk (de)activation. No tracking rows are written for bulk changes."""
    try:
        PromotionRequestValidator.validate_bulk(request)

        repository = PromotionsRepository()
        count = await repository.bulk_set_active(request.promotion_ids, active, user_id, get_now())
        verb = "activated" if active else "deactivated"
        return PromotionApiResponse(message=f"{count} promotions {verb} successfully", data={"count": count})
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"bulk_set_active_core_error | active={active} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def get_active_promotions_report_core(platform: Optional[str] = None, depot_id: Optional[int] = None,
                                            start_date: Optional[datetime] = None,
                                            end_date: Optional[datetime] = None) -> PromotionApiResponse:
    try:
        now = get_now()
        window_start = ensure_aware(start_date) or start_of_month(now)
        window_end = ensure_aware(end_date) or now

        repository = PromotionsRepository()
        report = await repository.get_active_promotions_report(now, window_start, window_end, platform, depot_id)
        return PromotionApiResponse(
            message=PromotionMessages.ACTIVE_REPORT,
            data=report,
            summary={
                "total_active": len(report),
                "total_applications": sum(row["applications_count"] for row in report),
            },
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_active_promotions_report_core_error | platform={platform} depot_id={depot_id} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def get_tracking_report_core(promotion_id: Optional[int] = None, action_type: Optional[str] = None,
                                   start_date: Optional[datetime] = None,
                                   end_date: Optional[datetime] = None) -> PromotionApiResponse:
    try:
        repository = PromotionsRepository()
        rows = await repository.get_tracking(
            promotion_id=promotion_id,
            action_type=action_type,
            start_date=ensure_aware(start_date),
            end_date=ensure_aware(end_date),
            limit=configs.TRACKING_REPORT_LIMIT,
            include_promotion=True,
        )
        action_types: List[str] = list(dict.fromkeys(row["action_type"] for row in rows))
        return PromotionApiResponse(
            message=PromotionMessages.TRACKING_REPORT,
            data=rows,
            summary={"total_records": len(rows), "action_types": action_types},
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_tracking_report_core_error | promotion_id={promotion_id} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def get_usage_report_core(promotion_id: int, start_date: Optional[datetime] = None,
                                end_date: Optional[datetime] = None) -> PromotionApiResponse:
    try:
        repository = PromotionsRepository()
        usage = await repository.get_tracking(
            promotion_id=promotion_id,
            action_type=PromotionActionType.APPLIED,
            start_date=ensure_aware(start_date),
            end_date=ensure_aware(end_date),
        )
        return PromotionApiResponse(message=PromotionMessages.USAGE_REPORT, data=usage, summary={"total_usage": len(usage)})
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_usage_report_core_error | promotion_id={promotion_id} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def get_performance_report_core(start_date: Optional[datetime] = None,
                                      end_date: Optional[datetime] = None) -> PromotionApiResponse:
    try:
        repository = PromotionsRepository()
        rows = await repository.get_performance(ensure_aware(start_date), ensure_aware(end_date))
        return PromotionApiResponse(
            message=PromotionMessages.PERFORMANCE_REPORT,
            data=rows,
            summary={
                "total_promotions": len(rows),
                "total_applications": sum(row["total_applications"] for row in rows),
            },
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_performance_report_core_error | error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


async def get_customer_qualified_report_core(promotion_id: Optional[int] = None, start_date: Optional[datetime] = None,
                                             end_date: Optional[datetime] = None) -> PromotionApiResponse:
    """Every recorded application of one promotion, newest first."""
    try:
        PromotionRequestValidator.validate_report_promotion(promotion_id)

        repository = PromotionsRepository()
        applications = await repository.get_tracking(
            promotion_id=promotion_id,
            action_type=PromotionActionType.APPLIED,
            start_date=ensure_aware(start_date),
            end_date=ensure_aware(end_date),
        )
        return PromotionApiResponse(
            message=PromotionMessages.CUSTOMER_QUALIFIED_REPORT,
            data={"total_applications": len(applications), "applications": applications},
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"get_customer_qualified_report_core_error | promotion_id={promotion_id} error={e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))
