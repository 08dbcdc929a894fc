from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Request

# Core functions
from app.core.promotion_functions import (
    calculate_eligible_promotions_core, apply_promotion_core, settle_period_promotion_core,
    set_promotion_active_core, bulk_set_active_core, get_active_promotions_report_core,
    get_tracking_report_core, get_usage_report_core, get_performance_report_core, get_customer_qualified_report_core,
)

# DTOs
from app.dto.promotions import (
    CalculatePromotionsRequest, CalculatePromotionsResponse, ApplyPromotionRequest, ApplyPromotionResponse,
    SettlePeriodRequest, BulkPromotionIdsRequest, PromotionApiResponse,
)

# Settings
from app.config.settings import SFAConfigs
configs = SFAConfigs()

api_router = APIRouter(prefix="/promotions", tags=["promotions"])


def _caller_id(request: Request) -> int:
    """Audit user for tracking rows; falls back to the configured default."""
    try:
        return int(getattr(request.state, "user_id", None))
    except (TypeError, ValueError):
        return configs.DEFAULT_AUDIT_USER_ID


@api_router.post("/calculate", response_model=CalculatePromotionsResponse)
async def calculate_eligible_promotions(request: CalculatePromotionsRequest):
    """ Calculate every promotion the order lines qualify for """
    return await calculate_eligible_promotions_core(request)


@api_router.post("/apply", response_model=ApplyPromotionResponse)
async def apply_promotion(request: ApplyPromotionRequest, http_request: Request):
    """ Record a promotion as applied to an order """
    return await apply_promotion_core(request, _caller_id(http_request))


@api_router.post("/bulk-activate", response_model=PromotionApiResponse)
async def bulk_activate_promotions(request: BulkPromotionIdsRequest, http_request: Request):
    return await bulk_set_active_core(request, True, _caller_id(http_request))


@api_router.post("/bulk-deactivate", response_model=PromotionApiResponse)
async def bulk_deactivate_promotions(request: BulkPromotionIdsRequest, http_request: Request):
    return await bulk_set_active_core(request, False, _caller_id(http_request))


@api_router.get("/reports/active", response_model=PromotionApiResponse)
async def active_promotions_report(platform: Optional[str] = None, depot_id: Optional[int] = None,
                                   start_date: Optional[datetime] = None, end_date: Optional[datetime] = None):
    """ Active promotions with application counts for the window """
    return await get_active_promotions_report_core(platform, depot_id, start_date, end_date)


@api_router.get("/reports/tracking", response_model=PromotionApiResponse)
async def tracking_report(promotion_id: Optional[int] = None, action_type: Optional[str] = None,
                          start_date: Optional[datetime] = None, end_date: Optional[datetime] = None):
    return await get_tracking_report_core(promotion_id, action_type, start_date, end_date)


@api_router.get("/reports/performance", response_model=PromotionApiResponse)
async def performance_report(start_date: Optional[datetime] = None, end_date: Optional[datetime] = None):
    return await get_performance_report_core(start_date, end_date)


@api_router.get("/reports/customer-qualified", response_model=PromotionApiResponse)
async def customer_qualified_report(promotion_id: Optional[int] = None, start_date: Optional[datetime] = None,
                                    end_date: Optional[datetime] = None):
    """ Applications of one promotion, newest first """
    return await get_customer_qualified_report_core(promotion_id, start_date, end_date)


@api_router.post("/{promotion_id}/settle", response_model=PromotionApiResponse)
async def settle_period_promotion(promotion_id: int, request: SettlePeriodRequest, http_request: Request):
    """ Record a period settlement for each customer """
    return await settle_period_promotion_core(promotion_id, request, _caller_id(http_request))


@api_router.patch("/{promotion_id}/activate", response_model=PromotionApiResponse)
async def activate_promotion(promotion_id: int, http_request: Request):
    return await set_promotion_active_core(promotion_id, True, _caller_id(http_request))


@api_router.patch("/{promotion_id}/deactivate", response_model=PromotionApiResponse)
async def deactivate_promotion(promotion_id: int, http_request: Request):
    return await set_promotion_active_core(promotion_id, False, _caller_id(http_request))


@api_router.get("/{promotion_id}/usage", response_model=PromotionApiResponse)
async def promotion_usage_report(promotion_id: int, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None):
    return await get_usage_report_core(promotion_id, start_date, end_date)
