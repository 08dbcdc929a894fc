from decimal import Decimal
from datetime import datetime
from typing import Annotated, Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, PlainSerializer

# Money and quantities stay Decimal in Python and go out as JSON numbers
JsonDecimal = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class OrderLine(BaseModel):
    """A transient order line supplied for one evaluation call"""
    product_id: Optional[int] = Field(None, description="Product id")
    category_id: Optional[int] = Field(None, description="Product category id")
    product_group: Optional[str] = Field(None, description="Named product group")
    quantity: Optional[Decimal] = Field(None, description="Ordered quantity, missing counts as 0")
    unit_price: Optional[Decimal] = Field(None, description="Unit price, missing counts as 0")


class CalculatePromotionsRequest(BaseModel):
    # Required fields are checked by PromotionRequestValidator so that
    # missing values surface as 400 with the service's own message.
    customer_id: Optional[int] = Field(None, description="Customer placing the order")
    order_lines: Optional[List[OrderLine]] = Field(None, description="Order lines to evaluate")
    depot_id: Optional[int] = Field(None, description="Depot serving the order")
    salesman_id: Optional[int] = Field(None, description="Salesperson taking the order")
    route_id: Optional[int] = Field(None, description="Route of the visit")
    order_date: Optional[datetime] = Field(None, description="Evaluation date, defaults to now")
    platform: Optional[str] = Field(None, description="Channel type the order comes from")


class FreeProduct(BaseModel):
    product_id: Optional[int]
    product_name: Optional[str] = None
    product_code: Optional[str] = None
    quantity: JsonDecimal
    gift_limit: int = 0


class EligiblePromotion(BaseModel):
    promotion_id: int
    promotion_name: str
    promotion_code: str
    level_number: int
    discount_type: str
    discount_amount: JsonDecimal
    free_products: List[FreeProduct] = Field(default_factory=list)
    qualified_quantity: JsonDecimal
    qualified_value: JsonDecimal
    threshold_met: JsonDecimal


class CalculationSummary(BaseModel):
    total_eligible: int
    total_discount: JsonDecimal


class CalculatePromotionsResponse(BaseModel):
    success: bool = True
    message: str
    data: List[EligiblePromotion]
    summary: CalculationSummary


class ApplyPromotionRequest(BaseModel):
    promotion_id: Optional[int] = Field(None, description="Promotion being applied")
    order_id: Optional[Union[int, str]] = Field(None, description="Order the promotion is applied to")
    customer_id: Optional[int] = Field(None, description="Customer on the order")
    discount_amount: Optional[JsonDecimal] = Field(None, description="Discount granted")
    free_products: Optional[List[Dict[str, Any]]] = Field(None, description="Free products granted")


class AppliedPromotion(BaseModel):
    promotion_id: int
    order_id: Optional[Union[int, str]] = None
    customer_id: int
    discount_amount: Optional[JsonDecimal] = None
    free_products: Optional[List[Dict[str, Any]]] = None
    applied_at: datetime


class ApplyPromotionResponse(BaseModel):
    success: bool = True
    message: str
    data: AppliedPromotion


class SettlePeriodRequest(BaseModel):
    period_start: Optional[str] = Field(None, description="Settlement period start")
    period_end: Optional[str] = Field(None, description="Settlement period end")
    customer_ids: Optional[List[int]] = Field(None, description="Customers to settle")


class BulkPromotionIdsRequest(BaseModel):
    promotion_ids: Optional[List[int]] = Field(None, description="Promotions to update")


class PromotionApiResponse(BaseModel):
    """Envelope shared by lifecycle and report endpoints"""
    success: bool = True
    message: str
    data: Any = None
    summary: Optional[Dict[str, Any]] = None
