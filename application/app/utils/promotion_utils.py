"""
Serialization helpers for promotion rows returned by the API.
"""
from typing import Dict


def serialize_promotion(promotion) -> Dict:
    return {
        "id": promotion.id,
        "name": promotion.name,
        "code": promotion.code,
        "description": promotion.description,
        "start_date": promotion.start_date,
        "end_date": promotion.end_date,
        "is_active": promotion.is_active,
        "createdate": promotion.createdate,
        "createdby": promotion.createdby,
        "updatedate": promotion.updatedate,
        "updatedby": promotion.updatedby,
    }


def serialize_tracking(tracking, include_promotion: bool = False) -> Dict:
    data = {
        "id": tracking.id,
        "parent_id": tracking.parent_id,
        "action_type": tracking.action_type,
        "action_date": tracking.action_date,
        "user_id": tracking.user_id,
        "comments": tracking.comments,
        "is_active": tracking.is_active,
    }
    if include_promotion:
        promotion = tracking.promotion
        data["promotion"] = {"id": promotion.id, "name": promotion.name, "code": promotion.code} if promotion else None
    return data


def apply_comment(order_id, customer_id, discount_amount, free_products_json: str) -> str:
    return (
        f"Applied to order {order_id} for customer {customer_id}. "
        f"Discount: {discount_amount}. Free Products: {free_products_json}"
    )


def settlement_comment(customer_id, period_start: str, period_end: str) -> str:
    return f"Period settlement for customer {customer_id}. Period: {period_start} to {period_end}"
