from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import and_, func, select, update
from sqlalchemy.orm import selectinload

# Database connection
from app.connections.database import get_db_session

# Models
from app.models.masters import Customer, CustomerCategory
from app.models.promotions import (
    Promotion, PromotionBenefit, PromotionChannel, PromotionCondition, PromotionConditionProduct,
    PromotionCustomerCategory, PromotionDepot, PromotionLevel, PromotionRoute, PromotionSalesperson,
    PromotionTracking,
)

# Constants
from app.core.constants import ActiveFlag, PromotionActionType

# Utils
from app.utils.promotion_utils import serialize_promotion, serialize_tracking

from app.logging.utils import get_app_logger
logger = get_app_logger("app.promotions_repository")

ACTIVE = ActiveFlag.YES


def _calculation_load_options():
    """Eager-load every active child collection the engine walks."""
    return (
        selectinload(Promotion.depots.and_(PromotionDepot.is_active == ACTIVE)),
        selectinload(Promotion.salespersons.and_(PromotionSalesperson.is_active == ACTIVE)),
        selectinload(Promotion.routes.and_(PromotionRoute.is_active == ACTIVE)),
        selectinload(Promotion.customer_categories.and_(PromotionCustomerCategory.is_active == ACTIVE)),
        selectinload(Promotion.exclusions),
        selectinload(Promotion.conditions.and_(PromotionCondition.is_active == ACTIVE))
            .selectinload(PromotionCondition.products.and_(PromotionConditionProduct.is_active == ACTIVE)),
        selectinload(Promotion.levels.and_(PromotionLevel.is_active == ACTIVE))
            .selectinload(PromotionLevel.benefits.and_(PromotionBenefit.is_active == ACTIVE))
            .selectinload(PromotionBenefit.product),
    )


def _active_channel(platform: str):
    return Promotion.channels.any(
        and_(PromotionChannel.channel_type == platform, PromotionChannel.is_active == ACTIVE)
    )


def _tracking_window(query, start_date: Optional[datetime], end_date: Optional[datetime]):
    if start_date is not None:
        query = query.where(PromotionTracking.action_date >= start_date)
    if end_date is not None:
        query = query.where(PromotionTracking.action_date <= end_date)
    return query


class PromotionsRepository:
    async def get_active_promotions(self, check_date: datetime, platform: Optional[str] = None) -> List[Promotion]:
        """Active promotions whose window contains check_date, children loaded and detached."""
        try:
            query = (
                select(Promotion)
                .where(
                    Promotion.is_active == ACTIVE,
                    Promotion.start_date <= check_date,
                    Promotion.end_date >= check_date,
                )
                .options(*_calculation_load_options())
                .order_by(Promotion.id)
            )
            if platform:
                query = query.where(_active_channel(platform))

            with get_db_session(read_only=True) as db:
                promotions = list(db.scalars(query).all())
            logger.info(f"get_active_promotions_result | check_date={check_date} platform={platform} count={len(promotions)}")
            return promotions
        except Exception as e:
            logger.error(f"get_active_promotions_error | check_date={check_date} platform={platform} error={e}", exc_info=True)
            raise

    async def get_customer_type(self, customer_id: int) -> Optional[str]:
        try:
            with get_db_session(read_only=True) as db:
                customer_type = db.scalar(select(Customer.type).where(Customer.id == customer_id))
            logger.info(f"get_customer_type_result | customer_id={customer_id} type={customer_type}")
            return customer_type
        except Exception as e:
            logger.error(f"get_customer_type_error | customer_id={customer_id} error={e}", exc_info=True)
            raise

    async def get_category_codes(self, category_ids: Iterable[int]) -> Dict[int, str]:
        """Resolve customer_category ids to codes in a single query."""
        ids = sorted(set(category_ids))
        if not ids:
            return {}
        try:
            query = select(CustomerCategory.id, CustomerCategory.category_code).where(CustomerCategory.id.in_(ids))
            with get_db_session(read_only=True) as db:
                rows = db.execute(query).all()
            logger.info(f"get_category_codes_result | requested={len(ids)} found={len(rows)}")
            return {row.id: row.category_code for row in rows}
        except Exception as e:
            logger.error(f"get_category_codes_error | ids={ids} error={e}", exc_info=True)
            raise

    async def promotion_exists(self, promotion_id: int) -> bool:
        try:
            with get_db_session(read_only=True) as db:
                found = db.scalar(select(Promotion.id).where(Promotion.id == promotion_id))
            return found is not None
        except Exception as e:
            logger.error(f"promotion_exists_error | promotion_id={promotion_id} error={e}", exc_info=True)
            raise

    async def create_tracking(self, promotion_id: int, action_type: str, user_id: int, comments: List[str], action_date: datetime) -> List[Dict]:
        """Append one tracking row per comment, all in one transaction."""
        try:
            with get_db_session() as db:
                rows = [
                    PromotionTracking(
                        parent_id=promotion_id,
                        action_type=action_type,
                        action_date=action_date,
                        user_id=user_id,
                        comments=comment,
                        is_active=ACTIVE,
                    )
                    for comment in comments
                ]
                db.add_all(rows)
                db.flush()
                created = [serialize_tracking(row) for row in rows]
            logger.info(f"create_tracking_result | promotion_id={promotion_id} action={action_type} count={len(created)}")
            return created
        except Exception as e:
            logger.error(f"create_tracking_error | promotion_id={promotion_id} action={action_type} error={e}", exc_info=True)
            raise

    async def set_promotion_active(self, promotion_id: int, active: bool, user_id: int, now: datetime) -> Optional[Dict]:
        """Flip is_active and record ACTIVATED/DEACTIVATED together; None when the promotion is unknown."""
        flag = ActiveFlag.YES if active else ActiveFlag.NO
        action_type = PromotionActionType.ACTIVATED if active else PromotionActionType.DEACTIVATED
        try:
            with get_db_session() as db:
                promotion = db.get(Promotion, promotion_id)
                if promotion is None:
                    return None
                promotion.is_active = flag
                promotion.updatedate = now
                promotion.updatedby = user_id
                db.add(PromotionTracking(
                    parent_id=promotion_id,
                    action_type=action_type,
                    action_date=now,
                    user_id=user_id,
                    comments=f"Promotion {'activated' if active else 'deactivated'}",
                    is_active=ACTIVE,
                ))
                db.flush()
                data = serialize_promotion(promotion)
            logger.info(f"set_promotion_active_result | promotion_id={promotion_id} is_active={flag}")
            return data
        except Exception as e:
            logger.error(f"set_promotion_active_error | promotion_id={promotion_id} is_active={flag} error={e}", exc_info=True)
            raise

    async def bulk_set_active(self, promotion_ids: List[int], active: bool, user_id: int, now: datetime) -> int:
        flag = ActiveFlag.YES if active else ActiveFlag.NO
        if not promotion_ids:
            return 0
        try:
            statement = (
                update(Promotion)
                .where(Promotion.id.in_(promotion_ids))
                .values(is_active=flag, updatedate=now, updatedby=user_id)
                .execution_options(synchronize_session=False)
            )
            with get_db_session() as db:
                count = db.execute(statement).rowcount
            logger.info(f"bulk_set_active_result | ids={promotion_ids} is_active={flag} count={count}")
            return count
        except Exception as e:
            logger.error(f"bulk_set_active_error | ids={promotion_ids} is_active={flag} error={e}", exc_info=True)
            raise

    async def get_tracking(self, promotion_id: Optional[int] = None, action_type: Optional[str] = None,
                           start_date: Optional[datetime] = None, end_date: Optional[datetime] = None,
                           limit: Optional[int] = None, include_promotion: bool = False) -> List[Dict]:
        """Tracking rows newest first."""
        try:
            query = select(PromotionTracking)
            if promotion_id is not None:
                query = query.where(PromotionTracking.parent_id == promotion_id)
            if action_type:
                query = query.where(PromotionTracking.action_type == action_type)
            query = _tracking_window(query, start_date, end_date)
            query = query.order_by(PromotionTracking.action_date.desc(), PromotionTracking.id.desc())
            if include_promotion:
                query = query.options(selectinload(PromotionTracking.promotion))
            if limit:
                query = query.limit(limit)

            with get_db_session(read_only=True) as db:
                rows = [serialize_tracking(row, include_promotion=include_promotion) for row in db.scalars(query).all()]
            logger.info(f"get_tracking_result | promotion_id={promotion_id} action={action_type} count={len(rows)}")
            return rows
        except Exception as e:
            logger.error(f"get_tracking_error | promotion_id={promotion_id} action={action_type} error={e}", exc_info=True)
            raise

    async def get_active_promotions_report(self, now: datetime, window_start: datetime, window_end: datetime,
                                           platform: Optional[str] = None, depot_id: Optional[int] = None) -> List[Dict]:
        try:
            applied_in_window = PromotionTracking.action_type == PromotionActionType.APPLIED
            applied_in_window = and_(
                applied_in_window,
                PromotionTracking.action_date >= window_start,
                PromotionTracking.action_date <= window_end,
            )
            query = (
                select(Promotion)
                .where(Promotion.is_active == ACTIVE, Promotion.start_date <= now, Promotion.end_date >= now)
                .options(
                    selectinload(Promotion.channels.and_(PromotionChannel.is_active == ACTIVE)),
                    selectinload(Promotion.depots.and_(PromotionDepot.is_active == ACTIVE)).selectinload(PromotionDepot.depot),
                    selectinload(Promotion.tracking.and_(applied_in_window)),
                )
                .order_by(Promotion.start_date.desc(), Promotion.id)
            )
            if platform:
                query = query.where(_active_channel(platform))
            if depot_id is not None:
                query = query.where(Promotion.depots.any(
                    and_(PromotionDepot.depot_id == depot_id, PromotionDepot.is_active == ACTIVE)
                ))

            with get_db_session(read_only=True) as db:
                report = [
                    {
                        **serialize_promotion(promotion),
                        "applications_count": len(promotion.tracking),
                        "platforms": [channel.channel_type for channel in promotion.channels],
                        "depots": [entry.depot.name if entry.depot else None for entry in promotion.depots],
                    }
                    for promotion in db.scalars(query).all()
                ]
            logger.info(f"get_active_promotions_report_result | platform={platform} depot_id={depot_id} count={len(report)}")
            return report
        except Exception as e:
            logger.error(f"get_active_promotions_report_error | platform={platform} depot_id={depot_id} error={e}", exc_info=True)
            raise

    async def get_performance(self, start_date: Optional[datetime] = None, end_date: Optional[datetime] = None) -> List[Dict]:
        """Active promotions with their APPLIED counts, zero included."""
        try:
            join_on = and_(
                PromotionTracking.parent_id == Promotion.id,
                PromotionTracking.action_type == PromotionActionType.APPLIED,
            )
            if start_date is not None:
                join_on = and_(join_on, PromotionTracking.action_date >= start_date)
            if end_date is not None:
                join_on = and_(join_on, PromotionTracking.action_date <= end_date)

            query = (
                select(
                    Promotion.id, Promotion.name, Promotion.code, Promotion.start_date, Promotion.end_date,
                    func.count(PromotionTracking.id).label("total_applications"),
                )
                .outerjoin(PromotionTracking, join_on)
                .where(Promotion.is_active == ACTIVE)
                .group_by(Promotion.id, Promotion.name, Promotion.code, Promotion.start_date, Promotion.end_date)
                .order_by(Promotion.id)
            )
            with get_db_session(read_only=True) as db:
                rows = [
                    {
                        "promotion_id": row.id,
                        "promotion_name": row.name,
                        "promotion_code": row.code,
                        "total_applications": row.total_applications,
                        "start_date": row.start_date,
                        "end_date": row.end_date,
                    }
                    for row in db.execute(query).all()
                ]
            logger.info(f"get_performance_result | count={len(rows)}")
            return rows
        except Exception as e:
            logger.error(f"get_performance_error | error={e}", exc_info=True)
            raise
