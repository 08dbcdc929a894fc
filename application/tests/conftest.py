import os
import tempfile

# Settings are read at import time, so the environment is fixed before any app import
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DATABASE_READ_URL"] = "sqlite://"
os.environ["TOKEN_VALIDATION_ENABLED"] = "false"
os.environ["SENTRY_ENABLED"] = "false"
os.environ["FIREHOSE_ENABLED"] = "false"
os.environ["AUDIT_LOGGING_ENABLED"] = "false"
os.environ["SLACK_ALERTS_ENABLED"] = "false"
os.environ["DEBUG"] = "true"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ["LOG_DIR"] = tempfile.mkdtemp(prefix="sfa-promotions-logs-")

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from app.connections.database import Base, SessionLocal, engine
from app.models.promotions import (
    Promotion, PromotionBenefit, PromotionChannel, PromotionCondition, PromotionConditionProduct,
    PromotionCustomerCategory, PromotionCustomerExclusion, PromotionDepot, PromotionLevel,
    PromotionRoute, PromotionSalesperson, PromotionTracking,
)

WINDOW_START = datetime(2020, 1, 1)
WINDOW_END = datetime(2099, 12, 31)


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def client():
    from app.main import app
    return TestClient(app)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


class PromotionFactory:
    """Builds persisted promotions with their child rows in one call."""

    def __init__(self, session):
        self.session = session
        self._seq = 0

    def master(self, model, **fields):
        row = model(**fields)
        self.session.add(row)
        self.session.commit()
        return row

    def create(self, code=None, start_date=WINDOW_START, end_date=WINDOW_END, is_active="Y",
               depots=(), salespersons=(), routes=(), categories=(), exclusions=(), channels=(),
               conditions=None, levels=None):
        """
        conditions: list of (min_value, [criteria dict, ...])
        levels: list of dicts with level_number, threshold_value, discount_type, discount_value, benefits
        """
        self._seq += 1
        code = code or f"PROMO{self._seq}"
        promotion = Promotion(name=f"{code} promotion", code=code, start_date=start_date,
                              end_date=end_date, is_active=is_active)
        promotion.depots = [PromotionDepot(depot_id=d) for d in depots]
        promotion.salespersons = [PromotionSalesperson(salesperson_id=s) for s in salespersons]
        promotion.routes = [PromotionRoute(route_id=r) for r in routes]
        promotion.customer_categories = [PromotionCustomerCategory(customer_category_id=c) for c in categories]
        promotion.exclusions = [PromotionCustomerExclusion(customer_id=c, is_excluded="Y") for c in exclusions]
        promotion.channels = [PromotionChannel(channel_type=c) for c in channels]

        if conditions is None:
            conditions = [(Decimal("0"), [{"product_id": 1}])]
        promotion.conditions = [
            PromotionCondition(min_value=min_value, products=[PromotionConditionProduct(**criteria) for criteria in criteria_list])
            for min_value, criteria_list in conditions
        ]

        if levels is None:
            levels = [{"level_number": 1, "threshold_value": Decimal("0"), "discount_type": "PERCENTAGE", "discount_value": Decimal("10")}]
        promotion.levels = [
            PromotionLevel(
                level_number=level["level_number"],
                threshold_value=level["threshold_value"],
                discount_type=level.get("discount_type", "PERCENTAGE"),
                discount_value=level.get("discount_value"),
                benefits=[PromotionBenefit(**benefit) for benefit in level.get("benefits", [])],
            )
            for level in levels
        ]

        self.session.add(promotion)
        self.session.commit()
        return promotion.id


@pytest.fixture
def factory(db):
    return PromotionFactory(db)


@pytest.fixture
def tracking(db):
    """Tracking rows for a promotion as currently committed."""
    def _rows(promotion_id, action_type=None):
        db.expire_all()
        query = db.query(PromotionTracking).filter(PromotionTracking.parent_id == promotion_id)
        if action_type:
            query = query.filter(PromotionTracking.action_type == action_type)
        return query.order_by(PromotionTracking.id).all()
    return _rows
