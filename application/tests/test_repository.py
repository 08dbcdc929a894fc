import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from app.core.constants import PromotionActionType
from app.models.masters import CustomerCategory, Customer, Product
from app.models.promotions import PromotionConditionProduct, PromotionLevel
from app.repository.promotions import PromotionsRepository

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


def run(coro):
    return asyncio.run(coro)


def test_active_promotions_respect_flag_and_window(factory):
    active_id = factory.create(code="ACTIVE")
    factory.create(code="INACTIVE", is_active="N")
    factory.create(code="EXPIRED", start_date=datetime(2020, 1, 1), end_date=datetime(2021, 1, 1))
    factory.create(code="FUTURE", start_date=datetime(2030, 1, 1))

    promotions = run(PromotionsRepository().get_active_promotions(NOW))
    assert [p.id for p in promotions] == [active_id]


def test_window_bounds_are_inclusive(factory):
    start = datetime(2025, 6, 1)
    end = datetime(2025, 6, 30)
    promotion_id = factory.create(start_date=start, end_date=end)
    repository = PromotionsRepository()
    assert [p.id for p in run(repository.get_active_promotions(start.replace(tzinfo=timezone.utc)))] == [promotion_id]
    assert [p.id for p in run(repository.get_active_promotions(end.replace(tzinfo=timezone.utc)))] == [promotion_id]


def test_platform_filters_on_active_channels(factory):
    mobile_id = factory.create(code="MOBILE", channels=["MOBILE"])
    factory.create(code="WEB", channels=["WEB"])
    repository = PromotionsRepository()
    assert [p.id for p in run(repository.get_active_promotions(NOW, "MOBILE"))] == [mobile_id]
    assert len(run(repository.get_active_promotions(NOW))) == 2


def test_levels_load_richest_first_and_skip_inactive_rows(factory, db):
    promotion_id = factory.create(levels=[
        {"level_number": 1, "threshold_value": Decimal("100"), "discount_value": Decimal("5")},
        {"level_number": 3, "threshold_value": Decimal("500"), "discount_value": Decimal("15")},
        {"level_number": 2, "threshold_value": Decimal("250"), "discount_value": Decimal("10")},
    ])
    db.query(PromotionLevel).filter(PromotionLevel.level_number == 2).update({"is_active": "N"})
    db.query(PromotionConditionProduct).update({"is_active": "N"})
    db.commit()

    promotion = run(PromotionsRepository().get_active_promotions(NOW))[0]
    assert promotion.id == promotion_id
    assert [level.level_number for level in promotion.levels] == [3, 1]
    assert promotion.conditions[0].products == []


def test_benefit_products_are_loaded(factory, db):
    factory.master(Product, id=42, name="Cola", code="COLA")
    factory.create(levels=[{
        "level_number": 1, "threshold_value": Decimal("0"), "discount_value": Decimal("0"),
        "benefits": [{"benefit_type": "FREE_PRODUCT", "product_id": 42, "benefit_value": Decimal("2")}],
    }])
    promotion = run(PromotionsRepository().get_active_promotions(NOW))[0]
    benefit = promotion.levels[0].benefits[0]
    assert benefit.product.name == "Cola"
    assert benefit.benefit_value == Decimal("2")


def test_customer_type_and_category_codes(factory):
    factory.master(Customer, id=100, name="Corner shop", type="WHOLESALE")
    factory.master(CustomerCategory, id=3, category_code="WHOLESALE", category_name="Wholesale")
    factory.master(CustomerCategory, id=4, category_code="RETAIL", category_name="Retail")
    repository = PromotionsRepository()

    assert run(repository.get_customer_type(100)) == "WHOLESALE"
    assert run(repository.get_customer_type(999)) is None
    assert run(repository.get_category_codes([3, 4, 3, 99])) == {3: "WHOLESALE", 4: "RETAIL"}
    assert run(repository.get_category_codes([])) == {}


def test_create_tracking_writes_one_row_per_comment(factory, tracking):
    promotion_id = factory.create()
    created = run(PromotionsRepository().create_tracking(
        promotion_id, PromotionActionType.PERIOD_SETTLEMENT, 7, ["first", "second"], NOW,
    ))
    assert [row["comments"] for row in created] == ["first", "second"]
    rows = tracking(promotion_id)
    assert [row.action_type for row in rows] == ["PERIOD_SETTLEMENT", "PERIOD_SETTLEMENT"]
    assert {row.user_id for row in rows} == {7}


def test_get_tracking_filters_and_orders_newest_first(factory):
    promotion_id = factory.create()
    repository = PromotionsRepository()
    run(repository.create_tracking(promotion_id, PromotionActionType.APPLIED, 1, ["old"], NOW - timedelta(days=10)))
    run(repository.create_tracking(promotion_id, PromotionActionType.APPLIED, 1, ["new"], NOW))
    run(repository.create_tracking(promotion_id, PromotionActionType.ACTIVATED, 1, ["flag"], NOW - timedelta(days=1)))

    applied = run(repository.get_tracking(promotion_id=promotion_id, action_type="APPLIED"))
    assert [row["comments"] for row in applied] == ["new", "old"]

    recent = run(repository.get_tracking(promotion_id=promotion_id, start_date=NOW - timedelta(days=2)))
    assert [row["comments"] for row in recent] == ["new", "flag"]

    limited = run(repository.get_tracking(limit=1, include_promotion=True))
    assert len(limited) == 1
    assert limited[0]["promotion"]["id"] == promotion_id
