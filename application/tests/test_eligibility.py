from datetime import datetime, timezone

from app.models.promotions import (
    Promotion, PromotionCustomerCategory, PromotionCustomerExclusion, PromotionDepot, PromotionRoute,
    PromotionSalesperson,
)
from app.promotions.eligibility import EligibilityFilter, EvaluationContext

NOW = datetime(2025, 6, 1, tzinfo=timezone.utc)


def make_promotion(depots=(), salespersons=(), routes=(), categories=(), exclusions=()):
    promotion = Promotion(id=1, name="Test", code="TEST")
    promotion.depots = [PromotionDepot(depot_id=d) for d in depots]
    promotion.salespersons = [PromotionSalesperson(salesperson_id=s) for s in salespersons]
    promotion.routes = [PromotionRoute(route_id=r) for r in routes]
    promotion.customer_categories = [PromotionCustomerCategory(customer_category_id=c) for c in categories]
    promotion.exclusions = [PromotionCustomerExclusion(customer_id=c, is_excluded=flag) for c, flag in exclusions]
    return promotion


def context(**kwargs):
    kwargs.setdefault("customer_id", 100)
    return EvaluationContext(order_date=NOW, **kwargs)


def test_excluded_customer_is_skipped_even_when_depot_matches():
    promotion = make_promotion(depots=[5], exclusions=[(100, "Y")])
    assert not EligibilityFilter.is_eligible(promotion, context(depot_id=5), {})


def test_exclusion_flag_n_does_not_exclude():
    promotion = make_promotion(exclusions=[(100, "N")])
    assert EligibilityFilter.is_eligible(promotion, context(), {})


def test_exclusion_for_other_customer_is_ignored():
    promotion = make_promotion(exclusions=[(200, "Y")])
    assert EligibilityFilter.is_eligible(promotion, context(), {})


def test_open_promotion_accepts_any_context():
    promotion = make_promotion()
    for ctx in (context(), context(depot_id=1, salesman_id=2, route_id=3), context(customer_type="RETAIL")):
        assert EligibilityFilter.is_eligible(promotion, ctx, {})


def test_depot_restriction():
    promotion = make_promotion(depots=[5])
    assert EligibilityFilter.is_eligible(promotion, context(depot_id=5), {})
    assert not EligibilityFilter.is_eligible(promotion, context(depot_id=7), {})
    assert not EligibilityFilter.is_eligible(promotion, context(), {})


def test_any_populated_dimension_grants_eligibility():
    promotion = make_promotion(depots=[5], salespersons=[9], routes=[12])
    assert EligibilityFilter.is_eligible(promotion, context(depot_id=7, salesman_id=9), {})
    assert EligibilityFilter.is_eligible(promotion, context(depot_id=7, route_id=12), {})
    assert not EligibilityFilter.is_eligible(promotion, context(depot_id=7, salesman_id=8, route_id=11), {})


def test_empty_dimension_does_not_grant_eligibility_once_another_is_populated():
    # routes is empty, but depots is populated: a route id alone must not qualify
    promotion = make_promotion(depots=[5])
    assert not EligibilityFilter.is_eligible(promotion, context(route_id=12), {})


def test_customer_category_matches_by_code():
    promotion = make_promotion(categories=[3])
    codes = {3: "WHOLESALE"}
    assert EligibilityFilter.is_eligible(promotion, context(customer_type="WHOLESALE"), codes)
    assert not EligibilityFilter.is_eligible(promotion, context(customer_type="RETAIL"), codes)
    assert not EligibilityFilter.is_eligible(promotion, context(), codes)


def test_unknown_category_id_never_matches():
    promotion = make_promotion(categories=[99])
    assert not EligibilityFilter.is_eligible(promotion, context(customer_type="WHOLESALE"), {3: "WHOLESALE"})
