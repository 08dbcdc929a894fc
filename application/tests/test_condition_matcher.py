from decimal import Decimal

from app.dto.promotions import OrderLine
from app.models.promotions import PromotionCondition, PromotionConditionProduct
from app.promotions.conditions.order_lines import evaluate, line_matches


def make_condition(min_value, *criteria):
    return PromotionCondition(min_value=min_value, products=[PromotionConditionProduct(**c) for c in criteria])


def test_matches_on_product_category_or_group():
    condition = make_condition(Decimal("0"), {"product_id": 1}, {"category_id": 20}, {"product_group": "SODA"})
    assert line_matches(condition, OrderLine(product_id=1))
    assert line_matches(condition, OrderLine(product_id=2, category_id=20))
    assert line_matches(condition, OrderLine(product_id=3, product_group="SODA"))
    assert not line_matches(condition, OrderLine(product_id=4, category_id=21, product_group="JUICE"))


def test_unset_discriminators_never_match_each_other():
    condition = make_condition(Decimal("0"), {"product_id": 1})
    # category_id and product_group are None on both sides
    assert not line_matches(condition, OrderLine(product_id=2))


def test_accumulates_only_matching_lines_with_exact_decimals():
    condition = make_condition(Decimal("10.00"), {"product_id": 1})
    lines = [
        OrderLine(product_id=1, quantity=Decimal("3"), unit_price=Decimal("0.10")),
        OrderLine(product_id=1, quantity=Decimal("2"), unit_price=Decimal("4.95")),
        OrderLine(product_id=2, quantity=Decimal("100"), unit_price=Decimal("100")),
    ]
    match = evaluate(condition, lines)
    assert match.total_quantity == Decimal("5")
    assert match.total_value == Decimal("10.20")
    assert match.met


def test_boundary_is_inclusive():
    condition = make_condition(Decimal("100.00"), {"product_id": 1})
    match = evaluate(condition, [OrderLine(product_id=1, quantity=Decimal("4"), unit_price=Decimal("25"))])
    assert match.total_value == Decimal("100")
    assert match.met


def test_below_min_value_is_not_met():
    condition = make_condition(Decimal("100.00"), {"product_id": 1})
    match = evaluate(condition, [OrderLine(product_id=1, quantity=Decimal("1"), unit_price=Decimal("99.99"))])
    assert not match.met


def test_missing_min_value_counts_as_zero():
    condition = make_condition(None, {"product_id": 1})
    match = evaluate(condition, [OrderLine(product_id=5, quantity=Decimal("1"), unit_price=Decimal("1"))])
    assert match.total_value == Decimal("0")
    assert match.met
