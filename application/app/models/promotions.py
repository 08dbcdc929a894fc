"""
SQLAlchemy ORM models for promotions and their child collections.
Child rows are soft-deleted through is_active = 'N'.
"""

from sqlalchemy import Column, Integer, String, DECIMAL, TIMESTAMP, ForeignKey, Text, Index, text
from sqlalchemy.orm import relationship
from app.models.common import CommonModel
from app.models.masters import Depot, Product


class Promotion(CommonModel):
    __tablename__ = "promotions"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    start_date = Column(TIMESTAMP(timezone=True), nullable=False)
    end_date = Column(TIMESTAMP(timezone=True), nullable=False)

    channels = relationship("PromotionChannel", back_populates="promotion", order_by="PromotionChannel.id")
    depots = relationship("PromotionDepot", back_populates="promotion", order_by="PromotionDepot.id")
    salespersons = relationship("PromotionSalesperson", back_populates="promotion", order_by="PromotionSalesperson.id")
    routes = relationship("PromotionRoute", back_populates="promotion", order_by="PromotionRoute.id")
    customer_categories = relationship("PromotionCustomerCategory", back_populates="promotion", order_by="PromotionCustomerCategory.id")
    exclusions = relationship("PromotionCustomerExclusion", back_populates="promotion", order_by="PromotionCustomerExclusion.id")
    conditions = relationship("PromotionCondition", back_populates="promotion", order_by="PromotionCondition.id")
    # richest tier first; id keeps equal thresholds in insertion order
    levels = relationship(
        "PromotionLevel",
        back_populates="promotion",
        order_by=lambda: (PromotionLevel.threshold_value.desc(), PromotionLevel.id),
    )
    tracking = relationship("PromotionTracking", back_populates="promotion", order_by="PromotionTracking.id")

    __table_args__ = (
        Index('idx_promotions_active_window', 'is_active', 'start_date', 'end_date'),
    )

    def __repr__(self):
        return f"<Promotion(id={self.id}, code='{self.code}', is_active='{self.is_active}')>"


class PromotionChannel(CommonModel):
    __tablename__ = "promotion_channels"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_type = Column(String(50), nullable=False)

    promotion = relationship("Promotion", back_populates="channels")


class PromotionDepot(CommonModel):
    __tablename__ = "promotion_depots"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    depot_id = Column(Integer, ForeignKey("depots.id"), nullable=False, index=True)

    promotion = relationship("Promotion", back_populates="depots")
    depot = relationship(Depot)


class PromotionSalesperson(CommonModel):
    __tablename__ = "promotion_salespersons"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    salesperson_id = Column(Integer, nullable=False, index=True)

    promotion = relationship("Promotion", back_populates="salespersons")


class PromotionRoute(CommonModel):
    __tablename__ = "promotion_routes"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    route_id = Column(Integer, nullable=False, index=True)

    promotion = relationship("Promotion", back_populates="routes")


class PromotionCustomerCategory(CommonModel):
    __tablename__ = "promotion_customer_categories"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_category_id = Column(Integer, ForeignKey("customer_category.id"), nullable=False)

    promotion = relationship("Promotion", back_populates="customer_categories")


class PromotionCustomerExclusion(CommonModel):
    __tablename__ = "promotion_customer_exclusions"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, nullable=False, index=True)
    is_excluded = Column(String(1), nullable=False, default="Y", server_default=text("'Y'"))

    promotion = relationship("Promotion", back_populates="exclusions")


class PromotionCondition(CommonModel):
    __tablename__ = "promotion_conditions"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    min_value = Column(DECIMAL(18, 2), nullable=True)
    max_value = Column(DECIMAL(18, 2), nullable=True)

    promotion = relationship("Promotion", back_populates="conditions")
    products = relationship("PromotionConditionProduct", back_populates="condition", order_by="PromotionConditionProduct.id")


class PromotionConditionProduct(CommonModel):
    __tablename__ = "promotion_condition_products"

    id = Column(Integer, primary_key=True)
    condition_id = Column(Integer, ForeignKey("promotion_conditions.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, nullable=True)
    category_id = Column(Integer, nullable=True)
    product_group = Column(String(100), nullable=True)
    condition_quantity = Column(DECIMAL(18, 2), nullable=False, default=0, server_default="0")

    condition = relationship("PromotionCondition", back_populates="products")


class PromotionLevel(CommonModel):
    __tablename__ = "promotion_levels"

    id = Column(Integer, primary_key=True)
    promotion_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    level_number = Column(Integer, nullable=False)
    threshold_value = Column(DECIMAL(18, 2), nullable=False)
    discount_type = Column(String(20), nullable=False, default="PERCENTAGE", server_default=text("'PERCENTAGE'"))
    discount_value = Column(DECIMAL(18, 2), nullable=True)

    promotion = relationship("Promotion", back_populates="levels")
    benefits = relationship("PromotionBenefit", back_populates="level", order_by="PromotionBenefit.id")


class PromotionBenefit(CommonModel):
    __tablename__ = "promotion_benefits"

    id = Column(Integer, primary_key=True)
    level_id = Column(Integer, ForeignKey("promotion_levels.id", ondelete="CASCADE"), nullable=False, index=True)
    benefit_type = Column(String(30), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=True)
    benefit_value = Column(DECIMAL(18, 2), nullable=False, default=0, server_default="0")
    gift_limit = Column(Integer, nullable=True)

    level = relationship("PromotionLevel", back_populates="benefits")
    product = relationship(Product)


class PromotionTracking(CommonModel):
    """Append-only audit trail of promotion actions (APPLIED, ACTIVATED, ...)."""
    __tablename__ = "promotion_tracking"

    id = Column(Integer, primary_key=True)
    parent_id = Column(Integer, ForeignKey("promotions.id", ondelete="CASCADE"), nullable=False, index=True)
    action_type = Column(String(30), nullable=False)
    action_date = Column(TIMESTAMP(timezone=True), nullable=False)
    user_id = Column(Integer, nullable=False)
    comments = Column(Text, nullable=True)

    promotion = relationship("Promotion", back_populates="tracking")

    __table_args__ = (
        Index('idx_promotion_tracking_action', 'parent_id', 'action_type', 'action_date'),
    )
