"""
Master-data tables the promotion slice reads but never writes.
"""

from sqlalchemy import Column, Integer, String
from app.models.common import CommonModel


class Customer(CommonModel):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True)
    # holds a customer_category.category_code
    type = Column(String(50), nullable=True)


class CustomerCategory(CommonModel):
    __tablename__ = "customer_category"

    id = Column(Integer, primary_key=True, index=True)
    category_code = Column(String(50), nullable=False, unique=True)
    category_name = Column(String(255), nullable=False)


class Product(CommonModel):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=False)


class Depot(CommonModel):
    __tablename__ = "depots"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    code = Column(String(50), nullable=True)
