from sqlalchemy import Column, Integer, String, TIMESTAMP, text
from sqlalchemy.sql import func
from app.connections.database import Base


class CommonModel(Base):
    """Audit columns shared by the back-office tables"""
    __abstract__ = True

    is_active = Column(String(1), nullable=False, default="Y", server_default=text("'Y'"))
    createdate = Column(TIMESTAMP(timezone=True), nullable=False, server_default=func.now())
    createdby = Column(Integer, nullable=False, default=1, server_default=text("1"))
    updatedate = Column(TIMESTAMP(timezone=True), nullable=True)
    updatedby = Column(Integer, nullable=True)
