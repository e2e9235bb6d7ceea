from sqlalchemy import Column, Integer, Float, DateTime, Enum as SQLAlchemyEnum, JSON
from sqlalchemy.sql import func
from gasrefill.db.base import Base
from gasrefill.modules.cylinders.enums import enum_values
from gasrefill.modules.transactions.enums import TransactionKind

class TransactionRecord(Base):
    """Append-only accounting log entry, one per workflow batch"""
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(
        SQLAlchemyEnum(TransactionKind, name="transaction_kind", values_callable=enum_values),
        nullable=False,
        index=True,
    )
    cylinder_ids = Column(JSON, nullable=False)
    # Plain reference: the log outlives deleted stations
    station_id = Column(Integer, nullable=True, index=True)
    cost = Column(Float, nullable=False, default=0.0)
    details = Column(JSON, nullable=True)
    occurred_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
