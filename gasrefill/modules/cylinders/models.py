from sqlalchemy import Column, Integer, String, DateTime, Enum as SQLAlchemyEnum
from sqlalchemy.sql import func
from gasrefill.db.base import Base
from gasrefill.modules.cylinders.enums import GasType, CylinderSize, CylinderStatus, enum_values

class Cylinder(Base):
    __tablename__ = "cylinders"

    id = Column(Integer, primary_key=True, index=True)
    serial_code = Column(String, unique=True, index=True, nullable=False)
    gas_type = Column(
        SQLAlchemyEnum(GasType, name="gas_type", values_callable=enum_values),
        nullable=False,
    )
    size = Column(
        SQLAlchemyEnum(CylinderSize, name="cylinder_size", values_callable=enum_values),
        nullable=False,
    )
    status = Column(
        SQLAlchemyEnum(CylinderStatus, name="cylinder_status", values_callable=enum_values),
        nullable=False,
        default=CylinderStatus.AVAILABLE,
        index=True,
    )
    current_holder = Column(String, nullable=True)  # Member reference while rented
    last_location = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    __mapper_args__ = {"eager_defaults": True}
