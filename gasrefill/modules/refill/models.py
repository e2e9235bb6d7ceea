from sqlalchemy import Column, Integer, String, Float, ForeignKey, Enum as SQLAlchemyEnum
from sqlalchemy.orm import relationship
from gasrefill.db.base import Base
from gasrefill.modules.cylinders.enums import GasType, CylinderSize, enum_values

class RefillStation(Base):
    __tablename__ = "refill_stations"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False, default="")
    contact_person = Column(String, nullable=False, default="")
    phone = Column(String, nullable=False, default="")

    # Relationships
    price_rules = relationship(
        "RefillPriceRule",
        back_populates="station",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="RefillPriceRule.position",
    )

class RefillPriceRule(Base):
    __tablename__ = "refill_price_rules"

    id = Column(Integer, primary_key=True, index=True)
    station_id = Column(
        Integer,
        ForeignKey("refill_stations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    gas_type = Column(
        SQLAlchemyEnum(GasType, name="gas_type", values_callable=enum_values),
        nullable=False,
    )
    size = Column(
        SQLAlchemyEnum(CylinderSize, name="cylinder_size", values_callable=enum_values),
        nullable=False,
    )
    sku_filter = Column(String, nullable=True)  # None accepts every SKU of the gas/size
    price = Column(Float, nullable=False, default=0.0)
    position = Column(Integer, nullable=False, default=0)  # Declaration order within the station

    # Relationships
    station = relationship("RefillStation", back_populates="price_rules")
