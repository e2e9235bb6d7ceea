from typing import Any
from pydantic import BaseModel, ConfigDict, Field, field_validator
from gasrefill.modules.cylinders.enums import GasType, CylinderSize
from gasrefill.modules.cylinders.schemas import Cylinder
from gasrefill.modules.transactions.schemas import TransactionRecord, TransactionRecordCreate

GENERIC_SKU = "GENERIC"


class RefillStationBase(BaseModel):
    name: str = Field(..., min_length=1)
    address: str = ""
    contact_person: str = ""
    phone: str = ""

class RefillStationCreate(RefillStationBase):
    pass

class RefillStationUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    address: str | None = None
    contact_person: str | None = None
    phone: str | None = None

class RefillStation(RefillStationBase):
    """Public station data"""
    id: int

    model_config = ConfigDict(from_attributes=True)


class RefillPriceRuleBase(BaseModel):
    gas_type: GasType
    size: CylinderSize
    sku_filter: str | None = Field(None, description="Substring the cylinder SKU prefix must contain; empty accepts all")
    price: float = Field(0.0, ge=0)

    @field_validator("sku_filter")
    def normalise_sku_filter(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        return v or None

class RefillPriceRuleCreate(RefillPriceRuleBase):
    pass

class RefillPriceRule(RefillPriceRuleBase):
    """A station's price for one gas/size, optionally narrowed to an SKU"""
    id: int
    station_id: int
    position: int = 0

    model_config = ConfigDict(from_attributes=True)

    @property
    def is_generic(self) -> bool:
        return self.sku_filter is None


class CompatibleCylinder(BaseModel):
    cylinder: Cylinder
    rule: RefillPriceRule
    vendor_sku: str
    unit_price: float

class CompatibleCylinders(BaseModel):
    """Empty cylinders a station accepts, with the rule that prices each"""
    station: RefillStation
    items: list[CompatibleCylinder]
    empty_count: int


class SummaryLine(BaseModel):
    gas_type: GasType
    size: CylinderSize
    sku: str = GENERIC_SKU
    count: int = 0
    unit_price: float = 0.0
    priced: bool = True

    @property
    def subtotal(self) -> float:
        return self.count * self.unit_price

class DispatchSummary(BaseModel):
    lines: list[SummaryLine]

    @property
    def total(self) -> float:
        return sum(line.subtotal for line in self.lines)

    def report(self) -> dict:
        """Serialisable form including computed subtotals and total"""
        return {
            "lines": [
                {**line.model_dump(mode="json"), "subtotal": line.subtotal}
                for line in self.lines
            ],
            "total": self.total,
        }

class RestockLine(BaseModel):
    gas_type: GasType
    size: CylinderSize
    count: int = 0


class DispatchRequest(BaseModel):
    station_id: int | None = None
    cylinder_ids: list[int] = []

class RestockRequest(BaseModel):
    cylinder_ids: list[int] = []
    # Whatever the operator typed; anything unparseable is recorded as 0
    total_cost: Any = None

class DispatchPreview(BaseModel):
    station: RefillStation
    lines: list[dict]
    total: float

class RestockPreview(BaseModel):
    lines: list[RestockLine]
    unit_count: int


class BatchOutcome(BaseModel):
    """Engine output: the batch's new cylinder values and its single log entry"""
    cylinders: list[Cylinder]
    transaction: TransactionRecordCreate

class BatchResult(BaseModel):
    """Committed batch as acknowledged by the store"""
    cylinders: list[Cylinder]
    transaction: TransactionRecord
