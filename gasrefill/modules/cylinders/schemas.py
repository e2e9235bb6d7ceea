from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from gasrefill.core.config import settings
from gasrefill.modules.cylinders.enums import GasType, CylinderSize, CylinderStatus


def sku_prefix(serial_code: str) -> str:
    """Vendor-facing SKU: the serial code up to its first '-'"""
    return serial_code.split("-", 1)[0]


class CylinderBase(BaseModel):
    serial_code: str = Field(..., min_length=1, description="Unique serial code, e.g. OXY-1001")
    gas_type: GasType
    size: CylinderSize

class CylinderCreate(CylinderBase):
    status: CylinderStatus = CylinderStatus.AVAILABLE
    current_holder: str | None = None
    last_location: str = Field(default_factory=lambda: settings.DEFAULT_HOLDING_LOCATION)

class CylinderUpdate(BaseModel):
    serial_code: str | None = Field(None, min_length=1)
    gas_type: GasType | None = None
    size: CylinderSize | None = None
    status: CylinderStatus | None = None
    current_holder: str | None = None
    last_location: str | None = None

class Cylinder(CylinderBase):
    """Snapshot of a cylinder as stored"""
    id: int
    status: CylinderStatus
    current_holder: str | None = None
    last_location: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def sku_prefix(self) -> str:
        return sku_prefix(self.serial_code)

class CylinderPage(BaseModel):
    """One page of a filtered cylinder listing with the exact total"""
    items: list[Cylinder]
    total: int
    skip: int
    limit: int

class ImportRow(BaseModel):
    """A parsed import line; either candidate or error is set"""
    row_number: int
    serial_code: str
    gas_type: str
    size: str
    status: CylinderStatus
    last_location: str
    candidate: CylinderCreate | None = None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.error is None and self.candidate is not None

class ImportPreviewRequest(BaseModel):
    content: str = Field(..., description="CSV text: header line, then serialCode,gasType,size,status,lastLocation")
    report_short_rows: bool | None = None

class ImportPreview(BaseModel):
    rows: list[ImportRow]
    valid_count: int
    error_count: int

class ImportConfirmRequest(BaseModel):
    rows: list[ImportRow]
