from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from gasrefill.modules.transactions.enums import TransactionKind

class TransactionRecordCreate(BaseModel):
    kind: TransactionKind
    cylinder_ids: list[int] = Field(..., min_length=1)
    station_id: int | None = None
    cost: float = 0.0
    details: dict | None = None
    occurred_at: datetime

class TransactionRecord(TransactionRecordCreate):
    """Public transaction data"""
    id: int

    model_config = ConfigDict(from_attributes=True)
