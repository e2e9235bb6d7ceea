from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from gasrefill.modules.transactions.models import TransactionRecord
from gasrefill.modules.transactions.schemas import TransactionRecordCreate
from gasrefill.modules.transactions.enums import TransactionKind

class TransactionService:
    def __init__(self, db: Session):
        self.db = db

    def append(self, record_in: TransactionRecordCreate) -> TransactionRecord:
        """Stage a record on the session; the caller owns the commit"""
        db_record = TransactionRecord(**record_in.model_dump())
        self.db.add(db_record)
        return db_record

    async def get(self, record_id: int) -> Optional[TransactionRecord]:
        stmt = select(TransactionRecord).where(TransactionRecord.id == record_id)
        return self.db.execute(stmt).scalar_one_or_none()

    async def list(
        self,
        kind: Optional[TransactionKind] = None,
        station_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[TransactionRecord]:
        """List records, newest first"""
        stmt = select(TransactionRecord)

        if kind:
            stmt = stmt.where(TransactionRecord.kind == kind)
        if station_id:
            stmt = stmt.where(TransactionRecord.station_id == station_id)

        stmt = (
            stmt.order_by(TransactionRecord.occurred_at.desc(), TransactionRecord.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return self.db.execute(stmt).scalars().all()
