from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from gasrefill.db.deps import get_db
from gasrefill.modules.transactions import schemas
from gasrefill.modules.transactions.enums import TransactionKind
from gasrefill.modules.transactions.service import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])

@router.get("/", response_model=List[schemas.TransactionRecord])
async def list_transactions(
    kind: Optional[TransactionKind] = None,
    station_id: Optional[int] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """List transaction records, newest first"""
    service = TransactionService(db)
    return await service.list(kind=kind, station_id=station_id, skip=skip, limit=limit)

@router.get("/{record_id}", response_model=schemas.TransactionRecord)
async def get_transaction(
    record_id: int,
    db: Session = Depends(get_db)
):
    service = TransactionService(db)
    record = await service.get(record_id)
    if not record:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Transaction not found"
        )
    return record
