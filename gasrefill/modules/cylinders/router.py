from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from gasrefill.core.config import settings
from gasrefill.db.deps import get_db
from gasrefill.modules.cylinders import schemas, importer
from gasrefill.modules.cylinders.service import CylinderService
from gasrefill.modules.cylinders.enums import CylinderStatus

router = APIRouter(prefix="/cylinders", tags=["cylinders"])

@router.post("/", response_model=schemas.Cylinder, status_code=status.HTTP_201_CREATED)
async def create_cylinder(
    cylinder_in: schemas.CylinderCreate,
    db: Session = Depends(get_db)
):
    """Register a new cylinder"""
    cylinder_service = CylinderService(db)
    return await cylinder_service.create(cylinder_in)

@router.get("/", response_model=schemas.CylinderPage)
async def list_cylinders(
    status: CylinderStatus | None = None,
    search: str | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """
    List cylinders.
    - Optional status filter
    - search matches serial code or gas type, case-insensitive
    - Ordered by serial code; total is the size of the filtered set
    """
    cylinder_service = CylinderService(db)
    return await cylinder_service.list(
        status=status,
        search=search,
        skip=skip,
        limit=limit
    )

@router.post("/import/preview", response_model=schemas.ImportPreview)
async def preview_import(request: schemas.ImportPreviewRequest):
    """Validate an import file row by row without writing anything"""
    report_short = (
        settings.IMPORT_REPORT_SHORT_ROWS
        if request.report_short_rows is None
        else request.report_short_rows
    )
    rows = importer.validate(
        importer.parse_import_text(request.content),
        report_short_rows=report_short,
        start=2,  # header is line 1
    )
    valid = sum(1 for row in rows if row.is_valid)
    return schemas.ImportPreview(rows=rows, valid_count=valid, error_count=len(rows) - valid)

@router.post("/import/confirm", response_model=List[schemas.Cylinder], status_code=status.HTTP_201_CREATED)
async def confirm_import(
    request: schemas.ImportConfirmRequest,
    db: Session = Depends(get_db)
):
    """Create the cylinders of every error-free row; rows with errors are dropped"""
    candidates = importer.confirm_import(request.rows)
    if not candidates:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No valid rows to import"
        )
    cylinder_service = CylinderService(db)
    return await cylinder_service.bulk_create(candidates)

@router.get("/{cylinder_id}", response_model=schemas.Cylinder)
async def get_cylinder(
    cylinder_id: int,
    db: Session = Depends(get_db)
):
    cylinder_service = CylinderService(db)
    cylinder = await cylinder_service.get_snapshot(cylinder_id)

    if not cylinder:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cylinder not found"
        )
    return cylinder

@router.put("/{cylinder_id}", response_model=schemas.Cylinder)
async def update_cylinder(
    cylinder_id: int,
    cylinder_in: schemas.CylinderUpdate,
    db: Session = Depends(get_db)
):
    cylinder_service = CylinderService(db)
    return await cylinder_service.update(cylinder_id, cylinder_in)

@router.delete("/{cylinder_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_cylinder(
    cylinder_id: int,
    db: Session = Depends(get_db)
):
    cylinder_service = CylinderService(db)
    if not await cylinder_service.delete(cylinder_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Cylinder not found"
        )
