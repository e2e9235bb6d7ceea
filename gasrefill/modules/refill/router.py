from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from gasrefill.db.deps import get_db
from gasrefill.modules.cylinders import schemas as cylinder_schemas
from gasrefill.modules.cylinders.enums import CylinderStatus
from gasrefill.modules.cylinders.service import CylinderService
from gasrefill.modules.refill import schemas
from gasrefill.modules.refill.service import RefillService

router = APIRouter(prefix="/refill", tags=["refill"])

# Stations

@router.post("/stations", response_model=schemas.RefillStation, status_code=status.HTTP_201_CREATED)
async def create_station(
    station_in: schemas.RefillStationCreate,
    db: Session = Depends(get_db)
):
    """Register a refill vendor"""
    return await RefillService(db).create_station(station_in)

@router.get("/stations", response_model=List[schemas.RefillStation])
async def list_stations(db: Session = Depends(get_db)):
    return await RefillService(db).list_stations()

@router.get("/stations/{station_id}", response_model=schemas.RefillStation)
async def get_station(
    station_id: int,
    db: Session = Depends(get_db)
):
    station = await RefillService(db).get_station(station_id)
    if not station:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Refill station not found"
        )
    return station

@router.put("/stations/{station_id}", response_model=schemas.RefillStation)
async def update_station(
    station_id: int,
    station_in: schemas.RefillStationUpdate,
    db: Session = Depends(get_db)
):
    return await RefillService(db).update_station(station_id, station_in)

@router.delete("/stations/{station_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_station(
    station_id: int,
    db: Session = Depends(get_db)
):
    """Delete a station and every price rule it owns"""
    if not await RefillService(db).delete_station(station_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Refill station not found"
        )

# Price rules

@router.get("/stations/{station_id}/prices", response_model=List[schemas.RefillPriceRule])
async def list_price_rules(
    station_id: int,
    db: Session = Depends(get_db)
):
    service = RefillService(db)
    if not await service.get_station(station_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Refill station not found"
        )
    return await service.list_price_rules(station_id)

@router.put("/stations/{station_id}/prices", response_model=List[schemas.RefillPriceRule])
async def replace_price_rules(
    station_id: int,
    rules_in: List[schemas.RefillPriceRuleCreate],
    db: Session = Depends(get_db)
):
    """
    Replace the station's price list.
    - Order of the list is the rule declaration order
    - Rules without an SKU filter accept any cylinder of their gas/size
    """
    return await RefillService(db).replace_price_rules(station_id, rules_in)

# Dispatch

@router.get("/stations/{station_id}/compatible", response_model=schemas.CompatibleCylinders)
async def compatible_cylinders(
    station_id: int,
    db: Session = Depends(get_db)
):
    """Empty cylinders this station accepts, with the unit price of each"""
    return await RefillService(db).compatible_cylinders(station_id)

@router.post("/dispatch/preview", response_model=schemas.DispatchPreview)
async def preview_dispatch(
    request: schemas.DispatchRequest,
    db: Session = Depends(get_db)
):
    if request.station_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Choose a refill station first"
        )
    return await RefillService(db).preview_dispatch(request.station_id, request.cylinder_ids)

@router.post("/dispatch", response_model=schemas.BatchResult)
async def dispatch(
    request: schemas.DispatchRequest,
    db: Session = Depends(get_db)
):
    """Send the selected empty cylinders to the station as one batch"""
    result = await RefillService(db).dispatch(request.station_id, request.cylinder_ids)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nothing to dispatch: choose a station and at least one cylinder"
        )
    return result

# Restock

@router.get("/refilling", response_model=List[cylinder_schemas.Cylinder])
async def list_refilling(db: Session = Depends(get_db)):
    """Cylinders currently out at a refill station"""
    return await CylinderService(db).list_by_status(CylinderStatus.REFILLING)

@router.post("/restock/preview", response_model=schemas.RestockPreview)
async def preview_restock(
    request: schemas.RestockRequest,
    db: Session = Depends(get_db)
):
    return await RefillService(db).preview_restock(request.cylinder_ids)

@router.post("/restock", response_model=schemas.BatchResult)
async def restock(
    request: schemas.RestockRequest,
    db: Session = Depends(get_db)
):
    """Receive refilled cylinders back into stock with the vendor's batch total"""
    result = await RefillService(db).restock(request.cylinder_ids, request.total_cost)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Nothing to restock: select at least one cylinder"
        )
    return result
