import logging
from typing import List, Optional
from sqlalchemy import select, func, or_, cast, String
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from gasrefill.core.cache import cache
from gasrefill.modules.cylinders.models import Cylinder
from gasrefill.modules.cylinders.schemas import (
    CylinderCreate,
    CylinderUpdate,
    CylinderPage,
    Cylinder as CylinderSchema,
)
from gasrefill.modules.cylinders.enums import CylinderStatus

logger = logging.getLogger(__name__)


class CylinderService:
    CACHE_PREFIX = "cylinder"

    def __init__(self, db: Session):
        self.db = db

    async def _cache_cylinder(self, cylinder: Cylinder) -> None:
        """Cache cylinder data"""
        if cylinder:
            await cache.set(
                [self.CACHE_PREFIX, cylinder.id],
                CylinderSchema.model_validate(cylinder).model_dump(mode="json")
            )

    async def invalidate(self, cylinder_ids: List[int]) -> None:
        """Invalidate cached cylinders after a batch change"""
        await cache.delete_many(self.CACHE_PREFIX, cylinder_ids)

    async def _ensure_serials_free(self, serial_codes: List[str]) -> None:
        duplicates = sorted({code for code in serial_codes if serial_codes.count(code) > 1})
        if duplicates:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Duplicate serial codes in batch: {', '.join(duplicates)}"
            )
        stmt = select(Cylinder.serial_code).where(Cylinder.serial_code.in_(serial_codes))
        existing = self.db.execute(stmt).scalars().all()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Serial code already registered: {', '.join(sorted(existing))}"
            )

    async def create(self, cylinder_in: CylinderCreate) -> Cylinder:
        """Create a new cylinder"""
        if cylinder_in.status == CylinderStatus.REFILLING:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Refilling status can only be set by dispatch"
            )
        await self._ensure_serials_free([cylinder_in.serial_code])

        db_cylinder = Cylinder(**cylinder_in.model_dump())
        self.db.add(db_cylinder)
        self.db.commit()
        self.db.refresh(db_cylinder)

        await self._cache_cylinder(db_cylinder)
        return db_cylinder

    async def bulk_create(self, cylinders_in: List[CylinderCreate]) -> List[Cylinder]:
        """Insert many cylinders in one commit; nothing is written if a serial clashes"""
        if not cylinders_in:
            return []
        await self._ensure_serials_free([c.serial_code for c in cylinders_in])

        db_cylinders = [Cylinder(**c.model_dump()) for c in cylinders_in]
        self.db.add_all(db_cylinders)
        self.db.commit()
        for db_cylinder in db_cylinders:
            self.db.refresh(db_cylinder)
            await self._cache_cylinder(db_cylinder)

        logger.info("Imported %d cylinders", len(db_cylinders))
        return db_cylinders

    async def get(self, cylinder_id: int) -> Optional[Cylinder]:
        """Get the cylinder row by ID"""
        stmt = select(Cylinder).where(Cylinder.id == cylinder_id)
        return self.db.execute(stmt).scalar_one_or_none()

    async def get_snapshot(self, cylinder_id: int) -> Optional[CylinderSchema]:
        """Read-only cylinder view, served from cache when present"""
        # Try cache first
        cached = await cache.get([self.CACHE_PREFIX, cylinder_id])
        if cached:
            return CylinderSchema.model_validate(cached)

        cylinder = await self.get(cylinder_id)
        if not cylinder:
            return None
        await self._cache_cylinder(cylinder)
        return CylinderSchema.model_validate(cylinder)

    async def get_by_serial_code(self, serial_code: str) -> Optional[Cylinder]:
        """Get cylinder by serial code"""
        stmt = select(Cylinder).where(Cylinder.serial_code == serial_code)
        return self.db.execute(stmt).scalar_one_or_none()

    async def list(
        self,
        status: Optional[CylinderStatus] = None,
        search: Optional[str] = None,
        skip: int = 0,
        limit: int = 100
    ) -> CylinderPage:
        """List cylinders with filters, ordered by serial code, with exact total"""
        stmt = select(Cylinder)

        if status:
            stmt = stmt.where(Cylinder.status == status)
        if search:
            pattern = f"%{search}%"
            stmt = stmt.where(
                or_(
                    Cylinder.serial_code.ilike(pattern),
                    cast(Cylinder.gas_type, String).ilike(pattern),
                )
            )

        total = self.db.execute(
            select(func.count()).select_from(stmt.subquery())
        ).scalar_one()
        page = self.db.execute(
            stmt.order_by(Cylinder.serial_code.asc()).offset(skip).limit(limit)
        ).scalars().all()

        return CylinderPage(
            items=[CylinderSchema.model_validate(c) for c in page],
            total=total,
            skip=skip,
            limit=limit,
        )

    async def list_by_status(self, status: CylinderStatus) -> List[Cylinder]:
        """All cylinders in a status, ordered by serial code"""
        stmt = (
            select(Cylinder)
            .where(Cylinder.status == status)
            .order_by(Cylinder.serial_code.asc())
        )
        return self.db.execute(stmt).scalars().all()

    async def update(self, cylinder_id: int, cylinder_in: CylinderUpdate) -> Cylinder:
        """Update cylinder"""
        cylinder = await self.get(cylinder_id)
        if not cylinder:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Cylinder not found"
            )

        update_data = cylinder_in.model_dump(exclude_unset=True)
        new_serial = update_data.get("serial_code")
        if new_serial and new_serial != cylinder.serial_code:
            await self._ensure_serials_free([new_serial])

        # Refill statuses are owned by the dispatch/restock workflows
        new_status = update_data.get("status")
        if new_status is not None and (new_status == CylinderStatus.REFILLING) != (
            cylinder.status == CylinderStatus.REFILLING
        ):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Refilling status can only change through dispatch or restock"
            )

        for field, value in update_data.items():
            setattr(cylinder, field, value)

        self.db.commit()
        self.db.refresh(cylinder)
        await self._cache_cylinder(cylinder)
        return cylinder

    async def delete(self, cylinder_id: int) -> bool:
        """Delete a cylinder"""
        cylinder = await self.get(cylinder_id)
        if cylinder:
            await cache.delete([self.CACHE_PREFIX, cylinder_id])
            self.db.delete(cylinder)
            self.db.commit()
            return True
        return False
