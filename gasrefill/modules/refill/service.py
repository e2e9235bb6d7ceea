import logging
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from gasrefill.modules.cylinders.enums import CylinderStatus
from gasrefill.modules.cylinders.models import Cylinder
from gasrefill.modules.cylinders.schemas import Cylinder as CylinderSchema, sku_prefix
from gasrefill.modules.cylinders.service import CylinderService
from gasrefill.modules.refill import workflows
from gasrefill.modules.refill.costing import summarize_dispatch, summarize_restock
from gasrefill.modules.refill.matching import PriceRuleBook, match
from gasrefill.modules.refill.models import RefillStation, RefillPriceRule
from gasrefill.modules.refill.schemas import (
    BatchOutcome,
    BatchResult,
    CompatibleCylinder,
    CompatibleCylinders,
    DispatchPreview,
    RefillPriceRuleCreate,
    RefillStationCreate,
    RefillStationUpdate,
    RestockPreview,
    RefillStation as StationSchema,
    RefillPriceRule as RuleSchema,
)
from gasrefill.modules.transactions.schemas import TransactionRecord as RecordSchema
from gasrefill.modules.transactions.service import TransactionService

logger = logging.getLogger(__name__)


class RefillService:
    def __init__(self, db: Session):
        self.db = db
        self.cylinders = CylinderService(db)
        self.transactions = TransactionService(db)

    # -------- Stations --------

    async def create_station(self, station_in: RefillStationCreate) -> RefillStation:
        """Create a refill station"""
        db_station = RefillStation(**station_in.model_dump())
        self.db.add(db_station)
        self.db.commit()
        self.db.refresh(db_station)
        return db_station

    async def get_station(self, station_id: int) -> Optional[RefillStation]:
        stmt = select(RefillStation).where(RefillStation.id == station_id)
        return self.db.execute(stmt).scalar_one_or_none()

    async def _require_station(self, station_id: int) -> RefillStation:
        station = await self.get_station(station_id)
        if not station:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Refill station not found"
            )
        return station

    async def list_stations(self) -> List[RefillStation]:
        stmt = select(RefillStation).order_by(RefillStation.name.asc(), RefillStation.id.asc())
        return self.db.execute(stmt).scalars().all()

    async def update_station(self, station_id: int, station_in: RefillStationUpdate) -> RefillStation:
        """Update station details"""
        station = await self._require_station(station_id)
        for field, value in station_in.model_dump(exclude_unset=True).items():
            setattr(station, field, value)
        self.db.commit()
        self.db.refresh(station)
        return station

    async def delete_station(self, station_id: int) -> bool:
        """Delete a station together with all of its price rules"""
        station = await self.get_station(station_id)
        if not station:
            return False
        self.db.delete(station)
        self.db.commit()
        logger.info("Deleted refill station %s and its price rules", station_id)
        return True

    # -------- Price rules --------

    async def list_price_rules(self, station_id: int) -> List[RefillPriceRule]:
        """A station's rules in declaration order"""
        stmt = (
            select(RefillPriceRule)
            .where(RefillPriceRule.station_id == station_id)
            .order_by(RefillPriceRule.position.asc(), RefillPriceRule.id.asc())
        )
        return self.db.execute(stmt).scalars().all()

    async def replace_price_rules(
        self,
        station_id: int,
        rules_in: List[RefillPriceRuleCreate]
    ) -> List[RefillPriceRule]:
        """Replace a station's rule set; list order becomes declaration order"""
        station = await self._require_station(station_id)
        station.price_rules.clear()
        self.db.flush()
        for position, rule_in in enumerate(rules_in):
            station.price_rules.append(
                RefillPriceRule(**rule_in.model_dump(), position=position)
            )
        self.db.commit()
        return await self.list_price_rules(station_id)

    # -------- Matching & costing --------

    async def _snapshots(self, station_id: int):
        station = await self._require_station(station_id)
        rules = [RuleSchema.model_validate(r) for r in await self.list_price_rules(station_id)]
        return StationSchema.model_validate(station), rules

    async def compatible_cylinders(self, station_id: int) -> CompatibleCylinders:
        """Empty cylinders the station accepts, each with its resolved rule"""
        station, rules = await self._snapshots(station_id)
        empties = [
            CylinderSchema.model_validate(c)
            for c in await self.cylinders.list_by_status(CylinderStatus.EMPTY_REFILL)
        ]
        result = match(station, rules, empties)
        items = []
        for cylinder in result.compatible:
            rule = result.rule_for(cylinder.id)
            items.append(
                CompatibleCylinder(
                    cylinder=cylinder,
                    rule=rule,
                    vendor_sku=rule.sku_filter or sku_prefix(cylinder.serial_code),
                    unit_price=rule.price,
                )
            )
        return CompatibleCylinders(station=station, items=items, empty_count=len(empties))

    async def _load(self, cylinder_ids: List[int], lock: bool = False) -> List[CylinderSchema]:
        stmt = select(Cylinder).where(Cylinder.id.in_(cylinder_ids)).order_by(Cylinder.id)
        if lock:
            # Serialises overlapping batches on backends with row locks
            stmt = stmt.with_for_update()
        return [CylinderSchema.model_validate(c) for c in self.db.execute(stmt).scalars().all()]

    async def preview_dispatch(self, station_id: int, cylinder_ids: List[int]) -> DispatchPreview:
        station, rules = await self._snapshots(station_id)
        selected = await self._load(cylinder_ids)
        book = PriceRuleBook.for_station(station, rules)
        resolved = {c.id: book.resolve(c) for c in selected}
        summary = summarize_dispatch(cylinder_ids, selected, resolved)
        report = summary.report()
        return DispatchPreview(station=station, lines=report["lines"], total=report["total"])

    async def preview_restock(self, cylinder_ids: List[int]) -> RestockPreview:
        selected = await self._load(cylinder_ids)
        lines = summarize_restock(cylinder_ids, selected)
        return RestockPreview(lines=lines, unit_count=sum(line.count for line in lines))

    # -------- Workflows --------

    async def _commit_outcome(self, outcome: BatchOutcome) -> BatchResult:
        """Write every cylinder change and the record in one commit, then re-read"""
        ids = [c.id for c in outcome.cylinders]
        rows = {
            c.id: c for c in self.db.execute(
                select(Cylinder).where(Cylinder.id.in_(ids))
            ).scalars().all()
        }
        for snapshot in outcome.cylinders:
            row = rows[snapshot.id]
            row.status = snapshot.status
            row.current_holder = snapshot.current_holder
            row.last_location = snapshot.last_location
        record = self.transactions.append(outcome.transaction)
        self.db.commit()

        for row in rows.values():
            self.db.refresh(row)
        self.db.refresh(record)
        await self.cylinders.invalidate(ids)

        logger.info(
            "Committed %s for %d cylinders as transaction %s (cost %.2f)",
            record.kind.value, len(ids), record.id, record.cost,
        )
        return BatchResult(
            cylinders=[CylinderSchema.model_validate(rows[i]) for i in ids],
            transaction=RecordSchema.model_validate(record),
        )

    async def dispatch(self, station_id: Optional[int], cylinder_ids: List[int]) -> Optional[BatchResult]:
        """Send empty cylinders to a station; None when there is nothing to do"""
        if station_id is None or not cylinder_ids:
            return None
        station, rules = await self._snapshots(station_id)
        batch = await self._load(cylinder_ids, lock=True)
        try:
            outcome = workflows.dispatch(station, rules, batch, cylinder_ids)
        except workflows.RefillWorkflowError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
        if outcome is None:
            return None
        return await self._commit_outcome(outcome)

    async def restock(self, cylinder_ids: List[int], total_cost=None) -> Optional[BatchResult]:
        """Receive refilled cylinders back; None when there is nothing to do"""
        if not cylinder_ids:
            return None
        batch = await self._load(cylinder_ids, lock=True)
        try:
            outcome = workflows.restock(batch, cylinder_ids, total_cost)
        except workflows.RefillWorkflowError as exc:
            self.db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
        if outcome is None:
            return None
        return await self._commit_outcome(outcome)
