"""
Refill batch workflows.

    EmptyRefill --dispatch--> Refilling --restock--> Available

Both transitions work on cylinder snapshots and return new values; nothing
here reads or writes the database. A batch is validated in full before any
new value is built, so callers either get every cylinder of the batch
transitioned together with one transaction record, or nothing.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Iterable, Optional, Sequence

from gasrefill.core.config import settings
from gasrefill.modules.cylinders.enums import CylinderStatus
from gasrefill.modules.cylinders.schemas import Cylinder
from gasrefill.modules.refill.costing import summarize_dispatch, summarize_restock
from gasrefill.modules.refill.matching import PriceRuleBook
from gasrefill.modules.refill.schemas import BatchOutcome, RefillPriceRule, RefillStation
from gasrefill.modules.transactions.enums import TransactionKind
from gasrefill.modules.transactions.schemas import TransactionRecordCreate

logger = logging.getLogger(__name__)


class RefillWorkflowError(ValueError):
    """A batch broke the caller contract (unknown id or wrong status)"""

    def __init__(self, message: str, cylinder_ids: Sequence[int] = ()):
        super().__init__(message)
        self.cylinder_ids = list(cylinder_ids)


def coerce_cost(value: Any) -> float:
    """Operator-entered batch cost; blank, invalid or negative input counts as 0"""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        cost = float(value.strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(cost) or math.isinf(cost) or cost < 0:
        return 0.0
    return cost


def _unique(ids: Iterable[int]) -> list[int]:
    return list(dict.fromkeys(ids))


def _take_batch(
    cylinders: Iterable[Cylinder],
    cylinder_ids: Sequence[int],
    required: CylinderStatus,
) -> list[Cylinder]:
    by_id = {c.id: c for c in cylinders}
    missing = [cid for cid in cylinder_ids if cid not in by_id]
    if missing:
        raise RefillWorkflowError(f"Unknown cylinder ids: {missing}", missing)
    wrong = [cid for cid in cylinder_ids if by_id[cid].status != required]
    if wrong:
        raise RefillWorkflowError(
            f"Cylinders {wrong} are not in status '{required.value}'", wrong
        )
    return [by_id[cid] for cid in cylinder_ids]


def dispatch(
    station: Optional[RefillStation],
    price_rules: Iterable[RefillPriceRule],
    cylinders: Iterable[Cylinder],
    cylinder_ids: Sequence[int],
    now: Optional[datetime] = None,
) -> Optional[BatchOutcome]:
    """
    Send a batch of empty cylinders to ``station``.

    Returns None when there is no station or no selection. Raises
    RefillWorkflowError if any selected cylinder is unknown or not empty.
    Missing prices do not block the dispatch; they are recorded at 0.
    """
    cylinder_ids = _unique(cylinder_ids)
    if station is None or not cylinder_ids:
        logger.info("Dispatch skipped: station or selection missing")
        return None

    batch = _take_batch(cylinders, cylinder_ids, CylinderStatus.EMPTY_REFILL)

    book = PriceRuleBook.for_station(station, price_rules)
    resolved = {c.id: book.resolve(c) for c in batch}
    summary = summarize_dispatch(cylinder_ids, batch, resolved)

    updated = [
        c.model_copy(update={
            "status": CylinderStatus.REFILLING,
            "current_holder": None,
            "last_location": station.name,
        })
        for c in batch
    ]
    record = TransactionRecordCreate(
        kind=TransactionKind.REFILL_OUT,
        cylinder_ids=cylinder_ids,
        station_id=station.id,
        cost=summary.total,
        details={"station_name": station.name, **summary.report()},
        occurred_at=now or datetime.now(timezone.utc),
    )
    return BatchOutcome(cylinders=updated, transaction=record)


def restock(
    cylinders: Iterable[Cylinder],
    cylinder_ids: Sequence[int],
    total_cost: Any = None,
    now: Optional[datetime] = None,
) -> Optional[BatchOutcome]:
    """
    Receive a batch of refilled cylinders back into the holding location.

    ``total_cost`` is the vendor's bill for the whole batch and is stored as
    such; it is not split across cylinders.
    """
    cylinder_ids = _unique(cylinder_ids)
    if not cylinder_ids:
        logger.info("Restock skipped: empty selection")
        return None

    batch = _take_batch(cylinders, cylinder_ids, CylinderStatus.REFILLING)
    cost = coerce_cost(total_cost)
    lines = summarize_restock(cylinder_ids, batch)

    updated = [
        c.model_copy(update={
            "status": CylinderStatus.AVAILABLE,
            "current_holder": None,
            "last_location": settings.DEFAULT_HOLDING_LOCATION,
        })
        for c in batch
    ]
    record = TransactionRecordCreate(
        kind=TransactionKind.REFILL_IN,
        cylinder_ids=cylinder_ids,
        cost=cost,
        details={
            "unit_count": len(cylinder_ids),
            "lines": [line.model_dump(mode="json") for line in lines],
        },
        occurred_at=now or datetime.now(timezone.utc),
    )
    return BatchOutcome(cylinders=updated, transaction=record)
