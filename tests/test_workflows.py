from datetime import datetime, timezone

import pytest
from conftest import make_cylinder, make_rule

from gasrefill.core.config import settings
from gasrefill.modules.cylinders.enums import CylinderSize, CylinderStatus, GasType
from gasrefill.modules.refill import workflows
from gasrefill.modules.refill.workflows import RefillWorkflowError, coerce_cost
from gasrefill.modules.transactions.enums import TransactionKind

NOW = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)


# =============================================================================
# Cost coercion
# =============================================================================

@pytest.mark.parametrize("raw, expected", [
    ("250000", 250000.0),
    (" 1500.5 ", 1500.5),
    (90000, 90000.0),
    (None, 0.0),
    ("", 0.0),
    ("abc", 0.0),
    ("-10", 0.0),
    ("nan", 0.0),
    ("inf", 0.0),
    (True, 0.0),
])
def test_coerce_cost(raw, expected):
    assert coerce_cost(raw) == expected


# =============================================================================
# Dispatch
# =============================================================================

class TestDispatch:
    def test_end_to_end_batch(self, station):
        rules = [make_rule(1, 50000, sku_filter="OXY"), make_rule(2, 40000)]
        cylinders = [make_cylinder(1, "OXY-1"), make_cylinder(2, "ABC-2")]

        outcome = workflows.dispatch(station, rules, cylinders, [1, 2], now=NOW)

        assert [c.status for c in outcome.cylinders] == [CylinderStatus.REFILLING] * 2
        assert {c.last_location for c in outcome.cylinders} == {station.name}
        assert all(c.current_holder is None for c in outcome.cylinders)

        record = outcome.transaction
        assert record.kind == TransactionKind.REFILL_OUT
        assert record.cylinder_ids == [1, 2]
        assert record.station_id == station.id
        assert record.cost == 90000
        assert record.occurred_at == NOW
        assert record.details["station_name"] == station.name
        assert len(record.details["lines"]) == 2
        assert record.details["total"] == 90000

    def test_inputs_are_not_mutated(self, station):
        cylinder = make_cylinder(1, "OXY-1")
        workflows.dispatch(station, [make_rule(1, 40000)], [cylinder], [1])
        assert cylinder.status == CylinderStatus.EMPTY_REFILL
        assert cylinder.last_location == "Gudang Utama"

    def test_no_station_is_a_no_op(self):
        assert workflows.dispatch(None, [], [make_cylinder(1, "OXY-1")], [1]) is None

    def test_empty_selection_is_a_no_op(self, station):
        assert workflows.dispatch(station, [make_rule(1, 40000)], [make_cylinder(1, "OXY-1")], []) is None

    def test_any_non_empty_cylinder_rejects_the_whole_batch(self, station):
        cylinders = [
            make_cylinder(1, "OXY-1"),
            make_cylinder(2, "OXY-2", status=CylinderStatus.AVAILABLE),
        ]
        with pytest.raises(RefillWorkflowError) as exc_info:
            workflows.dispatch(station, [make_rule(1, 40000)], cylinders, [1, 2])
        assert exc_info.value.cylinder_ids == [2]

    def test_unknown_cylinder_is_rejected(self, station):
        with pytest.raises(RefillWorkflowError) as exc_info:
            workflows.dispatch(station, [], [make_cylinder(1, "OXY-1")], [1, 7])
        assert exc_info.value.cylinder_ids == [7]

    def test_unpriced_cylinder_is_dispatched_at_zero(self, station):
        cylinders = [
            make_cylinder(1, "OXY-1"),
            make_cylinder(2, "CO2-2", gas_type=GasType.CO2, size=CylinderSize.SMALL),
        ]
        outcome = workflows.dispatch(station, [make_rule(1, 40000)], cylinders, [1, 2])

        assert len(outcome.cylinders) == 2
        assert outcome.transaction.cost == 40000
        unpriced = [l for l in outcome.transaction.details["lines"] if not l["priced"]]
        assert unpriced[0]["count"] == 1
        assert unpriced[0]["subtotal"] == 0

    def test_duplicate_ids_are_counted_once(self, station):
        outcome = workflows.dispatch(
            station, [make_rule(1, 40000)], [make_cylinder(1, "OXY-1")], [1, 1]
        )
        assert outcome.transaction.cylinder_ids == [1]
        assert outcome.transaction.cost == 40000


# =============================================================================
# Restock
# =============================================================================

class TestRestock:
    def _refilling(self, cylinder_id, serial_code, **kwargs):
        return make_cylinder(
            cylinder_id, serial_code, status=CylinderStatus.REFILLING,
            last_location="GasDepo Pusat", **kwargs
        )

    def test_batch_returns_to_holding_location(self):
        cylinders = [self._refilling(1, "OXY-1"), self._refilling(2, "ABC-2")]

        outcome = workflows.restock(cylinders, [1, 2], total_cost="90000", now=NOW)

        assert [c.status for c in outcome.cylinders] == [CylinderStatus.AVAILABLE] * 2
        assert {c.last_location for c in outcome.cylinders} == {settings.DEFAULT_HOLDING_LOCATION}
        record = outcome.transaction
        assert record.kind == TransactionKind.REFILL_IN
        assert record.cost == 90000
        assert record.station_id is None
        assert record.details["unit_count"] == 2
        assert record.details["lines"][0]["count"] == 2

    def test_unparseable_cost_is_recorded_as_zero(self):
        outcome = workflows.restock([self._refilling(1, "OXY-1")], [1], total_cost="abc")
        assert outcome.transaction.cost == 0

    def test_empty_selection_is_a_no_op(self):
        assert workflows.restock([self._refilling(1, "OXY-1")], [], total_cost=1000) is None

    def test_cylinder_not_refilling_rejects_batch(self):
        cylinders = [self._refilling(1, "OXY-1"), make_cylinder(2, "OXY-2")]
        with pytest.raises(RefillWorkflowError):
            workflows.restock(cylinders, [1, 2], total_cost=1000)

    def test_dispatch_then_restock_round_trip(self, station):
        rules = [make_rule(1, 50000, sku_filter="OXY"), make_rule(2, 40000)]
        cylinders = [make_cylinder(1, "OXY-1"), make_cylinder(2, "ABC-2")]

        sent = workflows.dispatch(station, rules, cylinders, [1, 2])
        back = workflows.restock(sent.cylinders, [1, 2], total_cost=88000)

        assert [c.status for c in back.cylinders] == [CylinderStatus.AVAILABLE] * 2
        assert sent.transaction.cost == 90000
        assert back.transaction.cost == 88000
