from typing import Iterable, Mapping, Optional

from gasrefill.modules.cylinders.schemas import Cylinder
from gasrefill.modules.refill.schemas import (
    GENERIC_SKU,
    DispatchSummary,
    RefillPriceRule,
    RestockLine,
    SummaryLine,
)


def _index(cylinders: Iterable[Cylinder]) -> dict[int, Cylinder]:
    return {c.id: c for c in cylinders}


def summarize_dispatch(
    selected_ids: Iterable[int],
    cylinders: Iterable[Cylinder],
    resolved_rules: Mapping[int, Optional[RefillPriceRule]],
) -> DispatchSummary:
    """
    Price a dispatch selection grouped by gas type, size and matched SKU.

    Two SKUs of the same gas/size never share a line. Selected cylinders
    without a rule are still counted, on an unpriced GENERIC line at 0.
    Repeated ids count once and unknown ids are ignored.
    """
    by_id = _index(cylinders)
    lines: dict[tuple, SummaryLine] = {}

    for cylinder_id in dict.fromkeys(selected_ids):
        cylinder = by_id.get(cylinder_id)
        if cylinder is None:
            continue
        rule = resolved_rules.get(cylinder_id)
        sku = rule.sku_filter if rule and rule.sku_filter else GENERIC_SKU
        key = (cylinder.gas_type, cylinder.size, sku, rule is not None)
        if key not in lines:
            lines[key] = SummaryLine(
                gas_type=cylinder.gas_type,
                size=cylinder.size,
                sku=sku,
                unit_price=rule.price if rule else 0.0,
                priced=rule is not None,
            )
        lines[key].count += 1

    return DispatchSummary(lines=list(lines.values()))


def summarize_restock(
    selected_ids: Iterable[int],
    cylinders: Iterable[Cylinder],
) -> list[RestockLine]:
    """Count a restock selection per gas type and size; receipts carry no price.

    Repeated ids count once.
    """
    by_id = _index(cylinders)
    lines: dict[tuple, RestockLine] = {}

    for cylinder_id in dict.fromkeys(selected_ids):
        cylinder = by_id.get(cylinder_id)
        if cylinder is None:
            continue
        key = (cylinder.gas_type, cylinder.size)
        if key not in lines:
            lines[key] = RestockLine(gas_type=cylinder.gas_type, size=cylinder.size)
        lines[key].count += 1

    return list(lines.values())
