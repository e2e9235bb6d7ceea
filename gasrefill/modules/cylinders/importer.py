"""
Bulk cylinder import.

The import file is a comma separated table. The first line is a header and
is ignored; every following line carries, in this order:

    serialCode, gasType, size, status, lastLocation

Only the first three fields are required. Rows are validated one by one and
a bad row never aborts the batch: it is reported with an error reason and
left out of the commit set, while the valid rows are still imported.
"""
import logging
from typing import Iterable, Sequence

from gasrefill.core.config import settings
from gasrefill.modules.cylinders.enums import GasType, CylinderSize, CylinderStatus
from gasrefill.modules.cylinders.schemas import CylinderCreate, ImportRow

logger = logging.getLogger(__name__)

INVALID_GAS_TYPE = "Invalid Gas Type"
INVALID_SIZE = "Invalid Size"
MISSING_FIELDS = "Missing Required Fields"

REQUIRED_FIELDS = 3

_GAS_TYPES = {gas.value: gas for gas in GasType}
_SIZES = {size.value: size for size in CylinderSize}
_STATUSES = {status.value: status for status in CylinderStatus}


def parse_import_text(text: str) -> list[list[str]]:
    """
    Split raw CSV text into trimmed field lists, dropping the header.

    Blank lines after the header stay in place as empty lists, so the row
    at index i sits on line i + 2 counted from the header line.
    """
    lines = [line.strip() for line in text.strip().splitlines()]
    return [
        [field.strip() for field in line.split(",")] if line else []
        for line in lines[1:]
    ]


def _field(fields: Sequence[str], index: int) -> str:
    return fields[index] if len(fields) > index else ""


def validate_row(row_number: int, fields: Sequence[str]) -> ImportRow:
    serial_code, gas_str, size_str = fields[0], fields[1], fields[2]
    status_str = _field(fields, 3)
    location = _field(fields, 4) or settings.DEFAULT_HOLDING_LOCATION
    status = _STATUSES.get(status_str, CylinderStatus.AVAILABLE)

    error = None
    if not serial_code:
        error = MISSING_FIELDS
    elif gas_str not in _GAS_TYPES:
        error = INVALID_GAS_TYPE
    elif size_str not in _SIZES:
        error = INVALID_SIZE

    candidate = None
    if error is None:
        candidate = CylinderCreate(
            serial_code=serial_code,
            gas_type=_GAS_TYPES[gas_str],
            size=_SIZES[size_str],
            status=status,
            last_location=location,
        )

    return ImportRow(
        row_number=row_number,
        serial_code=serial_code,
        gas_type=gas_str,
        size=size_str,
        status=status,
        last_location=location,
        candidate=candidate,
        error=error,
    )


def validate(
    raw_rows: Iterable[Sequence[str] | str],
    report_short_rows: bool = False,
    start: int = 1,
) -> list[ImportRow]:
    """
    Validate data rows (header already removed).

    Each row may be a pre-split field list or a raw comma separated line.
    Rows with fewer than three fields are skipped, or reported as
    ``Missing Required Fields`` when ``report_short_rows`` is set. Blank
    rows are skipped silently but still count: ``row_number`` is
    ``start`` plus the row's position, so passing ``start=2`` for a file
    with its header on line 1 numbers rows by file line.
    """
    rows: list[ImportRow] = []
    for row_number, raw in enumerate(raw_rows, start=start):
        fields = [f.strip() for f in raw.split(",")] if isinstance(raw, str) else list(raw)
        if not any(fields):
            continue
        if len(fields) < REQUIRED_FIELDS:
            if not report_short_rows:
                logger.warning("Skipping import row %d: only %d field(s)", row_number, len(fields))
                continue
            padded = fields + [""] * (REQUIRED_FIELDS - len(fields))
            rows.append(
                ImportRow(
                    row_number=row_number,
                    serial_code=padded[0],
                    gas_type=padded[1],
                    size=padded[2],
                    status=CylinderStatus.AVAILABLE,
                    last_location=settings.DEFAULT_HOLDING_LOCATION,
                    error=MISSING_FIELDS,
                )
            )
            continue

        row = validate_row(row_number, fields)
        if row.error:
            logger.info("Import row %d rejected: %s", row_number, row.error)
        rows.append(row)
    return rows


def confirm_import(rows: Iterable[ImportRow]) -> list[CylinderCreate]:
    """Commit set of an import: the candidates of error-free rows, in order."""
    return [row.candidate for row in rows if row.is_valid]
