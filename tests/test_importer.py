import logging

from gasrefill.core.config import settings
from gasrefill.modules.cylinders import importer
from gasrefill.modules.cylinders.enums import CylinderSize, CylinderStatus, GasType

CSV = """serialCode,gasType,size,status,lastLocation
OXY-1001,Oxygen,6m3,,
X-1,Helium,6m3,,
ARG-3001,Argon,10m3,Available,Gudang B
NIT-4001,Nitrogen,2m3,Rented,PT Maju Jaya
"""


def test_parse_drops_header_and_keeps_blank_line_positions():
    rows = importer.parse_import_text("a,b,c\n\n OXY-1 , Oxygen , 6m3 \n\n")
    assert rows == [[], ["OXY-1", "Oxygen", "6m3"]]


def test_row_numbers_follow_file_lines():
    text = "serialCode,gasType,size\nOXY-1,Oxygen,6m3\n\n\nX-1,Helium,6m3\n"
    rows = importer.validate(importer.parse_import_text(text), start=2)

    assert [(r.row_number, r.serial_code) for r in rows] == [(2, "OXY-1"), (5, "X-1")]


def test_valid_row_gets_defaults():
    (row,) = importer.validate(["OXY-1001,Oxygen,6m3,,"])

    assert row.is_valid
    assert row.row_number == 1
    assert row.candidate.gas_type == GasType.OXYGEN
    assert row.candidate.size == CylinderSize.LARGE
    assert row.candidate.status == CylinderStatus.AVAILABLE
    assert row.candidate.last_location == settings.DEFAULT_HOLDING_LOCATION


def test_explicit_status_and_location_are_kept():
    (row,) = importer.validate([["NIT-4001", "Nitrogen", "2m3", "Rented", "PT Maju Jaya"]])
    assert row.candidate.status == CylinderStatus.RENTED
    assert row.candidate.last_location == "PT Maju Jaya"


def test_unknown_gas_type_is_reported():
    (row,) = importer.validate(["X-1,Helium,6m3,,"])
    assert not row.is_valid
    assert row.error == importer.INVALID_GAS_TYPE
    assert row.candidate is None


def test_gas_type_is_checked_before_size():
    (row,) = importer.validate(["X-1,Helium,9m3"])
    assert row.error == importer.INVALID_GAS_TYPE


def test_unknown_size_is_reported():
    (row,) = importer.validate(["ARG-3001,Argon,10m3"])
    assert row.error == importer.INVALID_SIZE


def test_values_are_case_sensitive():
    (row,) = importer.validate(["OXY-1,oxygen,6m3"])
    assert row.error == importer.INVALID_GAS_TYPE


def test_short_rows_are_skipped_by_default(caplog):
    with caplog.at_level(logging.WARNING, logger="gasrefill.modules.cylinders.importer"):
        rows = importer.validate(["OXY-1,Oxygen", "OXY-2,Oxygen,6m3"])

    assert [r.serial_code for r in rows] == ["OXY-2"]
    assert rows[0].row_number == 2
    assert "Skipping import row 1" in caplog.text


def test_short_rows_can_be_reported():
    rows = importer.validate(["OXY-1,Oxygen"], report_short_rows=True)
    assert rows[0].error == importer.MISSING_FIELDS
    assert rows[0].serial_code == "OXY-1"


def test_blank_serial_code_is_reported():
    (row,) = importer.validate([",Oxygen,6m3"])
    assert row.error == importer.MISSING_FIELDS


def test_confirm_keeps_only_valid_rows_in_order():
    rows = importer.validate(importer.parse_import_text(CSV))

    assert [r.error for r in rows] == [
        None, importer.INVALID_GAS_TYPE, importer.INVALID_SIZE, None
    ]
    candidates = importer.confirm_import(rows)
    assert [c.serial_code for c in candidates] == ["OXY-1001", "NIT-4001"]
