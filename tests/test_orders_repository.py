import csv
import io
import zipfile
from pathlib import Path

import pytest
from openpyxl import Workbook

from fieldroute.data.orders_repository import load_orders, parse_order_rows, read_orders

HEADERS = ["Sequencial", "Serviço", "Endereço", "Número", "Bairro", "Município", "Latitude", "Longitude"]


def _csv_bytes(rows: list[list[object]], headers: list[str] = HEADERS) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue().encode("utf-8-sig")


def test_csv_rows_become_orders():
    content = _csv_bytes(
        [
            ["101", "Troca de hidrômetro", "R. das Flores", "123", "Centro", "Itajaí", "-26,9078", "-48,6619"],
            ["102", "Religação", "Av. Brasil", "S/N", "Centro", "Balneário Camboriú", "", ""],
        ]
    )

    result = read_orders(content, ".csv")

    first, second = result.orders
    assert first.id == "101"
    assert first.street == "R. das Flores"
    assert first.municipality == "Itajaí"
    assert first.location.latitude == pytest.approx(-26.9078)
    assert first.location.longitude == pytest.approx(-48.6619)
    assert first.raw == {"sequencial": "101", "service_type": "Troca de hidrômetro"}
    assert second.location is None
    assert second.number == "S/N"
    assert result.warnings == []


def test_legacy_upper_case_headers_are_recognised():
    rows = [{"PROTOCOLO": "P-9", "ENDERECO": "Rua X", "NUMERO": 5, "MUNICIPIO": "Navegantes", "LATITUDE": -26.89, "LONGITUDE": -48.65}]

    order = parse_order_rows(rows).orders[0]

    assert order.id == "P-9"
    assert order.street == "Rua X"
    assert order.number == "5"
    assert order.municipality == "Navegantes"
    assert order.has_valid_location


def test_rows_without_identifier_use_row_number():
    result = parse_order_rows([{"Endereço": "Rua A"}, {"Endereço": "Rua B"}])
    assert [order.id for order in result.orders] == ["row-1", "row-2"]


def test_duplicate_ids_are_renamed_with_warning():
    rows = [{"Sequencial": "7", "Endereço": "Rua A"}, {"Sequencial": "7", "Endereço": "Rua B"}, {"Sequencial": "7"}]

    result = parse_order_rows(rows)

    assert [order.id for order in result.orders] == ["7", "7-2", "7-3"]
    assert [warning.row for warning in result.warnings] == [2, 3]


def test_blank_rows_are_skipped():
    content = _csv_bytes([["1", "", "Rua A", "", "", "Itajaí", "", ""], [""] * 8, ["2", "", "Rua B", "", "", "Itajaí", "", ""]])

    result = read_orders(content, ".csv")

    assert [order.id for order in result.orders] == ["1", "2"]


def test_unreadable_coordinates_leave_order_unlocated():
    result = parse_order_rows([{"Sequencial": "1", "Latitude": "abc", "Longitude": "-48.6"}])

    assert result.orders[0].location is None
    assert len(result.warnings) == 1
    assert "abc" in result.warnings[0].message


def test_zero_coordinates_are_flagged():
    result = parse_order_rows([{"Sequencial": "1", "Latitude": 0, "Longitude": 0}])

    order = result.orders[0]
    assert not order.has_valid_location
    assert result.warnings[0].message == "Coordinates (0.0, 0.0) treated as missing"


def test_non_finite_coordinates_are_flagged_with_their_values():
    result = parse_order_rows([{"Sequencial": "1", "Latitude": "nan", "Longitude": "-48.6"}])

    assert not result.orders[0].has_valid_location
    assert result.warnings[0].message == "Coordinates (nan, -48.6) treated as missing"


def test_workbook_is_loaded_from_disk(tmp_path: Path):
    wb = Workbook()
    sheet = wb.active
    sheet.append(HEADERS)
    sheet.append([201.0, "Corte", "Rua Uruguai", 300, "Centro", "Itajaí", -26.91, -48.66])
    sheet.append([None] * len(HEADERS))
    sheet.append([202, "Corte", "Rod. Osvaldo Reis", None, "Praia Brava", "Itajaí", None, None])
    path = tmp_path / "orders.xlsx"
    wb.save(path)

    result = load_orders(path)

    assert [order.id for order in result.orders] == ["201", "202"]
    assert result.orders[0].number == "300"
    assert result.orders[0].location.latitude == pytest.approx(-26.91)
    assert result.orders[1].location is None


def test_corrupt_workbook_is_reported_as_value_error():
    with pytest.raises(ValueError, match="Unreadable order workbook"):
        read_orders(b"not a zip at all", ".xlsx")


def test_zip_that_is_not_a_workbook_is_reported_as_value_error():
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("notes.txt", "not a spreadsheet")

    with pytest.raises(ValueError, match="Unreadable order workbook"):
        read_orders(buffer.getvalue(), ".xlsx")


def test_unsupported_suffix_is_rejected():
    with pytest.raises(ValueError):
        read_orders(b"whatever", ".txt")


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_orders(tmp_path / "missing.csv")
