"""Service order loader for the work-order spreadsheets (Excel or CSV)."""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..models.domain import GeoPoint, Order

logger = logging.getLogger(__name__)

# Current spreadsheet headers first, legacy upper-case exports after.
COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "sequencial": ("Sequencial", "SEQUENCIAL"),
    "protocol": ("PROTOCOLO", "Protocolo"),
    "service_type": ("Serviço", "Descrição Serviço", "SERVICO"),
    "street": ("Endereço", "ENDERECO", "Endereco"),
    "number": ("Número", "NUMERO", "Numero"),
    "neighborhood": ("Bairro", "BAIRRO"),
    "municipality": ("Município", "MUNICIPIO", "Municipio"),
    "scheduled_date": ("Data Programada", "DATA"),
    "latitude": ("Latitude", "LATITUDE"),
    "longitude": ("Longitude", "LONGITUDE"),
    "enrollment_id": ("Matrícula", "MATRICULA"),
    "meter_number": ("Hidrômetro", "HD Vinculado", "HIDROMETRO"),
}

SUPPORTED_SUFFIXES = {".xlsx", ".csv"}


@dataclass(slots=True)
class ImportWarning:
    row: int
    message: str


@dataclass(slots=True)
class ImportResult:
    orders: list[Order] = field(default_factory=list)
    warnings: list[ImportWarning] = field(default_factory=list)


def _cell_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


def _pick(row: Mapping[str, Any], field_name: str) -> Optional[str]:
    for header in COLUMN_ALIASES[field_name]:
        text = _cell_text(row.get(header))
        if text is not None:
            return text
    return None


def _coerce_coordinate(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    try:
        return float(value.replace(",", "."))
    except ValueError as exc:
        raise ValueError(f"Unable to parse coordinate from value '{value}'") from exc


def parse_order_rows(rows: Iterable[Mapping[str, Any]]) -> ImportResult:
    """Map spreadsheet rows (header -> value) to orders.

    The order id is the ``Sequencial`` column, then ``PROTOCOLO``, then the
    1-based data row number. Repeated ids get ``-2``, ``-3``... suffixes. Rows
    whose coordinates are missing or unreadable are kept without a location.
    """

    result = ImportResult()
    seen_ids: dict[str, int] = {}

    for row_number, row in enumerate(rows, start=1):
        if not any(_cell_text(value) for value in row.values()):
            continue

        base_id = _pick(row, "sequencial") or _pick(row, "protocol") or f"row-{row_number}"
        occurrences = seen_ids.get(base_id, 0) + 1
        seen_ids[base_id] = occurrences
        order_id = base_id if occurrences == 1 else f"{base_id}-{occurrences}"
        if occurrences > 1:
            result.warnings.append(ImportWarning(row=row_number, message=f"Duplicate id '{base_id}' renamed to '{order_id}'"))

        location = None
        try:
            lat = _coerce_coordinate(_pick(row, "latitude"))
            lon = _coerce_coordinate(_pick(row, "longitude"))
        except ValueError as exc:
            result.warnings.append(ImportWarning(row=row_number, message=str(exc)))
            lat = lon = None
        if lat is not None and lon is not None:
            location = GeoPoint(latitude=lat, longitude=lon)
            if not location.is_valid:
                result.warnings.append(ImportWarning(row=row_number, message=f"Coordinates ({lat}, {lon}) treated as missing"))

        raw = {
            key: _pick(row, key)
            for key in ("sequencial", "protocol", "service_type", "scheduled_date", "enrollment_id", "meter_number")
        }
        result.orders.append(
            Order(
                id=order_id,
                street=_pick(row, "street"),
                number=_pick(row, "number"),
                neighborhood=_pick(row, "neighborhood"),
                municipality=_pick(row, "municipality"),
                location=location,
                raw={key: value for key, value in raw.items() if value is not None},
            )
        )

    logger.info(f"Parsed {len(result.orders)} orders with {len(result.warnings)} warnings")
    return result


def _rows_from_workbook(source: Path | io.BytesIO) -> list[dict[str, Any]]:
    try:
        wb = load_workbook(source, data_only=True, read_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError) as exc:
        raise ValueError(f"Unreadable order workbook: {exc}") from exc
    try:
        sheet = wb.active
        rows = sheet.iter_rows(min_row=1, values_only=True)
        header = next(rows, None)
        if header is None:
            raise ValueError("Order workbook is empty.")
        headers = [str(name).strip() if name is not None else "" for name in header]
        return [dict(zip(headers, values)) for values in rows]
    finally:
        wb.close()


def _rows_from_csv(text: str) -> list[dict[str, Any]]:
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise ValueError("Order file is missing a header row.")
    return [{(key or "").strip(): value for key, value in row.items()} for row in reader]


def read_orders(content: bytes, suffix: str) -> ImportResult:
    """Parse uploaded file content. ``suffix`` is the file extension, e.g. ``.xlsx``."""
    suffix = suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        raise ValueError(f"Unsupported order file type '{suffix}'. Use .xlsx or .csv.")
    if suffix == ".xlsx":
        rows = _rows_from_workbook(io.BytesIO(content))
    else:
        rows = _rows_from_csv(content.decode("utf-8-sig"))
    return parse_order_rows(rows)


def load_orders(path: Path) -> ImportResult:
    """Load orders from an ``.xlsx`` or ``.csv`` file on disk."""
    if not path.exists():
        raise FileNotFoundError(f"Order file not found: {path}")
    return read_orders(path.read_bytes(), path.suffix)
