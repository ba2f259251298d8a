"""
Spreadsheet reader for biometric (time-clock) report uploads.

Turns an ``.xlsx`` or ``.csv`` export into the 5-column string matrix the
report processor consumes::

    [document_id, name, date (YYYY-MM-DD), entry (HH:MM | "-"), exit (HH:MM | "-")]

Expected columns (case-insensitive, any of the aliases):
  DNI / documento / document_id / id
  Nombre / empleado / name / employee
  Fecha / date / día
  Entrada / hora entrada / entry / check in / in
  Salida / hora salida / exit / check out / out
"""

from __future__ import annotations

import logging
from typing import IO

import pandas as pd

from attendancehub.services import time_calc

logger = logging.getLogger(__name__)

CANONICAL_ORDER = ("document_id", "name", "date", "entry_time", "exit_time")

COLUMN_ALIASES: dict[str, list[str]] = {
    "document_id": [
        "dni", "documento", "nro documento", "n° documento", "document",
        "document_id", "documentid", "id",
    ],
    "name": ["nombre", "nombres", "empleado", "colaborador", "name", "employee"],
    "date": ["fecha", "date", "día", "dia", "day"],
    "entry_time": [
        "entrada", "hora entrada", "hora de entrada", "ingreso", "entry",
        "checkin", "check in", "in",
    ],
    "exit_time": [
        "salida", "hora salida", "hora de salida", "exit", "checkout",
        "check out", "out",
    ],
}

# Flat set of all known aliases, used for header row detection
_ALL_ALIASES: frozenset[str] = frozenset(
    alias for aliases in COLUMN_ALIASES.values() for alias in aliases
)

ALLOWED_EXTENSIONS = frozenset({".xlsx", ".csv"})


def file_extension(filename: str | None) -> str:
    if not filename:
        return ""
    idx = filename.rfind(".")
    return filename[idx:].lower() if idx != -1 else ""


def _clean_cell(value: object) -> str:
    """Normalize pandas NaN placeholders to empty string."""
    text = "" if value is None else str(value).strip()
    return "" if text.lower() in ("nan", "none", "nat") else text


def _read_frame(file: IO[bytes], extension: str) -> pd.DataFrame:
    if extension == ".csv":
        return pd.read_csv(file, dtype=str, header=None, keep_default_na=False)
    return pd.read_excel(file, engine="openpyxl", dtype=str, header=None)


def _find_header_row(frame: pd.DataFrame) -> int | None:
    """
    Scan the first 20 rows looking for the one that contains the most
    column-alias matches. Returns None when no row has at least two.
    """
    best_row, best_score = None, 0
    for row_idx, row in frame.head(20).iterrows():
        score = sum(1 for cell in row if _clean_cell(cell).lower() in _ALL_ALIASES)
        if score > best_score:
            best_score = score
            best_row = int(row_idx)
    return best_row if best_score >= 2 else None


def _column_positions(header: pd.Series) -> dict[str, int]:
    """Map canonical names to column positions using COLUMN_ALIASES."""
    lower_cells = {_clean_cell(cell).lower(): pos for pos, cell in enumerate(header)}
    positions: dict[str, int] = {}
    for canonical, aliases in COLUMN_ALIASES.items():
        for alias in aliases:
            if alias in lower_cells:
                positions[canonical] = lower_cells[alias]
                break
    return positions


def _normalize_document_id(value: str) -> str:
    # numeric DNI cells sometimes come back as "12345678.0"
    return value[:-2] if value.endswith(".0") and value[:-2].isdigit() else value


def _normalize_date(value: str) -> str:
    parsed = pd.to_datetime(value, dayfirst=not value[:4].isdigit())
    if pd.isna(parsed):
        raise ValueError("empty or unparseable date")
    return parsed.strftime("%Y-%m-%d")


def _normalize_time(value: str) -> str:
    if time_calc.is_blank_time(value):
        return time_calc.ABSENT_MARK
    # "09:07 AM", "6:15 pm" and Excel datetime cells like "1900-01-01 09:05:00"
    parsed = None
    if ":" in value:
        try:
            parsed = pd.to_datetime(value)
        except (ValueError, OverflowError):
            parsed = None
    if parsed is not None and not pd.isna(parsed):
        return parsed.strftime("%H:%M")
    return time_calc.normalize_time(value.split(" ")[-1])


def parse_biometric_file(
    file: IO[bytes],
    filename: str | None = None,
) -> tuple[list[list[str]], list[str]]:
    """
    Parse an uploaded report and return (rows, error_messages).

    Rows keep the device order in CANONICAL_ORDER; the header is not
    included. Rows with an unreadable date or clock time are reported in
    error_messages and left out.
    """
    extension = file_extension(filename) or ".xlsx"
    try:
        frame = _read_frame(file, extension)
    except Exception as exc:
        return [], [f"No se pudo abrir el archivo: {exc}"]

    header_row = _find_header_row(frame)
    if header_row is None:
        return [], ["No se encontró la fila de encabezados (DNI, Nombre, Fecha, Entrada, Salida)"]

    positions = _column_positions(frame.iloc[header_row])
    missing = [c for c in ("document_id", "date", "entry_time") if c not in positions]
    if missing:
        return [], [f"Faltan columnas obligatorias: {', '.join(missing)}"]

    rows: list[list[str]] = []
    errors: list[str] = []
    skipped_empty = 0

    # header_row is 0-based; spreadsheet rows are 1-based and data starts below the header
    for i, (_, raw) in enumerate(frame.iloc[header_row + 1:].iterrows(), start=header_row + 2):
        cells = {
            key: _clean_cell(raw.iloc[pos]) if pos < len(raw) else ""
            for key, pos in positions.items()
        }
        document_id = _normalize_document_id(cells.get("document_id", ""))
        raw_date = cells.get("date", "")

        if not document_id and not raw_date:
            skipped_empty += 1
            continue

        # Repeated header blocks (one per employee in some exports)
        if raw_date.lower() in _ALL_ALIASES:
            continue

        try:
            row_date = _normalize_date(raw_date) if raw_date else ""
        except (ValueError, OverflowError):
            msg = f"Fila {i}: formato de fecha inválido '{raw_date}'"
            logger.warning("Omitida: %s (DNI='%s')", msg, document_id)
            errors.append(msg)
            continue

        try:
            entry_time = _normalize_time(cells.get("entry_time", ""))
            exit_time = _normalize_time(cells.get("exit_time", ""))
        except ValueError as exc:
            msg = f"Fila {i}: hora inválida ({exc})"
            logger.warning("Omitida: %s (DNI='%s')", msg, document_id)
            errors.append(msg)
            continue

        rows.append([document_id, cells.get("name", ""), row_date, entry_time, exit_time])

    logger.info(
        "Lectura completada: filas=%d, errores=%d, vacías=%d",
        len(rows), len(errors), skipped_empty,
    )
    return rows, errors
