"""
Material Import Normalizer

Turns an uploaded materials list into JobMaterial creation records.

- `.csv` files: header row required; each field is resolved from an ordered
  list of candidate column names, first non-empty value wins
- anything else: one material per non-blank line, quantity 1

Numeric cells that fail to parse (or are negative or non-finite) never abort
an import: quantity falls back to 0 and unit cost is left unset (unknown
cost is not zero cost).
"""

import csv
import io
import logging
import math
import os
from typing import Dict, List, Optional

from database.models import Trade
from services.exceptions import EmptyImport, MalformedNumeric

logger = logging.getLogger(__name__)

TABULAR_EXTENSIONS = {'.csv'}

DEFAULT_NAME = 'Unknown'
DEFAULT_UNIT = 'each'
DEFAULT_TRADE = Trade.GENERAL.value

# Candidate column headers per field, in priority order
COLUMN_ALIASES = {
    'custom_name': ['name', 'material', 'item', 'Name', 'Material', 'Item'],
    'description': ['description', 'Description'],
    'unit': ['unit', 'Unit'],
    'quantity_needed': ['quantity', 'qty', 'Quantity', 'Qty'],
    'unit_cost': ['cost', 'price', 'Cost', 'Price', 'unit_cost'],
    'trade': ['trade', 'Trade'],
    'vendor': ['vendor', 'Vendor'],
}


def is_tabular(filename: str) -> bool:
    _, ext = os.path.splitext(filename or '')
    return ext.lower() in TABULAR_EXTENSIONS


def decode_content(content) -> str:
    """Uploads arrive as bytes; tolerate a UTF-8 BOM and stray latin-1 bytes."""
    if isinstance(content, str):
        return content
    try:
        return content.decode('utf-8-sig')
    except UnicodeDecodeError:
        return content.decode('latin-1')


def resolve_field(row: Dict[str, str], field: str) -> Optional[str]:
    """First non-empty value among the field's aliases, or None."""
    for alias in COLUMN_ALIASES[field]:
        value = row.get(alias)
        if value is not None:
            value = value.strip()
            if value:
                return value
    return None


def parse_number(value: Optional[str], field: str = 'value', strict: bool = False) -> Optional[float]:
    """
    Parse a numeric cell, accepting `$` and thousands separators.

    Returns None for blank input. Quantities and costs are never negative,
    so negative, NaN and infinite values count as unparseable: with
    strict=True they raise MalformedNumeric, otherwise they return None.
    """
    if value is None:
        return None
    cleaned = str(value).strip().replace('$', '').replace(',', '')
    if not cleaned:
        return None
    try:
        number = float(cleaned)
    except ValueError:
        number = None
    if number is None or not math.isfinite(number) or number < 0:
        if strict:
            raise MalformedNumeric(field, value)
        return None
    return number


def _numeric_field(row: Dict[str, str], field: str, line_number: int) -> Optional[float]:
    raw = resolve_field(row, field)
    try:
        return parse_number(raw, field, strict=True)
    except MalformedNumeric as e:
        logger.debug(f"Row {line_number}: {e.message}; using default")
        return None


def normalize_trade(value: Optional[str]) -> str:
    if not value:
        return DEFAULT_TRADE
    trade = value.upper()
    if trade not in Trade.__members__:
        logger.debug(f"Unrecognised trade {value!r}, filing under {DEFAULT_TRADE}")
        return DEFAULT_TRADE
    return trade


def normalize_row(row: Dict[str, str], line_number: int = 0) -> Dict:
    """Map one CSV row onto a material creation record."""
    quantity = _numeric_field(row, 'quantity_needed', line_number)
    # A zero or unparseable cost means "not known" rather than free
    unit_cost = _numeric_field(row, 'unit_cost', line_number) or None

    return {
        'custom_name': resolve_field(row, 'custom_name') or DEFAULT_NAME,
        'description': resolve_field(row, 'description'),
        'unit': resolve_field(row, 'unit') or DEFAULT_UNIT,
        'quantity_needed': quantity or 0,
        'unit_cost': unit_cost,
        'trade': normalize_trade(resolve_field(row, 'trade')),
        'vendor': resolve_field(row, 'vendor'),
    }


def parse_tabular(text: str) -> List[Dict]:
    reader = csv.DictReader(io.StringIO(text), skipinitialspace=True)
    if reader.fieldnames:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]

    records = []
    for row in reader:
        if not any((value or '').strip() for value in row.values() if isinstance(value, str)):
            continue
        records.append(normalize_row(row, reader.line_num))
    return records


def parse_plain_text(text: str) -> List[Dict]:
    return [
        {'custom_name': line.strip(), 'quantity_needed': 1}
        for line in text.splitlines()
        if line.strip()
    ]


def normalize_import(content, filename: str) -> List[Dict]:
    """
    Normalise an uploaded materials file.

    Args:
        content: raw file bytes (or already-decoded text)
        filename: original upload name; the extension selects the parser

    Returns:
        List of material creation records

    Raises:
        EmptyImport: if nothing usable was found
    """
    text = decode_content(content)

    if is_tabular(filename):
        records = parse_tabular(text)
    else:
        records = parse_plain_text(text)

    if not records:
        logger.warning(f"Import of {filename!r} produced no materials")
        raise EmptyImport()

    logger.info(f"Normalised {len(records)} materials from {filename!r}")
    return records
