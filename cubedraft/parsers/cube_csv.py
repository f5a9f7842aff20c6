"""
CubeCobra CSV export parser.

The export has one row per card with (among others) the columns
name, Set, Collector Number and CMC.
"""

import csv
import io
import math

from cubedraft.models.card import CardRecord


def _parse_mana_value(raw: str | None) -> int | None:
    """Parse a CMC cell. Returns None when the cell is empty or not a number."""
    if raw is None:
        return None
    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if math.isnan(value) or value < 0:
        return None
    return int(value)


def parse_cube_csv(text: str) -> list[CardRecord]:
    """
    Parse a CubeCobra CSV export into card records.

    Rows without a name are skipped. A missing or non-numeric CMC yields a
    record with mana_value None, to be filled in by the loader.

    Args:
        text: Raw CSV text including the header row

    Returns:
        Card records in file order
    """
    records: list[CardRecord] = []
    for row in csv.DictReader(io.StringIO(text)):
        name = (row.get("name") or "").strip()
        if not name:
            continue
        records.append(
            CardRecord(
                name=name,
                set_code=(row.get("Set") or "").strip().lower(),
                collector_number=(row.get("Collector Number") or "").strip(),
                mana_value=_parse_mana_value(row.get("CMC")),
            )
        )
    return records
