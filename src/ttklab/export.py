"""
Export Functionality for TTKLab

Serializes a (filtered/sorted) view of weapon records:
- CSV in the dataset's own column layout, so an export can be loaded again
- JSON with derived metrics included
- pandas DataFrame for notebook and tabular use
"""

import csv
import json
import logging
from datetime import date, datetime
from io import StringIO
from pathlib import Path
from typing import Any

import pandas as pd

from ttklab.core.constants import (
    COL_ADS,
    COL_CONTROL,
    COL_DPS,
    COL_PRECISION,
    COL_RPM,
    COL_WEAPON,
    COL_WEAPON_TYPE,
    CSV_COLUMNS,
    RANGES,
)
from ttklab.core.models import WeaponRecord

logger = logging.getLogger(__name__)

DEFAULT_FILENAME_TEMPLATE = "battlefield6_ttk_{date}.csv"


# ============================================================================
# Data Conversion Utilities
# ============================================================================


def format_cell(value: float | str | None) -> str:
    """Render one cell: empty for unknown, integers without a trailing ".0"."""
    if value is None:
        return ""
    if isinstance(value, float):
        return str(int(value)) if value.is_integer() else repr(value)
    return str(value)


def record_to_row(record: WeaponRecord) -> dict[str, str]:
    """Map a record back to the dataset's columns."""
    row = {
        COL_WEAPON_TYPE: record.weapon_type,
        COL_WEAPON: record.name,
    }
    for range_label in RANGES:
        row[range_label] = format_cell(record.damage_at(range_label))
    row[COL_RPM] = format_cell(record.rpm)
    row[COL_DPS] = format_cell(record.dps)
    row[COL_ADS] = format_cell(record.ads_time)
    row[COL_PRECISION] = format_cell(record.precision)
    row[COL_CONTROL] = format_cell(record.control)
    return row


def record_to_dict(record: WeaponRecord) -> dict[str, Any]:
    """Flat JSON-friendly dict including derived metrics."""
    data: dict[str, Any] = {
        "weapon_type": record.weapon_type,
        "name": record.name,
        "rpm": record.rpm,
        "dps": record.dps,
        "ads_time": record.ads_time,
        "precision": record.precision,
        "control": record.control,
        "is_complete": record.is_complete,
        "average_damage": record.average_damage,
    }
    for range_label in RANGES:
        data[f"damage_{range_label}"] = record.damage_at(range_label)
        data[f"ttk_{range_label}"] = record.ttk_at(range_label)
        data[f"stk_{range_label}"] = record.shots_to_kill_at(range_label)
    return data


def records_to_dataframe(records: list[WeaponRecord] | tuple[WeaponRecord, ...]) -> pd.DataFrame:
    """One row per record, columns as in record_to_dict (unknown values are NaN/None)."""
    return pd.DataFrame([record_to_dict(r) for r in records])


def default_export_filename(
    export_date: date | None = None,
    template: str = DEFAULT_FILENAME_TEMPLATE,
) -> str:
    """Filename for an export, e.g. battlefield6_ttk_2025-10-12.csv."""
    export_date = export_date or date.today()
    return template.format(date=export_date.isoformat())


# ============================================================================
# CSV Export
# ============================================================================


def export_to_csv(
    records: list[WeaponRecord] | tuple[WeaponRecord, ...],
    output_path: Path | None = None,
    delimiter: str = ",",
    include_header: bool = True,
) -> str:
    """
    Export records in the input column layout.

    Fields containing the delimiter, a quote or a line break are quoted,
    with embedded quotes doubled.

    Args:
        records: Records to export, in the order they should appear
        output_path: Optional path to write the file
        delimiter: CSV delimiter character
        include_header: Whether to include column headers

    Returns:
        CSV string; with no records only the header row is written
    """
    output = StringIO()
    writer = csv.DictWriter(
        output,
        fieldnames=list(CSV_COLUMNS),
        delimiter=delimiter,
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )

    if include_header:
        writer.writeheader()
    for record in records:
        writer.writerow(record_to_row(record))

    csv_str = output.getvalue()

    if output_path:
        output_path.write_text(csv_str, encoding="utf-8")
        logger.info(f"Exported CSV to: {output_path}")

    return csv_str


# ============================================================================
# JSON Export
# ============================================================================


def export_to_json(
    records: list[WeaponRecord] | tuple[WeaponRecord, ...],
    output_path: Path | None = None,
    indent: int = 2,
    include_metadata: bool = True,
) -> str:
    """
    Export records, with derived metrics, to JSON.

    Args:
        records: Records to export
        output_path: Optional path to write the file
        indent: JSON indentation level
        include_metadata: Whether to include export metadata

    Returns:
        JSON string
    """
    export_data: dict[str, Any] = {"weapons": [record_to_dict(r) for r in records]}

    if include_metadata:
        export_data = {
            "_metadata": {
                "exported_at": datetime.now().isoformat(),
                "format": "ttklab_json",
                "version": "1.0",
                "count": len(records),
            },
            **export_data,
        }

    json_str = json.dumps(export_data, indent=indent)

    if output_path:
        output_path.write_text(json_str, encoding="utf-8")
        logger.info(f"Exported JSON to: {output_path}")

    return json_str
