"""
Local Storage - Load Layer

Pure functions for local file storage operations.
Handles JSON, CSV and Parquet exports of formatted record sets.
"""

import polars as pl
import json
import os
from typing import Dict
from ..transformation.record_formatter import FormattedRecordSet
from ..transformation.transformers import create_clean_measure_frame
import logging

logger = logging.getLogger(__name__)


def _ensure_parent(filepath: str) -> None:
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)


def export_to_csv(record_set: FormattedRecordSet) -> str:
    """
    Render a record set as CSV text

    Header line is the header names joined by commas; each data field is the
    cell text wrapped in double quotes. Embedded quotes and commas are not
    escaped.

    Args:
        record_set: Formatted record set

    Returns:
        str: CSV content
    """
    names = record_set.header_names()
    lines = [",".join(names)]
    for record in record_set.rows:
        cells = []
        for name in names:
            field = record.fields.get(name)
            cells.append(f'"{field.text}"' if field is not None else '""')
        lines.append(",".join(cells))
    return "\n".join(lines)


def save_json(record_set: FormattedRecordSet, filepath: str) -> str:
    """
    Save record set to JSON file

    Args:
        record_set: Record set to save
        filepath: Path to save file

    Returns:
        str: Path to saved file
    """
    logger.info(f"Saving record set to JSON: {filepath}")
    _ensure_parent(filepath)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(record_set.to_dict(), f, indent=2, ensure_ascii=False, default=str)

    logger.info(f"Saved {record_set.summary.total_rows} records to {filepath}")
    return filepath


def save_csv(record_set: FormattedRecordSet, filepath: str) -> str:
    """
    Save record set to CSV file

    Args:
        record_set: Record set to save
        filepath: Path to save file

    Returns:
        str: Path to saved file
    """
    logger.info(f"Saving record set to CSV: {filepath}")
    _ensure_parent(filepath)

    with open(filepath, "w", encoding="utf-8") as f:
        f.write(export_to_csv(record_set))

    logger.info(f"Saved {record_set.summary.total_rows} records to {filepath}")
    return filepath


def save_parquet(df: pl.DataFrame, filepath: str) -> str:
    """
    Save DataFrame to Parquet file

    Args:
        df: DataFrame to save
        filepath: Path to save file

    Returns:
        str: Path to saved file
    """
    logger.info(f"Saving DataFrame to Parquet: {filepath}")
    _ensure_parent(filepath)

    df.write_parquet(filepath)

    logger.info(f"Saved {df.height} records to {filepath}")
    return filepath


def load_parquet(filepath: str) -> pl.DataFrame:
    """
    Load DataFrame from Parquet file

    Args:
        filepath: Path to Parquet file

    Returns:
        pl.DataFrame: Loaded DataFrame
    """
    logger.info(f"Loading DataFrame from Parquet: {filepath}")

    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Parquet file not found: {filepath}")

    df = pl.read_parquet(filepath)

    logger.info(f"Loaded {df.height} records from {filepath}")
    return df


def save_extraction_outputs(
    record_set: FormattedRecordSet, output_dir: str = "output", stem: str = "pivot_data"
) -> Dict[str, str]:
    """
    Save a record set as JSON, CSV and a clean Parquet table

    Args:
        record_set: Formatted record set
        output_dir: Output directory
        stem: File name without extension

    Returns:
        Dict: Paths to saved files
    """
    base = os.path.join(output_dir, stem)
    clean_df = create_clean_measure_frame(record_set, drop_empty=False)

    return {
        "json": save_json(record_set, f"{base}.json"),
        "csv": save_csv(record_set, f"{base}.csv"),
        "parquet": save_parquet(clean_df, f"{base}.parquet"),
    }
