"""
Data Transformers - Transform Layer

Pure functions turning a formatted record set into polars frames
and summary statistics.
"""

import polars as pl
from typing import Any, Dict, List, Sequence
from .record_formatter import DIMENSION, MEASURE, FormattedRecordSet
from .schemas import clean_frame_schema, record_frame_schema
import logging

logger = logging.getLogger(__name__)


def create_record_frame(record_set: FormattedRecordSet) -> pl.DataFrame:
    """
    Create a text frame with one column per header

    Args:
        record_set: Formatted record set

    Returns:
        pl.DataFrame: Cell display text; missing fields are null
    """
    names = record_set.header_names()
    data = {
        name: [
            record.fields[name].text if name in record.fields else None
            for record in record_set.rows
        ]
        for name in names
    }

    df = pl.DataFrame(data, schema=record_frame_schema(names))
    logger.info(f"Created record frame: {df.height} rows, {df.width} columns")
    return df


def create_clean_measure_frame(
    record_set: FormattedRecordSet, drop_empty: bool = True
) -> pl.DataFrame:
    """
    Create a typed frame: dimension text plus numeric measures

    Missing or non-numeric measure values become 0.0.

    Args:
        record_set: Formatted record set
        drop_empty: Drop rows with blank dimensions and all-zero measures

    Returns:
        pl.DataFrame: Clean frame matching clean_frame_schema
    """
    dimensions = record_set.header_names(DIMENSION)
    measures = record_set.header_names(MEASURE)

    data: Dict[str, List[Any]] = {}
    for name in dimensions:
        data[name] = [
            record.fields[name].text if name in record.fields else ""
            for record in record_set.rows
        ]
    for name in measures:
        data[name] = [
            _measure_value(record.fields.get(name)) for record in record_set.rows
        ]

    df = pl.DataFrame(data, schema=clean_frame_schema(dimensions, measures))

    if drop_empty and df.height > 0:
        has_dimension = pl.lit(False)
        for name in dimensions:
            has_dimension = has_dimension | (pl.col(name).str.strip_chars() != "")
        has_value = pl.lit(False)
        for name in measures:
            has_value = has_value | (pl.col(name) != 0.0)

        before = df.height
        df = df.filter(has_dimension | has_value)
        logger.info(f"Dropped {before - df.height} empty rows")

    logger.info(
        f"Created clean frame: {df.height} rows, "
        f"{len(dimensions)} dimensions, {len(measures)} measures"
    )
    return df


def _measure_value(field) -> float:
    if field is None or field.number is None:
        return 0.0
    return float(field.number)


def get_summary_stats(
    df: pl.DataFrame, measure_columns: Sequence[str]
) -> Dict[str, Dict[str, Any]]:
    """
    Get summary statistics for measure columns

    Args:
        df: Clean measure frame
        measure_columns: Measure column names to summarize

    Returns:
        Dict: measure -> total, non_zero, rows, mean_non_zero, max
    """
    logger.info(f"Generating summary stats for {len(measure_columns)} measures")

    stats = {}
    for name in measure_columns:
        column = df.get_column(name)
        non_zero = column.filter(column != 0.0)
        total = column.sum() if df.height else 0.0
        stats[name] = {
            "total": float(total),
            "non_zero": non_zero.len(),
            "rows": df.height,
            "mean_non_zero": float(non_zero.mean()) if non_zero.len() else 0.0,
            "max": float(column.max()) if df.height else 0.0,
        }

    logger.info(f"Generated summary stats: {list(stats.keys())}")
    return stats
