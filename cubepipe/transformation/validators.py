"""
Data Validators - Transform Layer

Pure functions checking that extraction results and record sets are
internally consistent before they are exported.
"""

import polars as pl
from typing import Any, Dict
from ..extract.hypercube_extractor import ExtractionResult, TerminationReason
from .record_formatter import DIMENSION, MEASURE, FormattedRecordSet
import logging

logger = logging.getLogger(__name__)


def validate_extraction_result(result: ExtractionResult) -> bool:
    """
    Validate extraction metadata against the assembled rows

    Args:
        result: Extraction result

    Returns:
        bool: True if valid, raises exception if invalid
    """
    metadata = result.metadata

    if metadata.extracted_rows != len(result.assembled_rows):
        raise ValueError(
            f"extracted_rows {metadata.extracted_rows} != "
            f"{len(result.assembled_rows)} assembled rows"
        )

    if metadata.is_complete and metadata.start_row + metadata.extracted_rows < metadata.total_rows:
        raise ValueError(
            f"Extraction marked complete with {metadata.extracted_rows} of "
            f"{metadata.total_rows} rows"
        )

    if metadata.termination_reason is TerminationReason.ABORTED and metadata.fault is None:
        raise ValueError("Aborted extraction carries no fault details")

    if not metadata.is_complete:
        logger.warning(
            f"⚠️ Partial extraction ({metadata.termination_reason.value}): "
            f"{metadata.extracted_rows} of {metadata.total_rows} rows"
        )

    logger.info(f"Extraction result validation passed: {metadata.extracted_rows} rows")
    return True


def validate_record_set(record_set: FormattedRecordSet) -> bool:
    """
    Validate summary counts against headers and rows

    Args:
        record_set: Formatted record set

    Returns:
        bool: True if valid, raises exception if invalid
    """
    summary = record_set.summary
    headers = record_set.headers

    if summary.total_columns != len(headers):
        raise ValueError(
            f"Summary reports {summary.total_columns} columns, found {len(headers)} headers"
        )
    if summary.total_rows != len(record_set.rows):
        raise ValueError(
            f"Summary reports {summary.total_rows} rows, found {len(record_set.rows)}"
        )

    dimension_count = sum(1 for h in headers if h.column_type == DIMENSION)
    measure_count = sum(1 for h in headers if h.column_type == MEASURE)
    if (summary.dimension_count, summary.measure_count) != (dimension_count, measure_count):
        raise ValueError("Summary dimension/measure counts do not match headers")

    if [h.index for h in headers] != list(range(len(headers))):
        raise ValueError("Header indexes are not positional")

    names = [h.name for h in headers]
    if len(set(names)) != len(names):
        raise ValueError(f"Duplicate header names: {names}")

    logger.info(f"Record set validation passed: {summary.total_rows} records")
    return True


def validate_data_quality(df: pl.DataFrame, data_type: str) -> Dict[str, Any]:
    """
    Validate data quality and return quality metrics

    Args:
        df: DataFrame to validate
        data_type: Label used in log messages

    Returns:
        Dict: Quality metrics and validation results
    """
    logger.info(f"Validating data quality for {data_type}")

    quality_metrics = {
        "total_records": df.height,
        "null_counts": {},
        "duplicate_rows": df.height - df.unique().height if df.width else 0,
        "data_types": df.schema,
    }

    for column in df.columns:
        null_count = df.select(pl.col(column).is_null().sum()).item()
        quality_metrics["null_counts"][column] = null_count

    for column, null_count in quality_metrics["null_counts"].items():
        if null_count > 0:
            logger.warning(f"Column '{column}' has {null_count} null values")

    if quality_metrics["duplicate_rows"] > 0:
        logger.warning(f"Duplicate rows found: {quality_metrics['duplicate_rows']}")

    logger.info(f"Data quality validation completed for {data_type}")
    return quality_metrics
