"""
Test Transform Layer - polars frames, summary stats and validators
"""

import os
import sys
from dataclasses import replace

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import polars as pl
import pytest

from cubepipe.extract.engine_api import EngineFault
from cubepipe.extract.hypercube_extractor import (
    ExtractionOptions,
    ExtractionResult,
    extract_hypercube,
)
from cubepipe.extract.models import Cell, CellState
from cubepipe.transformation.record_formatter import MEASURE, format_records
from cubepipe.transformation.transformers import (
    create_clean_measure_frame,
    create_record_frame,
    get_summary_stats,
)
from cubepipe.transformation.validators import (
    validate_data_quality,
    validate_extraction_result,
)
from fake_engine import ScriptedCube


def extract(cube, **options):
    options.setdefault("page_delay", 0)
    return extract_hypercube(cube, cube.get_descriptor(), ExtractionOptions(**options))


def record_set_with_blank_row():
    result = extract(ScriptedCube(3))
    blank = (Cell("  "), Cell("-", None, CellState.OPTIONAL))
    return format_records(
        ExtractionResult(
            assembled_rows=result.assembled_rows + (blank,),
            metadata=replace(result.metadata, extracted_rows=4),
        )
    )


def test_record_frame_holds_text():
    record_set = format_records(extract(ScriptedCube(3, measures=("Qty", "Value"))))

    df = create_record_frame(record_set)

    assert df.columns == ["Material", "Qty", "Value"]
    assert df.schema["Qty"] == pl.String
    assert df["Material"].to_list() == ["row-0", "row-1", "row-2"]
    assert df["Value"].to_list() == ["0", "1", "2"]


def test_clean_frame_types_and_blank_rows():
    record_set = record_set_with_blank_row()

    full = create_clean_measure_frame(record_set, drop_empty=False)
    assert full.height == 4
    assert full.schema["Quantity"] == pl.Float64
    # Non-numeric measure becomes 0.0
    assert full["Quantity"].to_list() == [0.0, 1.0, 2.0, 0.0]

    clean = create_clean_measure_frame(record_set)
    # row-0 has a zero measure but a dimension, so it stays
    assert clean["Material"].to_list() == ["row-0", "row-1", "row-2"]


def test_clean_frame_of_empty_record_set():
    df = create_clean_measure_frame(format_records(extract(ScriptedCube(0))))

    assert df.height == 0
    assert df.columns == ["Material", "Quantity"]


def test_summary_stats():
    record_set = format_records(extract(ScriptedCube(5)))
    df = create_clean_measure_frame(record_set)

    stats = get_summary_stats(df, record_set.header_names(MEASURE))

    assert stats["Quantity"] == {
        "total": 10.0,
        "non_zero": 4,
        "rows": 5,
        "mean_non_zero": 2.5,
        "max": 4.0,
    }


def test_summary_stats_of_empty_frame():
    record_set = format_records(extract(ScriptedCube(0)))
    df = create_clean_measure_frame(record_set)

    stats = get_summary_stats(df, ["Quantity"])

    assert stats["Quantity"]["total"] == 0.0
    assert stats["Quantity"]["max"] == 0.0


def test_validate_complete_and_partial_results():
    assert validate_extraction_result(extract(ScriptedCube(25), page_size=10))

    capped = extract(ScriptedCube(25), page_size=10, max_pages=1)
    assert validate_extraction_result(capped)

    aborted = extract(
        ScriptedCube(25, script=lambda i, mode, window: EngineFault("denied", code=5))
    )
    assert validate_extraction_result(aborted)


def test_validate_rejects_inconsistent_metadata():
    result = extract(ScriptedCube(5))

    with pytest.raises(ValueError):
        validate_extraction_result(
            replace(result, metadata=replace(result.metadata, extracted_rows=4))
        )

    with pytest.raises(ValueError):
        validate_extraction_result(
            ExtractionResult(
                assembled_rows=result.assembled_rows[:2],
                metadata=replace(result.metadata, extracted_rows=2),
            )
        )


def test_data_quality_reports_nulls():
    df = pl.DataFrame({"a": ["x", None, "x"], "b": [1.0, 2.0, 1.0]})

    metrics = validate_data_quality(df, "sample")

    assert metrics["total_records"] == 3
    assert metrics["null_counts"] == {"a": 1, "b": 0}
    assert metrics["duplicate_rows"] == 1
