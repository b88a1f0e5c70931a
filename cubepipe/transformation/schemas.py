"""
Transformation Layer Schemas

Polars schemas for the tabular views of a formatted record set.
Column names come from the cube, so schemas are built from the headers.
"""

from typing import Sequence

import polars as pl

DIMENSION_DTYPE = pl.String()
MEASURE_DTYPE = pl.Float64()


def record_frame_schema(header_names: Sequence[str]) -> pl.Schema:
    """Every column holds the cell display text"""
    return pl.Schema([(name, pl.String()) for name in header_names])


def clean_frame_schema(
    dimension_names: Sequence[str], measure_names: Sequence[str]
) -> pl.Schema:
    """Dimensions as text, measures as numbers"""
    return pl.Schema(
        [(name, DIMENSION_DTYPE) for name in dimension_names]
        + [(name, MEASURE_DTYPE) for name in measure_names]
    )
