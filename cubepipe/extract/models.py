"""
Extract Layer Models

Typed representation of what comes back from the analytic engine:
cells, rows, cube descriptors, fetch windows and faults.
These mirror the engine's hypercube structures with Python names.
"""

import logging
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

PIVOT_MODE_CODES = {"EQ_DATA_MODE_PIVOT", "P"}


class LayoutMode(str, Enum):
    """Which fetch call shape the cube accepts"""

    PIVOT = "PIVOT"
    STRAIGHT = "STRAIGHT"

    @classmethod
    def from_engine(cls, code: Optional[str]) -> "LayoutMode":
        """Map an engine qMode code; anything that is not pivot is fetched straight"""
        if code in PIVOT_MODE_CODES:
            return cls.PIVOT
        return cls.STRAIGHT

    def flipped(self) -> "LayoutMode":
        return LayoutMode.STRAIGHT if self is LayoutMode.PIVOT else LayoutMode.PIVOT


class CellState(str, Enum):
    """Selection state of a cell, valued with the engine's state letters"""

    SELECTED = "S"
    OPTIONAL = "O"
    EXCLUDED = "X"
    LOCKED = "L"
    ALTERNATIVE = "A"

    @classmethod
    def from_engine(cls, code: Optional[str]) -> "CellState":
        if code is None or code == "":
            return cls.OPTIONAL
        if isinstance(code, CellState):
            return code
        # Excluded-selected / excluded-locked
        if code in ("XS", "XL"):
            return cls.EXCLUDED
        # Deselected
        if code == "D":
            return cls.OPTIONAL
        try:
            return cls(code)
        except ValueError:
            logger.warning(f"⚠️ Unknown cell state code {code!r}, treating as optional")
            return cls.OPTIONAL


@dataclass(frozen=True)
class Cell:
    """One retrieved value"""

    display_text: str
    numeric_value: Optional[float] = None
    state: CellState = CellState.OPTIONAL

    @classmethod
    def from_engine(cls, raw: Mapping[str, Any]) -> "Cell":
        """
        Build a Cell from the engine's raw cell shape

        Args:
            raw: Mapping with qText, qNum and qState keys (all optional)

        Returns:
            Cell: Typed cell; non-numeric qNum values ("NaN") become None
        """
        text = raw.get("qText")
        return cls(
            display_text="" if text is None else str(text),
            numeric_value=_parse_number(raw.get("qNum")),
            state=CellState.from_engine(raw.get("qState")),
        )


Row = Tuple[Cell, ...]


def _parse_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number):
        return None
    return number


@dataclass(frozen=True)
class ColumnDescriptor:
    """Dimension or measure column info (qDimensionInfo / qMeasureInfo entry)"""

    display_name: str

    @classmethod
    def from_engine(cls, raw: Mapping[str, Any]) -> "ColumnDescriptor":
        return cls(display_name=str(raw.get("qFallbackTitle", "")))


@dataclass(frozen=True)
class CubeDescriptor:
    """Immutable metadata snapshot of a hypercube, taken once per extraction"""

    dimension_descriptors: Tuple[ColumnDescriptor, ...]
    measure_descriptors: Tuple[ColumnDescriptor, ...]
    total_rows: int
    total_columns: int
    layout_mode: LayoutMode = LayoutMode.STRAIGHT
    initial_rows: Tuple[Row, ...] = field(default=(), compare=False)

    def __post_init__(self):
        if self.total_rows < 0 or self.total_columns < 0:
            raise ValueError(
                f"Malformed cube descriptor: rows={self.total_rows}, "
                f"columns={self.total_columns}"
            )

        expected = len(self.dimension_descriptors) + len(self.measure_descriptors)
        if self.total_columns != expected:
            logger.warning(
                f"Cube reports {self.total_columns} columns but declares "
                f"{expected} dimensions + measures"
            )

    @classmethod
    def from_layout(cls, layout: Mapping[str, Any]) -> "CubeDescriptor":
        """
        Build a descriptor from an engine object layout

        Args:
            layout: Layout mapping holding a qHyperCube entry

        Returns:
            CubeDescriptor: Descriptor, with any pre-fetched qDataPages kept as initial_rows
        """
        hypercube = layout.get("qHyperCube")
        if hypercube is None:
            raise ValueError("Layout has no qHyperCube")

        size = hypercube.get("qSize", {})
        initial_rows: List[Row] = []
        for page in hypercube.get("qDataPages") or []:
            for raw_row in page.get("qMatrix") or []:
                initial_rows.append(tuple(Cell.from_engine(c) for c in raw_row))

        return cls(
            dimension_descriptors=tuple(
                ColumnDescriptor.from_engine(d)
                for d in hypercube.get("qDimensionInfo", [])
            ),
            measure_descriptors=tuple(
                ColumnDescriptor.from_engine(m)
                for m in hypercube.get("qMeasureInfo", [])
            ),
            total_rows=int(size.get("qcy", 0)),
            total_columns=int(size.get("qcx", 0)),
            layout_mode=LayoutMode.from_engine(hypercube.get("qMode")),
            initial_rows=tuple(initial_rows),
        )


@dataclass(frozen=True)
class ExtractionWindow:
    """One bounded fetch request: a row range x column range of the cube"""

    top_row: int
    left_column: int
    height: int
    width: int

    def __post_init__(self):
        if self.top_row < 0 or self.left_column < 0:
            raise ValueError(f"Window offsets must be non-negative: {self}")
        if self.height <= 0 or self.width <= 0:
            raise ValueError(f"Window height and width must be positive: {self}")

    def to_engine(self) -> Dict[str, int]:
        return {
            "qTop": self.top_row,
            "qLeft": self.left_column,
            "qHeight": self.height,
            "qWidth": self.width,
        }


@dataclass(frozen=True)
class Fault:
    """A non-success outcome of a remote call, with the engine's classification hints"""

    code: Union[int, str, None] = None
    parameter: Optional[str] = None
    message: str = ""

    @classmethod
    def from_exception(cls, error: BaseException) -> "Fault":
        return cls(
            code=getattr(error, "code", None),
            parameter=getattr(error, "parameter", None),
            message=str(error),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "parameter": self.parameter, "message": self.message}


def to_rows(raw_matrix: Sequence[Sequence[Any]]) -> Tuple[Row, ...]:
    """Normalize a matrix of raw engine cells or Cell objects into typed rows"""
    rows = []
    for raw_row in raw_matrix:
        rows.append(
            tuple(c if isinstance(c, Cell) else Cell.from_engine(c) for c in raw_row)
        )
    return tuple(rows)
