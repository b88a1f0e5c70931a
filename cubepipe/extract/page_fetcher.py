"""
Page Fetcher - Extract Layer

Issues exactly one bounded-window fetch against a cube handle, choosing the
pivot or straight call by layout mode. Failures come back as Fault values
instead of exceptions; retrying is the controller's job.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from .engine_api import CubeHandle
from .models import ExtractionWindow, Fault, LayoutMode, Row, to_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    rows: Tuple[Row, ...] = ()
    fault: Optional[Fault] = None

    @property
    def ok(self) -> bool:
        return self.fault is None


def fetch_window(
    cube: CubeHandle, window: ExtractionWindow, layout_mode: LayoutMode
) -> FetchOutcome:
    """
    Fetch one window of the cube

    Args:
        cube: Cube handle to fetch from
        window: Row/column range to request
        layout_mode: Which call shape to use

    Returns:
        FetchOutcome: Up to window.height typed rows, or the fault that occurred
    """
    logger.debug(
        f"Fetching {layout_mode.value} window rows {window.top_row}.."
        f"{window.top_row + window.height - 1} (width {window.width})"
    )

    try:
        if layout_mode is LayoutMode.PIVOT:
            raw_rows = cube.fetch_pivot_window(window)
        else:
            raw_rows = cube.fetch_straight_window(window)
    except Exception as e:
        fault = Fault.from_exception(e)
        logger.debug(f"Fetch failed: code={fault.code} parameter={fault.parameter}")
        return FetchOutcome(fault=fault)

    try:
        rows = to_rows(raw_rows or [])
    except (TypeError, ValueError, AttributeError) as e:
        return FetchOutcome(fault=Fault(code="MALFORMED_PAGE", message=str(e)))

    if len(rows) > window.height:
        logger.warning(
            f"⚠️ Server returned {len(rows)} rows for a {window.height}-row window, "
            f"truncating"
        )
        rows = rows[: window.height]

    return FetchOutcome(rows=rows)
