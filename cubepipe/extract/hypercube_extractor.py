"""
Hypercube Extractor - Incremental Extraction Controller

Pulls a hypercube that is too large for one call, page by page:
- one outstanding fetch at a time, pages assembled in row order
- failed fetches routed through the fault classifier (retry, shrink, switch mode, abort)
- max_pages caps total attempts as a backstop against unbounded loops
- capped, aborted and cancelled runs still return the rows gathered so far
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .engine_api import CubeHandle, EngineSession, open_cube
from .fault_classifier import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_MIN_HEIGHT,
    ActionKind,
    AttemptContext,
    classify,
)
from .models import (
    ColumnDescriptor,
    CubeDescriptor,
    ExtractionWindow,
    Fault,
    LayoutMode,
    Row,
)
from .page_fetcher import fetch_window

logger = logging.getLogger(__name__)

# Seconds between successful pages
PAGE_DELAY = 0.01


class TerminationReason(str, Enum):
    COMPLETE = "COMPLETE"
    CAPPED = "CAPPED"
    ABORTED = "ABORTED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class ExtractionOptions:
    """
    Paging configuration for one extraction

    Args:
        page_size: Desired window height per page
        max_pages: Cap on fetch attempts (successful or not)
        start_row: First row to extract
        start_column: First column to extract
        column_count: Window width; defaults to every column right of start_column
        max_retries: Same-window retries allowed for aborted requests
        min_page_size: Floor for window height when shrinking
        page_delay: Seconds to sleep between successful pages
    """

    page_size: int = 1000
    max_pages: int = 10
    start_row: int = 0
    start_column: int = 0
    column_count: Optional[int] = None
    max_retries: int = DEFAULT_MAX_RETRIES
    min_page_size: int = DEFAULT_MIN_HEIGHT
    page_delay: float = PAGE_DELAY

    def __post_init__(self):
        if self.page_size <= 0:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if self.max_pages <= 0:
            raise ValueError(f"max_pages must be positive, got {self.max_pages}")
        if self.start_row < 0 or self.start_column < 0:
            raise ValueError("start_row and start_column must be non-negative")
        if self.column_count is not None and self.column_count <= 0:
            raise ValueError(f"column_count must be positive, got {self.column_count}")
        if self.max_retries < 0:
            raise ValueError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.min_page_size <= 0:
            raise ValueError(f"min_page_size must be positive, got {self.min_page_size}")
        if self.page_delay < 0:
            raise ValueError(f"page_delay must be non-negative, got {self.page_delay}")


@dataclass
class ExtractionState:
    """Mutable progress of one extraction, owned by the controller call"""

    cursor_row: int
    current_window_height: int
    layout_mode: LayoutMode
    assembled_rows: List[Row] = field(default_factory=list)
    pages_attempted: int = 0
    pages_succeeded: int = 0
    retries_for_window: int = 0
    mode_switched: bool = False
    last_fault: Optional[Fault] = None


@dataclass(frozen=True)
class ExtractionMetadata:
    dimension_descriptors: Tuple[ColumnDescriptor, ...]
    measure_descriptors: Tuple[ColumnDescriptor, ...]
    total_rows: int
    total_columns: int
    extracted_rows: int
    pages_processed: int
    termination_reason: TerminationReason
    pages_attempted: int = 0
    page_size: int = 0
    start_row: int = 0
    final_window_height: int = 0
    layout_mode: LayoutMode = LayoutMode.STRAIGHT
    mode_switched: bool = False
    fault: Optional[Fault] = None

    @property
    def is_complete(self) -> bool:
        return self.termination_reason is TerminationReason.COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimensions": [d.display_name for d in self.dimension_descriptors],
            "measures": [m.display_name for m in self.measure_descriptors],
            "totalRows": self.total_rows,
            "totalColumns": self.total_columns,
            "extractedRows": self.extracted_rows,
            "pagesProcessed": self.pages_processed,
            "pagesAttempted": self.pages_attempted,
            "pageSize": self.page_size,
            "startRow": self.start_row,
            "finalWindowHeight": self.final_window_height,
            "layoutMode": self.layout_mode.value,
            "modeSwitched": self.mode_switched,
            "terminationReason": self.termination_reason.value,
            "fault": self.fault.to_dict() if self.fault else None,
        }


@dataclass(frozen=True)
class ExtractionResult:
    assembled_rows: Tuple[Row, ...]
    metadata: ExtractionMetadata


class HypercubeExtractor:
    """Drives the paging loop over one cube handle"""

    def __init__(self, options: Optional[ExtractionOptions] = None):
        self.options = options or ExtractionOptions()

    def extract(
        self,
        cube: CubeHandle,
        descriptor: CubeDescriptor,
        cancel_event: Optional[threading.Event] = None,
    ) -> ExtractionResult:
        """
        Extract the cube incrementally

        Args:
            cube: Handle to fetch pages from
            descriptor: Cube metadata read once before extraction
            cancel_event: Set it to stop between pages

        Returns:
            ExtractionResult: Assembled rows plus metadata; check
                metadata.termination_reason before treating the rows as complete
        """
        opts = self.options
        total_rows = descriptor.total_rows
        if opts.column_count is not None:
            width = opts.column_count
        else:
            width = descriptor.total_columns - opts.start_column

        state = ExtractionState(
            cursor_row=opts.start_row,
            current_window_height=opts.page_size,
            layout_mode=descriptor.layout_mode,
        )

        logger.info(
            f"Extracting {object_label(cube)}: {total_rows} rows, {width} columns, "
            f"mode {state.layout_mode.value}, page size {opts.page_size}, "
            f"max pages {opts.max_pages}"
        )

        reason: Optional[TerminationReason] = None

        while state.cursor_row < total_rows and state.pages_attempted < opts.max_pages:
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"🛑 Extraction cancelled at row {state.cursor_row}")
                reason = TerminationReason.CANCELLED
                break

            if width <= 0:
                state.last_fault = Fault(
                    code="INVALID_WINDOW",
                    message=f"No columns to fetch (width {width})",
                )
                reason = TerminationReason.ABORTED
                break

            height = min(state.current_window_height, total_rows - state.cursor_row)
            window = ExtractionWindow(
                top_row=state.cursor_row,
                left_column=opts.start_column,
                height=height,
                width=width,
            )

            state.pages_attempted += 1
            logger.info(
                f"Fetching page {state.pages_attempted}: rows {window.top_row} "
                f"to {window.top_row + window.height - 1}"
            )
            outcome = fetch_window(cube, window, state.layout_mode)

            if outcome.ok:
                if not outcome.rows:
                    logger.warning(
                        f"⚠️ Page {state.pages_attempted}: no data returned "
                        f"at row {state.cursor_row}"
                    )
                    state.last_fault = Fault(
                        code="EMPTY_PAGE",
                        message=f"No rows returned at row {state.cursor_row} "
                        f"of {total_rows}",
                    )
                    reason = TerminationReason.ABORTED
                    break

                state.assembled_rows.extend(outcome.rows)
                state.cursor_row += len(outcome.rows)
                state.pages_succeeded += 1
                state.retries_for_window = 0
                logger.info(
                    f"Page {state.pages_attempted}: {len(outcome.rows)} rows fetched"
                )

                more_to_do = (
                    state.cursor_row < total_rows
                    and state.pages_attempted < opts.max_pages
                )
                if opts.page_delay and more_to_do:
                    time.sleep(opts.page_delay)
                continue

            fault = outcome.fault
            state.last_fault = fault
            action = classify(
                fault,
                AttemptContext(
                    retries_for_window=state.retries_for_window,
                    mode_switched=state.mode_switched,
                    current_height=window.height,
                    min_height=opts.min_page_size,
                    max_retries=opts.max_retries,
                ),
            )
            logger.warning(
                f"⚠️ Page {state.pages_attempted} failed "
                f"(code={fault.code}, parameter={fault.parameter}): "
                f"{action.kind.value} - {action.reason}"
            )

            if action.kind is ActionKind.RETRY_SAME:
                state.retries_for_window += 1
            elif action.kind is ActionKind.SHRINK_AND_RETRY:
                state.current_window_height = action.new_height
                state.retries_for_window = 0
            elif action.kind is ActionKind.SWITCH_MODE_AND_RETRY:
                state.layout_mode = state.layout_mode.flipped()
                state.mode_switched = True
                state.retries_for_window = 0
                logger.info(f"Switching layout mode to {state.layout_mode.value}")
            else:
                logger.error(
                    f"❌ Stopping extraction due to error: {fault.message or fault.code}"
                )
                reason = TerminationReason.ABORTED
                break

        if reason is None:
            if state.cursor_row >= total_rows:
                reason = TerminationReason.COMPLETE
            else:
                reason = TerminationReason.CAPPED
                logger.warning(
                    f"⚠️ Page cap of {opts.max_pages} reached at row "
                    f"{state.cursor_row} of {total_rows}"
                )

        result = self._build_result(state, descriptor, reason)
        logger.info(
            f"Data extraction finished ({reason.value}): "
            f"{result.metadata.extracted_rows} of {total_rows} rows in "
            f"{state.pages_succeeded} pages ({state.pages_attempted} attempts)"
        )
        return result

    def _build_result(
        self,
        state: ExtractionState,
        descriptor: CubeDescriptor,
        reason: TerminationReason,
    ) -> ExtractionResult:
        rows = tuple(state.assembled_rows)
        metadata = ExtractionMetadata(
            dimension_descriptors=descriptor.dimension_descriptors,
            measure_descriptors=descriptor.measure_descriptors,
            total_rows=descriptor.total_rows,
            total_columns=descriptor.total_columns,
            extracted_rows=len(rows),
            pages_processed=state.pages_succeeded,
            termination_reason=reason,
            pages_attempted=state.pages_attempted,
            page_size=self.options.page_size,
            start_row=self.options.start_row,
            final_window_height=state.current_window_height,
            layout_mode=state.layout_mode,
            mode_switched=state.mode_switched,
            fault=state.last_fault if reason is TerminationReason.ABORTED else None,
        )
        return ExtractionResult(assembled_rows=rows, metadata=metadata)


def object_label(cube: CubeHandle) -> str:
    return f"object {getattr(cube, 'object_id', '?')}"


# Convenience functions for direct use
def extract_hypercube(
    cube: CubeHandle,
    descriptor: CubeDescriptor,
    options: Optional[ExtractionOptions] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ExtractionResult:
    """Convenience function to run one paginated extraction"""
    return HypercubeExtractor(options).extract(cube, descriptor, cancel_event)


def extract_object(
    session: EngineSession,
    object_id: str,
    options: Optional[ExtractionOptions] = None,
    cancel_event: Optional[threading.Event] = None,
) -> ExtractionResult:
    """
    Open an object, extract its hypercube and release the handle

    Args:
        session: Engine session the object lives in
        object_id: Remote object identifier
        options: Paging configuration
        cancel_event: Set it to stop between pages

    Returns:
        ExtractionResult: Extraction outcome; the handle is released on every path
    """
    with open_cube(session, object_id) as cube:
        descriptor = cube.get_descriptor()
        logger.info(
            f"Cube layout: {len(descriptor.dimension_descriptors)} dimensions, "
            f"{len(descriptor.measure_descriptors)} measures, "
            f"{descriptor.total_rows} rows, {descriptor.total_columns} columns, "
            f"mode {descriptor.layout_mode.value}"
        )
        return extract_hypercube(cube, descriptor, options, cancel_event)


def extract_simple(
    cube: CubeHandle, options: Optional[ExtractionOptions] = None
) -> ExtractionResult:
    """
    Use the rows delivered with the layout when they cover the whole cube

    Small cubes arrive complete with their layout, so no paging is needed.
    Otherwise this falls back to the paginated extraction.

    Args:
        cube: Cube handle
        options: Paging configuration for the fallback

    Returns:
        ExtractionResult: Extraction outcome
    """
    descriptor = cube.get_descriptor()
    initial_rows = descriptor.initial_rows

    if initial_rows and len(initial_rows) >= descriptor.total_rows:
        rows = tuple(initial_rows[: descriptor.total_rows])
        logger.info(f"Using {len(rows)} rows delivered with the layout")
        metadata = ExtractionMetadata(
            dimension_descriptors=descriptor.dimension_descriptors,
            measure_descriptors=descriptor.measure_descriptors,
            total_rows=descriptor.total_rows,
            total_columns=descriptor.total_columns,
            extracted_rows=len(rows),
            pages_processed=0,
            termination_reason=TerminationReason.COMPLETE,
            page_size=len(rows),
            final_window_height=len(rows),
            layout_mode=descriptor.layout_mode,
        )
        return ExtractionResult(assembled_rows=rows, metadata=metadata)

    logger.info("Layout carries no complete data pages, using paginated extraction")
    return extract_hypercube(cube, descriptor, options)
