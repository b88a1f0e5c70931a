"""
Test Page Fetcher - one bounded fetch, faults returned as values
"""

import os
import sys
from unittest.mock import MagicMock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cubepipe.extract.engine_api import EngineFault
from cubepipe.extract.models import Cell, CellState, ExtractionWindow, LayoutMode
from cubepipe.extract.page_fetcher import fetch_window
from fake_engine import ScriptedCube, make_raw_row, too_large_fault

WINDOW = ExtractionWindow(top_row=0, left_column=0, height=5, width=2)


def test_pivot_mode_uses_pivot_call():
    cube = MagicMock()
    cube.fetch_pivot_window.return_value = [make_raw_row(0)]

    outcome = fetch_window(cube, WINDOW, LayoutMode.PIVOT)

    assert outcome.ok
    cube.fetch_pivot_window.assert_called_once_with(WINDOW)
    cube.fetch_straight_window.assert_not_called()


def test_straight_mode_uses_straight_call():
    cube = MagicMock()
    cube.fetch_straight_window.return_value = [make_raw_row(0)]

    fetch_window(cube, WINDOW, LayoutMode.STRAIGHT)

    cube.fetch_straight_window.assert_called_once_with(WINDOW)
    cube.fetch_pivot_window.assert_not_called()


def test_rows_are_normalized_to_cells():
    outcome = fetch_window(ScriptedCube(3), WINDOW, LayoutMode.STRAIGHT)

    assert len(outcome.rows) == 3
    first = outcome.rows[0]
    assert first[0] == Cell("row-0", None, CellState.OPTIONAL)
    assert first[1] == Cell("0", 0.0, CellState.LOCKED)


def test_fault_code_and_parameter_are_preserved():
    cube = ScriptedCube(10, script=lambda i, mode, window: too_large_fault())

    outcome = fetch_window(cube, WINDOW, LayoutMode.STRAIGHT)

    assert not outcome.ok
    assert outcome.rows == ()
    assert outcome.fault.code == 6001
    assert outcome.fault.parameter == "Page(s) too large"
    assert len(cube.calls) == 1


def test_opaque_error_becomes_fault_without_code():
    cube = MagicMock()
    cube.fetch_straight_window.side_effect = ConnectionError("socket closed")

    outcome = fetch_window(cube, WINDOW, LayoutMode.STRAIGHT)

    assert outcome.fault.code is None
    assert outcome.fault.message == "socket closed"


def test_extra_rows_are_truncated_to_window_height():
    cube = MagicMock()
    cube.fetch_straight_window.return_value = [make_raw_row(i) for i in range(8)]

    outcome = fetch_window(cube, WINDOW, LayoutMode.STRAIGHT)

    assert outcome.ok
    assert len(outcome.rows) == 5


def test_malformed_cell_becomes_fault():
    cube = MagicMock()
    cube.fetch_straight_window.return_value = [[42]]

    outcome = fetch_window(cube, WINDOW, LayoutMode.STRAIGHT)

    assert outcome.fault.code == "MALFORMED_PAGE"


def test_none_result_is_empty_page():
    cube = MagicMock()
    cube.fetch_straight_window.return_value = None

    outcome = fetch_window(cube, WINDOW, LayoutMode.STRAIGHT)

    assert outcome.ok
    assert outcome.rows == ()


def test_engine_fault_str_is_message():
    fault = EngineFault("Invalid handle", code=3)
    cube = MagicMock()
    cube.fetch_pivot_window.side_effect = fault

    outcome = fetch_window(cube, WINDOW, LayoutMode.PIVOT)

    assert outcome.fault.message == "Invalid handle"
    assert outcome.fault.code == 3
