"""
Test Extract Layer Models - cells, descriptors, windows and faults
"""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cubepipe.extract.engine_api import EngineFault
from cubepipe.extract.models import (
    Cell,
    CellState,
    ColumnDescriptor,
    CubeDescriptor,
    ExtractionWindow,
    Fault,
    LayoutMode,
    to_rows,
)

LAYOUT = {
    "qHyperCube": {
        "qDimensionInfo": [{"qFallbackTitle": "Plant"}, {"qFallbackTitle": "Material"}],
        "qMeasureInfo": [{"qFallbackTitle": "Stock"}],
        "qSize": {"qcx": 3, "qcy": 1200},
        "qMode": "EQ_DATA_MODE_PIVOT",
    }
}


class TestCell(unittest.TestCase):
    def test_from_engine(self):
        cell = Cell.from_engine({"qText": "1,234", "qNum": 1234, "qState": "L"})
        self.assertEqual(cell.display_text, "1,234")
        self.assertEqual(cell.numeric_value, 1234.0)
        self.assertEqual(cell.state, CellState.LOCKED)

    def test_non_numeric_values_become_none(self):
        for raw_num in ("NaN", float("nan"), None, "abc", True):
            with self.subTest(raw_num=raw_num):
                self.assertIsNone(Cell.from_engine({"qText": "x", "qNum": raw_num}).numeric_value)

    def test_missing_keys_default(self):
        cell = Cell.from_engine({})
        self.assertEqual(cell, Cell("", None, CellState.OPTIONAL))

    def test_state_codes(self):
        self.assertEqual(CellState.from_engine("S"), CellState.SELECTED)
        self.assertEqual(CellState.from_engine("XS"), CellState.EXCLUDED)
        self.assertEqual(CellState.from_engine("A"), CellState.ALTERNATIVE)

    def test_deselected_state_is_optional(self):
        cell = Cell.from_engine({"qText": "1101", "qState": "D"})
        self.assertEqual(cell.state, CellState.OPTIONAL)

    def test_unknown_state_is_logged_not_raised(self):
        with self.assertLogs("cubepipe.extract.models", level="WARNING"):
            self.assertEqual(CellState.from_engine("Q"), CellState.OPTIONAL)

    def test_to_rows_accepts_cells_and_raw(self):
        rows = to_rows([[Cell("a"), {"qText": "b", "qNum": 2}]])
        self.assertEqual(rows, ((Cell("a"), Cell("b", 2.0)),))


class TestCubeDescriptor(unittest.TestCase):
    def test_from_layout(self):
        descriptor = CubeDescriptor.from_layout(LAYOUT)

        self.assertEqual(descriptor.total_rows, 1200)
        self.assertEqual(descriptor.total_columns, 3)
        self.assertEqual(descriptor.layout_mode, LayoutMode.PIVOT)
        self.assertEqual(
            [d.display_name for d in descriptor.dimension_descriptors],
            ["Plant", "Material"],
        )
        self.assertEqual(descriptor.initial_rows, ())

    def test_layout_without_hypercube_raises(self):
        with self.assertRaises(ValueError):
            CubeDescriptor.from_layout({"qInfo": {}})

    def test_negative_extent_raises(self):
        with self.assertRaises(ValueError):
            CubeDescriptor((), (), total_rows=-1, total_columns=0)

    def test_column_mismatch_is_only_logged(self):
        with self.assertLogs("cubepipe.extract.models", level="WARNING"):
            descriptor = CubeDescriptor((ColumnDescriptor("A"),), (), 5, 4)
        self.assertEqual(descriptor.total_columns, 4)

    def test_layout_mode_mapping(self):
        self.assertEqual(LayoutMode.from_engine("P"), LayoutMode.PIVOT)
        self.assertEqual(LayoutMode.from_engine("S"), LayoutMode.STRAIGHT)
        self.assertEqual(LayoutMode.from_engine(None), LayoutMode.STRAIGHT)
        self.assertEqual(LayoutMode.PIVOT.flipped(), LayoutMode.STRAIGHT)


class TestWindowAndFault(unittest.TestCase):
    def test_window_to_engine(self):
        window = ExtractionWindow(top_row=100, left_column=0, height=50, width=3)
        self.assertEqual(
            window.to_engine(), {"qTop": 100, "qLeft": 0, "qHeight": 50, "qWidth": 3}
        )

    def test_invalid_windows(self):
        for args in ((-1, 0, 10, 1), (0, 0, 0, 1), (0, 0, 10, 0)):
            with self.subTest(args=args):
                with self.assertRaises(ValueError):
                    ExtractionWindow(*args)

    def test_fault_from_exception(self):
        fault = Fault.from_exception(EngineFault("Too big", code=6001, parameter="Page(s) too large"))
        self.assertEqual(
            fault.to_dict(),
            {"code": 6001, "parameter": "Page(s) too large", "message": "Too big"},
        )

        plain = Fault.from_exception(RuntimeError("boom"))
        self.assertIsNone(plain.code)
        self.assertEqual(plain.message, "boom")


if __name__ == "__main__":
    unittest.main()
