"""
Snapshot Engine Session - Offline Collaborator

Replays a recorded hypercube from a JSON snapshot so the pipeline can run
without a live engine (dry runs, local development, tests).

Snapshot format:
    {
        "object_id": "abc123",
        "layout": {"qHyperCube": {"qDimensionInfo": [...], "qMeasureInfo": [...],
                                  "qSize": {"qcx": 5, "qcy": 1200}, "qMode": "S"}},
        "matrix": [[{"qText": "...", "qNum": 1.0, "qState": "O"}, ...], ...]
    }
"""

import json
import logging
import os
from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..coreutils.request import get_json, is_url, new_session
from .engine_api import CubeHandle, EngineFault, EngineSession
from .fault_classifier import (
    NOT_IN_PIVOT_MODE_CODE,
    NOT_IN_PIVOT_MODE_PARAMETER,
    PAGE_TOO_LARGE_CODE,
    PAGE_TOO_LARGE_PARAMETER,
)
from .models import CubeDescriptor, ExtractionWindow, LayoutMode

logger = logging.getLogger(__name__)

# Engine limit on cells (height x width) per requested page
MAX_CELLS_PER_PAGE = 10_000


def load_snapshot(filepath: str) -> Dict[str, Any]:
    """
    Load a recorded cube snapshot from disk or over HTTP

    Args:
        filepath: Path or http(s) URL of a snapshot JSON document

    Returns:
        Dict: Snapshot with object_id, layout and matrix keys
    """
    logger.info(f"Loading cube snapshot from {filepath}")

    if is_url(filepath):
        snapshot = get_json(new_session(), filepath)
    else:
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Snapshot file not found: {filepath}")

        with open(filepath, "r", encoding="utf-8") as f:
            snapshot = json.load(f)

    missing = [key for key in ("object_id", "layout", "matrix") if key not in snapshot]
    if missing:
        raise ValueError(f"Snapshot {filepath} is missing keys: {missing}")

    logger.info(
        f"Loaded snapshot for object {snapshot['object_id']}: "
        f"{len(snapshot['matrix'])} rows"
    )
    return snapshot


class SnapshotCubeHandle(CubeHandle):
    """Serves windows out of an in-memory recorded matrix"""

    def __init__(
        self,
        object_id: str,
        layout: Mapping[str, Any],
        matrix: Sequence[Sequence[Any]],
        max_cells_per_page: int = MAX_CELLS_PER_PAGE,
    ):
        self.object_id = object_id
        self.layout = layout
        self.matrix = matrix
        self.max_cells_per_page = max_cells_per_page
        self.fetch_calls: List[Dict[str, Any]] = []
        self.released = False

    def get_descriptor(self) -> CubeDescriptor:
        return CubeDescriptor.from_layout(self.layout)

    def fetch_pivot_window(self, window: ExtractionWindow) -> List[Sequence[Any]]:
        self.fetch_calls.append({"mode": LayoutMode.PIVOT, "window": window})
        mode = LayoutMode.from_engine(self.layout["qHyperCube"].get("qMode"))
        if mode is not LayoutMode.PIVOT:
            raise EngineFault(
                f"Object {self.object_id} is not in pivot mode",
                code=NOT_IN_PIVOT_MODE_CODE,
                parameter=NOT_IN_PIVOT_MODE_PARAMETER,
            )
        return self._slice(window)

    def fetch_straight_window(self, window: ExtractionWindow) -> List[Sequence[Any]]:
        self.fetch_calls.append({"mode": LayoutMode.STRAIGHT, "window": window})
        return self._slice(window)

    def release(self) -> None:
        self.released = True

    def _slice(self, window: ExtractionWindow) -> List[Sequence[Any]]:
        if self.released:
            raise EngineFault(f"Handle {self.object_id} has been released")

        if window.height * window.width > self.max_cells_per_page:
            raise EngineFault(
                f"Requested {window.height}x{window.width} cells, "
                f"limit is {self.max_cells_per_page}",
                code=PAGE_TOO_LARGE_CODE,
                parameter=PAGE_TOO_LARGE_PARAMETER,
            )

        rows = self.matrix[window.top_row : window.top_row + window.height]
        right = window.left_column + window.width
        return [list(row[window.left_column : right]) for row in rows]


class SnapshotEngineSession(EngineSession):
    """Engine session over one or more recorded snapshots"""

    def __init__(
        self,
        snapshots: Optional[List[Mapping[str, Any]]] = None,
        max_cells_per_page: int = MAX_CELLS_PER_PAGE,
    ):
        self.snapshots = {s["object_id"]: s for s in snapshots or []}
        self.max_cells_per_page = max_cells_per_page
        self.opened: List[SnapshotCubeHandle] = []

    @classmethod
    def from_file(cls, filepath: str, **kwargs) -> "SnapshotEngineSession":
        return cls([load_snapshot(filepath)], **kwargs)

    def open_cube_handle(self, object_id: str) -> SnapshotCubeHandle:
        snapshot = self.snapshots.get(object_id)
        if snapshot is None:
            raise EngineFault(f"Object {object_id} not found in snapshot session")

        handle = SnapshotCubeHandle(
            object_id,
            snapshot["layout"],
            snapshot["matrix"],
            max_cells_per_page=self.max_cells_per_page,
        )
        self.opened.append(handle)
        return handle
