"""
Engine Session API - Pure I/O Interface

Contracts for the analytic engine collaborator. Connection, authentication
and wire encoding live in concrete sessions; the extraction engine only
talks to these interfaces.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Sequence, Union

from .models import CubeDescriptor, ExtractionWindow

logger = logging.getLogger(__name__)


class EngineFault(Exception):
    """Error raised by an engine call, carrying the engine's error code and parameter"""

    def __init__(
        self,
        message: str,
        code: Union[int, str, None] = None,
        parameter: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.parameter = parameter


class CubeHandle(ABC):
    """Handle to one remote object backed by a hypercube"""

    object_id: str

    @abstractmethod
    def get_descriptor(self) -> CubeDescriptor:
        raise NotImplementedError

    @abstractmethod
    def fetch_pivot_window(self, window: ExtractionWindow) -> List[Sequence[Any]]:
        """Return rows for the window using the pivot-shaped call"""
        raise NotImplementedError

    @abstractmethod
    def fetch_straight_window(self, window: ExtractionWindow) -> List[Sequence[Any]]:
        """Return rows for the window using the straight-table call"""
        raise NotImplementedError

    @abstractmethod
    def release(self) -> None:
        """Release any remote-side objects created for this handle"""
        raise NotImplementedError


class EngineSession(ABC):
    """Opened connection to an engine document"""

    @abstractmethod
    def open_cube_handle(self, object_id: str) -> CubeHandle:
        raise NotImplementedError

    def close(self) -> None:
        pass


@contextmanager
def open_cube(session: EngineSession, object_id: str) -> Iterator[CubeHandle]:
    """
    Open a cube handle and release it on every exit path

    Release is best-effort: a failing release is logged, never raised,
    so it cannot mask the outcome of the extraction itself.

    Args:
        session: Engine session to open the object in
        object_id: Remote object identifier

    Yields:
        CubeHandle: Opened handle
    """
    logger.info(f"Opening cube handle for object {object_id}")
    cube = session.open_cube_handle(object_id)
    try:
        yield cube
    finally:
        try:
            cube.release()
            logger.info(f"Released cube handle for object {object_id}")
        except Exception as e:
            logger.warning(f"⚠️ Failed to release cube handle {object_id}: {e}")
