"""
Fault Classifier

Pure decision function over a failed page fetch. Given the fault and the
state of the current attempt it decides how the extraction controller
proceeds. No I/O.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .models import Fault

# Engine error signatures
PAGE_TOO_LARGE_CODE = 6001
PAGE_TOO_LARGE_PARAMETER = "Page(s) too large"
NOT_IN_PIVOT_MODE_CODE = 6002
NOT_IN_PIVOT_MODE_PARAMETER = "Not in pivot mode"
ABORTED_CODES = {"LOCERR_GENERIC_ABORTED", 15}

DEFAULT_MAX_RETRIES = 3
DEFAULT_MIN_HEIGHT = 10


class ActionKind(str, Enum):
    RETRY_SAME = "RETRY_SAME"
    SHRINK_AND_RETRY = "SHRINK_AND_RETRY"
    SWITCH_MODE_AND_RETRY = "SWITCH_MODE_AND_RETRY"
    ABORT = "ABORT"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    new_height: Optional[int] = None
    reason: str = ""


@dataclass(frozen=True)
class AttemptContext:
    """What the classifier needs to know about the window that failed"""

    retries_for_window: int = 0
    mode_switched: bool = False
    current_height: int = 1000
    min_height: int = DEFAULT_MIN_HEIGHT
    max_retries: int = DEFAULT_MAX_RETRIES


def is_aborted(fault: Fault) -> bool:
    return fault.code in ABORTED_CODES


def is_page_too_large(fault: Fault) -> bool:
    return fault.code == PAGE_TOO_LARGE_CODE or fault.parameter == PAGE_TOO_LARGE_PARAMETER


def is_mode_mismatch(fault: Fault) -> bool:
    return (
        fault.code == NOT_IN_PIVOT_MODE_CODE
        or fault.parameter == NOT_IN_PIVOT_MODE_PARAMETER
    )


def classify(fault: Fault, context: AttemptContext) -> Action:
    """
    Decide what to do after a failed fetch

    Args:
        fault: Fault returned by the page fetch
        context: Retry count for this window, whether the mode switch was
            already spent, and the current window height

    Returns:
        Action: RETRY_SAME, SHRINK_AND_RETRY (with new_height),
            SWITCH_MODE_AND_RETRY or ABORT
    """
    if is_aborted(fault):
        if context.retries_for_window < context.max_retries:
            return Action(
                ActionKind.RETRY_SAME,
                reason=f"request aborted, retry {context.retries_for_window + 1}"
                f"/{context.max_retries}",
            )
        return Action(
            ActionKind.ABORT,
            reason=f"request aborted {context.retries_for_window} times, giving up",
        )

    if is_page_too_large(fault):
        if context.current_height <= context.min_height:
            return Action(
                ActionKind.ABORT,
                reason=f"page too large at minimum height {context.min_height}",
            )
        new_height = max(context.min_height, context.current_height // 2)
        return Action(
            ActionKind.SHRINK_AND_RETRY,
            new_height=new_height,
            reason=f"page too large, shrinking {context.current_height} -> {new_height}",
        )

    if is_mode_mismatch(fault):
        if context.mode_switched:
            return Action(
                ActionKind.ABORT,
                reason="layout mode mismatch after mode switch was already used",
            )
        return Action(
            ActionKind.SWITCH_MODE_AND_RETRY,
            reason="object is not in the assumed layout mode",
        )

    return Action(ActionKind.ABORT, reason=f"fatal fault: {fault.message or fault.code}")
