"""
Field Selections - Extract Layer

Restricts dimension fields to a single value each before a cube is read.
The engine-side work (finding the value, selecting it) belongs to the
SelectionService collaborator; this module drives it in order and checks
the result.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

logger = logging.getLogger(__name__)

# Time for the engine to recompute after each selection
SETTLE_DELAY = 0.2


class SelectionError(Exception):
    """A field selection could not be applied"""


@dataclass(frozen=True)
class FieldSelection:
    field_name: str
    value: str

    @classmethod
    def parse(cls, text: str) -> "FieldSelection":
        """Parse a "Field=Value" pair"""
        field_name, sep, value = text.partition("=")
        if not sep or not field_name.strip():
            raise ValueError(f"Expected Field=Value, got {text!r}")
        return cls(field_name=field_name.strip(), value=value.strip())


def parse_selections(text: str) -> List[FieldSelection]:
    """Parse "Field=Value;Field2=Value2" into selections"""
    return [FieldSelection.parse(part) for part in text.split(";") if part.strip()]


class SelectionService(ABC):
    @abstractmethod
    def apply_selection(self, field_name: str, value: str) -> bool:
        """Make value the only active selection on field_name"""
        raise NotImplementedError

    @abstractmethod
    def clear_all(self) -> None:
        raise NotImplementedError

    @abstractmethod
    def selected_values(self, field_name: str) -> List[str]:
        raise NotImplementedError


def apply_selections(
    service: SelectionService,
    selections: Sequence[FieldSelection],
    settle_delay: float = SETTLE_DELAY,
) -> bool:
    """
    Clear existing selections and apply each selection in order

    Args:
        service: Selection service collaborator
        selections: Field/value pairs to select
        settle_delay: Seconds to wait after each selection

    Returns:
        bool: True when every selection was applied

    Raises:
        SelectionError: When a selection is rejected or fails
    """
    logger.info(f"Making {len(selections)} field selections")
    logger.info("Clearing all existing selections...")
    service.clear_all()

    for selection in selections:
        logger.info(f"Selecting {selection.field_name} = {selection.value}")
        try:
            success = service.apply_selection(selection.field_name, selection.value)
        except Exception as e:
            raise SelectionError(
                f"Failed to select {selection.field_name} = {selection.value}: {e}"
            ) from e

        if not success:
            raise SelectionError(
                f"Selection failed for {selection.field_name} = {selection.value}"
            )

        if settle_delay:
            time.sleep(settle_delay)

    logger.info("✅ All selections completed successfully")
    return True


def verify_selections(
    service: SelectionService, selections: Iterable[FieldSelection]
) -> Dict[str, bool]:
    """
    Check that each field has exactly its target value selected

    Verification is diagnostic: problems are logged, never raised.

    Returns:
        Dict: field name -> True when the selection state is as expected
    """
    results = {}
    for selection in selections:
        try:
            selected = service.selected_values(selection.field_name)
        except Exception as e:
            logger.warning(f"⚠️ Could not verify field {selection.field_name}: {e}")
            results[selection.field_name] = False
            continue

        ok = list(selected) == [selection.value]
        results[selection.field_name] = ok
        if ok:
            logger.info(f"✅ Correct selection: {selection.field_name} = {selection.value}")
        elif not selected:
            logger.warning(f"⚠️ No values selected in field {selection.field_name}")
        else:
            logger.warning(
                f"⚠️ Unexpected selection state for {selection.field_name}: {selected}"
            )
    return results
