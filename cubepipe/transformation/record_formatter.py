"""
Record Formatter - Transform Layer

Maps an extraction result (raw matrix + column descriptors) into a
header/row record set ready for export. Pure function, no I/O.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..extract.hypercube_extractor import ExtractionMetadata, ExtractionResult
from ..extract.models import CellState

logger = logging.getLogger(__name__)

DIMENSION = "dimension"
MEASURE = "measure"


@dataclass(frozen=True)
class Header:
    name: str
    column_type: str
    index: int


@dataclass(frozen=True)
class RecordField:
    text: str
    number: Optional[float]
    state: CellState


@dataclass(frozen=True)
class Record:
    index: int
    fields: Dict[str, RecordField]


@dataclass(frozen=True)
class RecordSummary:
    total_rows: int
    total_columns: int
    dimension_count: int
    measure_count: int


@dataclass(frozen=True)
class FormattedRecordSet:
    headers: Tuple[Header, ...]
    rows: Tuple[Record, ...]
    summary: RecordSummary
    metadata: Optional[ExtractionMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        """Structural dump for JSON export"""
        return {
            "headers": [
                {"name": h.name, "type": h.column_type, "index": h.index}
                for h in self.headers
            ],
            "rows": [
                {
                    "index": record.index,
                    "data": {
                        name: {
                            "text": f.text,
                            "number": f.number,
                            "state": f.state.value,
                        }
                        for name, f in record.fields.items()
                    },
                }
                for record in self.rows
            ],
            "summary": {
                "totalRows": self.summary.total_rows,
                "totalColumns": self.summary.total_columns,
                "dimensions": self.summary.dimension_count,
                "measures": self.summary.measure_count,
            },
            "metadata": self.metadata.to_dict() if self.metadata else None,
        }

    def header_names(self, column_type: Optional[str] = None) -> List[str]:
        return [
            h.name
            for h in self.headers
            if column_type is None or h.column_type == column_type
        ]


def build_headers(metadata: ExtractionMetadata) -> Tuple[Header, ...]:
    """
    Dimension headers first, then measure headers, each with its position

    Repeated titles get " (2)", " (3)"... so every column keeps its own key;
    a suffix that collides with a name already in use is skipped.
    """
    columns = [(d.display_name, DIMENSION) for d in metadata.dimension_descriptors]
    columns += [(m.display_name, MEASURE) for m in metadata.measure_descriptors]

    used = set()
    headers = []
    for index, (title, column_type) in enumerate(columns):
        name = title
        suffix = 1
        while name in used:
            suffix += 1
            name = f"{title} ({suffix})"
        used.add(name)
        headers.append(Header(name=name, column_type=column_type, index=index))
    return tuple(headers)


def format_records(result: ExtractionResult) -> FormattedRecordSet:
    """
    Format an extraction result into a record set

    Args:
        result: Extraction result from the hypercube extractor

    Returns:
        FormattedRecordSet: Headers, rows and computed summary
    """
    headers = build_headers(result.metadata)

    records = []
    for row_index, row in enumerate(result.assembled_rows):
        # zip stops at the shorter side: short rows omit trailing fields
        fields = {
            header.name: RecordField(
                text=cell.display_text,
                number=cell.numeric_value,
                state=cell.state,
            )
            for header, cell in zip(headers, row)
        }
        records.append(Record(index=row_index, fields=fields))

    summary = RecordSummary(
        total_rows=len(records),
        total_columns=len(headers),
        dimension_count=sum(1 for h in headers if h.column_type == DIMENSION),
        measure_count=sum(1 for h in headers if h.column_type == MEASURE),
    )

    logger.info(
        f"Formatted {summary.total_rows} rows x {summary.total_columns} columns "
        f"({summary.dimension_count} dimensions, {summary.measure_count} measures)"
    )
    return FormattedRecordSet(
        headers=headers,
        rows=tuple(records),
        summary=summary,
        metadata=result.metadata,
    )
