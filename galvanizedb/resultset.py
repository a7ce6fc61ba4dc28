"""
Typed tabular results handed from the engine to the renderer.

A ResultSet is built once per query and never modified afterwards. Each
column carries a ColumnKind decided at construction time from the type name
the engine reports; cells keep the raw value the engine returned (None for
NULL) and are only interpreted when rendered.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


class ColumnKind(Enum):
    TEXT = "Text"
    INTEGER = "Integer"
    REAL = "Real"
    UNSUPPORTED = "Unsupported"

    @classmethod
    def from_type_name(cls, type_name):
        """Maps an engine type name (TEXT, INTEGER, VARCHAR(20)...) to a kind."""
        name = (type_name or "").upper()

        # Same precedence SQLite uses for column affinity
        if "INT" in name:
            return cls.INTEGER
        if any(part in name for part in ("CHAR", "CLOB", "TEXT")):
            return cls.TEXT
        if any(part in name for part in ("REAL", "FLOA", "DOUB")):
            return cls.REAL
        return cls.UNSUPPORTED


@dataclass(frozen=True)
class ColumnDescriptor:
    name: str
    kind: ColumnKind


@dataclass(frozen=True)
class ResultSet:
    columns: Tuple[ColumnDescriptor, ...]
    rows: Tuple[Tuple[Any, ...], ...]

    def __post_init__(self):
        object.__setattr__(self, "columns", tuple(self.columns))
        object.__setattr__(self, "rows", tuple(tuple(row) for row in self.rows))

        width = len(self.columns)
        for index, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(
                    f"row {index} has {len(row)} values, expected {width}"
                )

    @property
    def headers(self):
        return [column.name for column in self.columns]


@dataclass(frozen=True)
class RowOutcome:
    """Result of a statement that does not return rows."""

    rowcount: int = -1
