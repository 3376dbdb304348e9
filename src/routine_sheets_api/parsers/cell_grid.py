"""
Cell Grid

Read-only view over an openpyxl worksheet that resolves merged regions:
a cell inside a merge that carries no value of its own reads as the value of
the merge's top-left (master) cell.
"""

from datetime import date, datetime, time
from typing import Dict, Optional, Tuple, Union

from openpyxl.worksheet.worksheet import Worksheet

Primitive = Union[str, int, float, bool]


class CellGrid:
    """Typed cell access for one worksheet"""

    def __init__(self, ws: Worksheet):
        self._ws = ws
        self._masters: Dict[Tuple[int, int], Tuple[int, int]] = {}
        for merged in ws.merged_cells.ranges:
            for row in range(merged.min_row, merged.max_row + 1):
                for col in range(merged.min_col, merged.max_col + 1):
                    if (row, col) != (merged.min_row, merged.min_col):
                        self._masters[(row, col)] = (merged.min_row, merged.min_col)

    @property
    def title(self) -> str:
        return self._ws.title

    @property
    def max_row(self) -> int:
        return self._ws.max_row

    @property
    def max_column(self) -> int:
        return self._ws.max_column

    def raw_value(self, row: int, col: int) -> Optional[Primitive]:
        """Value stored in the cell itself, ignoring merges"""
        return _primitive(self._ws.cell(row=row, column=col).value)

    def master_of(self, row: int, col: int) -> Optional[Tuple[int, int]]:
        """Coordinates of the merge master covering (row, col), if any"""
        return self._masters.get((row, col))

    def value_at(self, row: int, col: int) -> Optional[Primitive]:
        """Cell value, falling back to the merge master when the cell is empty"""
        value = self.raw_value(row, col)
        if not _is_blank(value):
            return value
        master = self.master_of(row, col)
        if master is not None:
            value = self.raw_value(*master)
            if not _is_blank(value):
                return value
        return None

    def text_at(self, row: int, col: int) -> str:
        """Resolved cell value as trimmed text ('' for empty cells)"""
        return to_text(self.value_at(row, col))

    def row_height(self, row: int) -> Optional[float]:
        if row not in self._ws.row_dimensions:
            return None
        return self._ws.row_dimensions[row].height

    def is_row_empty(self, row: int) -> bool:
        """True when no cell in the row holds a value of its own"""
        return all(
            _is_blank(self.raw_value(row, col))
            for col in range(1, self.max_column + 1)
        )


def to_text(value: Optional[Primitive]) -> str:
    """Render a cell value the way it reads in the sheet"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def _primitive(value) -> Optional[Primitive]:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


def _is_blank(value: Optional[Primitive]) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")
