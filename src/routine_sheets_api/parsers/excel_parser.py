"""
Excel Parser

Parses routine workbooks (.xlsx) where:
- Each sheet is one training day, named "<Day> - Semana <n>"
- Row 1 is the header, data starts on row 2
- Columns: Grupo Muscular, Ejercicio, Variante, Series, Peso (kg),
  Repeticiones, Descanso (s), Progresión
- Group / exercise / variant cells are usually merged or left blank on the
  rows that follow their first set
"""

import io
import logging
from typing import List, Optional

from openpyxl import load_workbook

from .base import BaseParser
from .cell_grid import CellGrid
from .models import FileInfo, FileProcessResult, ParsedRoutine, RoutineDay
from .row_state import CarryForward, SheetAccumulator

logger = logging.getLogger(__name__)

# 1-based column positions
COL_GROUP = 1
COL_EXERCISE = 2
COL_VARIANT = 3
COL_SERIES = 4
COL_WEIGHT = 5
COL_REPS = 6
COL_REST = 7
COL_PROGRESS = 8

# Rows this short are visual separators, not data
SPACER_ROW_HEIGHT = 5

NO_ROUTINES_ERROR = "No se encontraron rutinas válidas en el archivo"


class RoutineSheetParser(BaseParser):
    """Parser for routine workbooks (.xlsx)"""

    def can_parse(self, file_info: FileInfo) -> bool:
        """Check if this parser can handle the file"""
        return file_info.extension.lower() == ".xlsx"

    def parse(self, content: bytes, file_info: FileInfo) -> FileProcessResult:
        """Parse a workbook into a FileProcessResult"""
        self.errors = []
        self.warnings = []

        try:
            wb = load_workbook(io.BytesIO(content), data_only=True)

            user_name, week_number = self.routine_meta_from_filename(file_info.filename)

            days: List[RoutineDay] = []
            for ws in wb.worksheets:
                day = self._parse_sheet(CellGrid(ws), week_number)
                if day is not None:
                    days.append(day)

            if not days:
                self.add_error(NO_ROUTINES_ERROR)
                return self._result(success=False)

            logger.info(
                f"Parsed {len(days)} day(s) from '{file_info.filename}' "
                f"({len(self.warnings)} warning(s))"
            )
            return self._result(
                success=True,
                routine=ParsedRoutine(user_name=user_name, week_number=week_number, days=days),
            )

        except Exception as e:
            logger.exception(f"Failed to parse Excel file: {e}")
            self.errors.append(f"Error al procesar el archivo: {str(e) or type(e).__name__}")
            return self._result(success=False)

    def _parse_sheet(self, grid: CellGrid, default_week: int) -> Optional[RoutineDay]:
        """Parse one sheet into a RoutineDay, None when it yields nothing"""
        parsed_name = self.parse_sheet_name(grid.title)
        if parsed_name is None:
            return None

        day, week = parsed_name
        if not self.is_valid_day(day):
            return None

        carry = CarryForward()
        accumulator = SheetAccumulator()

        for row in range(2, grid.max_row + 1):
            height = grid.row_height(row)
            if (height is not None and height <= SPACER_ROW_HEIGHT) or grid.is_row_empty(row):
                continue

            group, exercise, variant = carry.resolve(
                grid.text_at(row, COL_GROUP),
                grid.text_at(row, COL_EXERCISE),
                grid.text_at(row, COL_VARIANT),
            )

            if self.parse_int(grid.text_at(row, COL_SERIES)) <= 0:
                continue

            accumulator.add_set(
                group,
                exercise,
                variant,
                weight=self.parse_float(grid.text_at(row, COL_WEIGHT)),
                reps=grid.text_at(row, COL_REPS),
                rest=max(self.parse_int(grid.text_at(row, COL_REST)), 0),
                progress=self.parse_float(grid.text_at(row, COL_PROGRESS)),
            )

        muscle_groups = accumulator.finish()
        if not muscle_groups:
            logger.debug(f"Sheet '{grid.title}' has no complete exercise rows")
            return None

        return RoutineDay(day=day, week_number=week or default_week, muscle_groups=muscle_groups)

    def _result(self, success: bool, routine: Optional[ParsedRoutine] = None) -> FileProcessResult:
        return FileProcessResult(
            success=success,
            routine=routine,
            errors=list(self.errors),
            warnings=list(self.warnings),
        )
