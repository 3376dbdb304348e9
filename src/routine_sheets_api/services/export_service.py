"""Export service for rendering routines as styled spreadsheets."""
import io
import logging
import re
from collections import Counter
from typing import Sequence

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from routine_sheets_api.parsers.models import Exercise, ExerciseSet, MuscleGroup, RoutineDay
from routine_sheets_api.services.group_colors import color_for

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# (header, width)
COLUMNS = [
    ("Grupo Muscular", 25),
    ("Ejercicio", 30),
    ("Variante", 25),
    ("Series", 10),
    ("Peso (kg)", 12),
    ("Repeticiones", 15),
    ("Descanso (s)", 12),
    ("Progresión", 20),
]
COL_GROUP, COL_EXERCISE, COL_VARIANT, COL_SERIES, COL_WEIGHT, COL_REPS, COL_REST, COL_PROGRESS = range(1, 9)

HEADER_HEIGHT = 20
SPACER_HEIGHT = 5


def fill(hex): return PatternFill("solid", fgColor=hex)
def font(hex, bold=True): return Font(bold=bold, color=hex)


CENTER = Alignment(horizontal="center", vertical="center")

THIN_GRAY = Side(style="thin", color="BDBDBD")
THIN_BLACK = Side(style="thin", color="000000")
THICK_BLACK = Side(style="thick", color="000000")

HEADER_FILL = fill("228B22")
HEADER_FONT = font("FFFFFF")

# column -> (fill, font) for the per-set cells
SET_STYLES = {
    COL_SERIES: (fill("B3E5FC"), font("01579B")),
    COL_WEIGHT: (fill("D6D6D6"), font("424242")),
    COL_REPS: (fill("FFCC80"), font("EF6C00")),
    COL_REST: (fill("E1BEE7"), font("6A1B9A")),
}
PROGRESS_FILL = fill("FFFFFF")
PROGRESS_UP = font("81C784")
PROGRESS_DOWN = font("E57373")
PROGRESS_FLAT = font("000000")


class ExportService:
    """Service for exporting routines to spreadsheets."""

    @staticmethod
    def export_file_name(user_name: str, week_number: int) -> str:
        """Suggested download name: Rutina_<user>_Semana_<n>.xlsx"""
        safe_user = re.sub(r"\s+", "_", (user_name or "").strip())
        return f"Rutina_{safe_user}_Semana_{week_number}.xlsx"

    @staticmethod
    def render_xlsx(week_number: int, routine_days: Sequence[RoutineDay]) -> bytes:
        """
        Render routine days as workbook bytes.

        Args:
            week_number: Week shown in every sheet title
            routine_days: Days in output order, one sheet each

        Returns:
            .xlsx file bytes

        Raises:
            ValueError: If there are no days to export or a day repeats
        """
        wb = RoutineSheetWriter.build_workbook(week_number, routine_days)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()


class RoutineSheetWriter:
    """Builds one styled worksheet per routine day."""

    @staticmethod
    def build_workbook(week_number: int, routine_days: Sequence[RoutineDay]) -> Workbook:
        if not routine_days:
            raise ValueError("No hay días para exportar")

        counts = Counter(day.day for day in routine_days)
        repeated = [name for name, count in counts.items() if count > 1]
        if repeated:
            raise ValueError(f"Días repetidos en la rutina: {', '.join(repeated)}")

        wb = Workbook()
        wb.remove(wb.active)
        for day in routine_days:
            ws = wb.create_sheet(title=f"{day.day} - Semana {week_number}")
            RoutineSheetWriter.write_day(ws, day)

        logger.info(f"Built routine workbook for week {week_number} with {len(routine_days)} sheet(s)")
        return wb

    @staticmethod
    def write_day(ws: Worksheet, day: RoutineDay) -> int:
        """Write one day into an empty worksheet, returns the last used row."""
        RoutineSheetWriter._write_header(ws)

        row = 2
        for group in day.muscle_groups:
            row = RoutineSheetWriter._write_group(ws, group, row)

        last_row = row - 1
        RoutineSheetWriter._outline(ws, last_row)
        return last_row

    @staticmethod
    def _write_header(ws: Worksheet):
        for col, (header, width) in enumerate(COLUMNS, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = CENTER
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.row_dimensions[1].height = HEADER_HEIGHT
        ws.freeze_panes = "A2"

    @staticmethod
    def _write_group(ws: Worksheet, group: MuscleGroup, start_row: int) -> int:
        """Write a muscle group block starting at start_row, returns the next free row."""
        exercises = [e for e in group.exercises if e.sets]
        if not exercises:
            return start_row

        row = start_row
        for index, exercise in enumerate(exercises):
            row = RoutineSheetWriter._write_exercise(ws, exercise, row)
            if index < len(exercises) - 1:
                ws.row_dimensions[row].height = SPACER_HEIGHT
                for col in range(COL_EXERCISE, len(COLUMNS) + 1):
                    ws.cell(row=row, column=col).border = Border(bottom=THICK_BLACK)
                row += 1
        end_row = row - 1

        cell = _write_value(ws, start_row, COL_GROUP, group.name)
        cell.font = Font(bold=True)
        cell.alignment = CENTER
        cell.fill = fill(color_for(group.name).fill)
        cell.border = Border(left=THIN_BLACK, right=THIN_BLACK, top=THIN_BLACK, bottom=THIN_BLACK)
        if end_row > start_row:
            ws.merge_cells(start_row=start_row, start_column=COL_GROUP, end_row=end_row, end_column=COL_GROUP)
        return row

    @staticmethod
    def _write_exercise(ws: Worksheet, exercise: Exercise, start_row: int) -> int:
        """Write one row per set, returns the next free row."""
        for col, value in ((COL_EXERCISE, exercise.name), (COL_VARIANT, exercise.variant)):
            cell = _write_value(ws, start_row, col, value)
            cell.font = Font(bold=True)
            cell.alignment = CENTER

        for offset, exercise_set in enumerate(exercise.sets):
            RoutineSheetWriter._write_set(ws, exercise_set, start_row + offset)

        end_row = start_row + len(exercise.sets) - 1
        if end_row > start_row:
            for col in (COL_EXERCISE, COL_VARIANT):
                ws.merge_cells(start_row=start_row, start_column=col, end_row=end_row, end_column=col)

        # merging resets the covered cells, so borders go on afterwards
        for row in range(start_row, end_row + 1):
            bottom = THICK_BLACK if row == end_row else THIN_GRAY
            for col in range(COL_EXERCISE, len(COLUMNS) + 1):
                ws.cell(row=row, column=col).border = Border(
                    left=THIN_GRAY, right=THIN_GRAY, top=THIN_GRAY, bottom=bottom
                )
        return end_row + 1

    @staticmethod
    def _write_set(ws: Worksheet, exercise_set: ExerciseSet, row: int):
        values = {
            COL_SERIES: exercise_set.series,
            COL_WEIGHT: exercise_set.weight,
            COL_REPS: exercise_set.reps,
            COL_REST: exercise_set.rest,
        }
        for col, value in values.items():
            cell = _write_value(ws, row, col, value)
            cell.fill, cell.font = SET_STYLES[col]
            cell.alignment = CENTER

        cell = ws.cell(row=row, column=COL_PROGRESS, value=exercise_set.progress)
        cell.fill = PROGRESS_FILL
        if exercise_set.progress > 0:
            cell.font = PROGRESS_UP
        elif exercise_set.progress < 0:
            cell.font = PROGRESS_DOWN
        else:
            cell.font = PROGRESS_FLAT
        cell.alignment = CENTER

    @staticmethod
    def _outline(ws: Worksheet, last_row: int):
        """Thick border around rows 1..last_row, keeping the inner edges."""
        last_col = len(COLUMNS)
        for col in range(1, last_col + 1):
            _add_sides(ws.cell(row=1, column=col), top=THICK_BLACK)
            _add_sides(ws.cell(row=last_row, column=col), bottom=THICK_BLACK)
        for row in range(1, last_row + 1):
            _add_sides(ws.cell(row=row, column=1), left=THICK_BLACK)
            _add_sides(ws.cell(row=row, column=last_col), right=THICK_BLACK)


def _add_sides(cell, **sides: Side):
    border = cell.border
    cell.border = Border(
        left=sides.get("left", border.left),
        right=sides.get("right", border.right),
        top=sides.get("top", border.top),
        bottom=sides.get("bottom", border.bottom),
    )


def _write_value(ws: Worksheet, row: int, col: int, value):
    """Write a cell value; text is always stored as a string, never as a formula."""
    cell = ws.cell(row=row, column=col, value=value)
    if isinstance(value, str):
        cell.data_type = "s"
    return cell
