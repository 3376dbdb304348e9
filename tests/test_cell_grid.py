"""Tests for merged-cell aware worksheet access."""
from datetime import datetime

from openpyxl import Workbook

from routine_sheets_api.parsers.cell_grid import CellGrid, to_text


def _grid():
    wb = Workbook()
    ws = wb.active
    ws.title = "Lunes - Semana 1"
    ws["A1"] = "Pecho"
    ws["B1"] = "Press Banca"
    ws["D1"] = 3.0
    ws["E1"] = datetime(2024, 1, 15, 8, 30)
    ws["A4"] = "   "
    ws.merge_cells("A1:A3")
    ws.row_dimensions[2].height = 5
    return CellGrid(ws)


def test_title():
    assert _grid().title == "Lunes - Semana 1"


def test_merged_cells_resolve_to_master():
    grid = _grid()
    assert grid.master_of(3, 1) == (1, 1)
    assert grid.master_of(1, 1) is None
    assert grid.value_at(3, 1) == "Pecho"
    assert grid.raw_value(3, 1) is None


def test_unmerged_blank_cell_has_no_fallback():
    grid = _grid()
    assert grid.value_at(2, 2) is None
    assert grid.text_at(2, 2) == ""


def test_text_rendering():
    grid = _grid()
    assert grid.text_at(1, 4) == "3"
    assert grid.text_at(1, 5) == "2024-01-15T08:30:00"


def test_row_height():
    grid = _grid()
    assert grid.row_height(2) == 5
    assert grid.row_height(10) is None


def test_is_row_empty():
    grid = _grid()
    assert not grid.is_row_empty(1)
    # covered merge cells hold no value of their own
    assert grid.is_row_empty(2)
    assert grid.is_row_empty(4)


def test_to_text():
    assert to_text(None) == ""
    assert to_text(True) == "TRUE"
    assert to_text(82.5) == "82.5"
    assert to_text(10.0) == "10"
    assert to_text(" 8-10 ") == "8-10"
