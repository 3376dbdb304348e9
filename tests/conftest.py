"""
Test fixtures for routine-sheets-api.

Provides an in-memory routine store, an authenticated TestClient and a
workbook builder so parser tests never touch the filesystem.
"""

import io
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import pytest
from fastapi.testclient import TestClient
from openpyxl import Workbook
from sqlalchemy.orm import sessionmaker

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Make src/ importable so tests can do `import routine_sheets_api...`
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from routine_sheets_api.api.deps import get_routine_repository
from routine_sheets_api.auth import get_current_user, require_admin
from routine_sheets_api.database import make_engine
from routine_sheets_api.main import app
from routine_sheets_api.services.routine_repository import RoutineRepository


# ---------------------------------------------------------------------------
# Auth Mock
# ---------------------------------------------------------------------------


TEST_ADMIN = {"user_id": "test-admin", "is_moderator": True}


async def mock_get_current_user() -> dict:
    """Mock auth dependency that returns a moderator."""
    return TEST_ADMIN


async def mock_require_admin() -> dict:
    return TEST_ADMIN


# ---------------------------------------------------------------------------
# Routine Store
# ---------------------------------------------------------------------------


@pytest.fixture
def repository():
    """Routine repository over a fresh in-memory SQLite database."""
    engine = make_engine("sqlite://")
    yield RoutineRepository(sessionmaker(bind=engine, expire_on_commit=False))
    engine.dispose()


@pytest.fixture
def user_id(repository) -> int:
    return repository.add_user("jperez", name="Juan Perez", email="juan@example.com")


# ---------------------------------------------------------------------------
# Test Client
# ---------------------------------------------------------------------------


@pytest.fixture
def client(repository):
    """FastAPI TestClient with auth and the routine store overridden."""
    app.dependency_overrides[get_current_user] = mock_get_current_user
    app.dependency_overrides[require_admin] = mock_require_admin
    app.dependency_overrides[get_routine_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Workbooks
# ---------------------------------------------------------------------------


@pytest.fixture
def make_workbook():
    """
    Build .xlsx bytes in memory.

    sheets maps a sheet title to its data rows (row 2 onwards); a header row
    is written automatically. `heights` and `merges` are keyed by sheet title,
    merges given as ranges like "B2:B3".
    """

    def _build(
        sheets: Dict[str, List[Sequence]],
        heights: Optional[Dict[str, Dict[int, float]]] = None,
        merges: Optional[Dict[str, List[str]]] = None,
    ) -> bytes:
        wb = Workbook()
        wb.remove(wb.active)
        for title, rows in sheets.items():
            ws = wb.create_sheet(title=title)
            ws.append([
                "Grupo Muscular", "Ejercicio", "Variante", "Series",
                "Peso (kg)", "Repeticiones", "Descanso (s)", "Progresión",
            ])
            for row in rows:
                ws.append(list(row))
            for row, height in (heights or {}).get(title, {}).items():
                ws.row_dimensions[row].height = height
            for cell_range in (merges or {}).get(title, []):
                ws.merge_cells(cell_range)
        buffer = io.BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    return _build


@pytest.fixture
def martes_rows() -> List[Sequence]:
    """Two sets of one exercise, group/exercise/variant only on the first row."""
    return [
        ["Pecho", "Press Banca", "Plano", 1, 80, "10", 90, 0],
        [None, None, None, 2, 82.5, "8", 90, 5],
    ]
