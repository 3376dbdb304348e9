"""
FastAPI dependency providers.

Testing:
    app.dependency_overrides[get_routine_repository] = lambda: RoutineRepository(test_factory)
"""
from routine_sheets_api.database import get_session_factory
from routine_sheets_api.parsers.excel_parser import RoutineSheetParser
from routine_sheets_api.services.routine_repository import RoutineRepository


def get_routine_repository() -> RoutineRepository:
    """Repository bound to the configured database (engine is created once)."""
    return RoutineRepository(get_session_factory())


def get_sheet_parser() -> RoutineSheetParser:
    """A fresh parser per request; parsers keep per-call errors/warnings."""
    return RoutineSheetParser()
