"""
Routine Import/Export API Routes

Import workflow:
1. Parse  - upload an .xlsx workbook, get back the parsed routine + warnings
2. Upload - store the (reviewed) parsed routine for a user and week

Export workflow:
- Render a routine (from the request body or from the store) as .xlsx
"""

import logging
import os
from urllib.parse import quote

from fastapi import APIRouter, Depends, File as FastAPIFile, HTTPException, Query, UploadFile
from fastapi.responses import Response
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from routine_sheets_api.api.deps import get_routine_repository, get_sheet_parser
from routine_sheets_api.auth import require_admin
from routine_sheets_api.config import settings
from routine_sheets_api.models import (
    ExportRoutineRequest,
    StoredWeekResponse,
    UploadRoutineRequest,
    UploadRoutineResponse,
    UploadStatsResponse,
    UploadSummary,
)
from routine_sheets_api.parsers.excel_parser import RoutineSheetParser
from routine_sheets_api.parsers.models import FileInfo, FileProcessResult
from routine_sheets_api.services.export_service import XLSX_MEDIA_TYPE, ExportService
from routine_sheets_api.services.routine_repository import (
    RoutineNotFoundError,
    RoutineRepository,
    UserNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/routines", tags=["Routines"], dependencies=[Depends(require_admin)])


def _xlsx_response(content: bytes, filename: str) -> Response:
    ascii_name = filename.encode("ascii", "ignore").decode("ascii") or "rutina.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": (
                f'attachment; filename="{ascii_name}"; '
                f"filename*=UTF-8''{quote(filename)}"
            )
        },
    )


# ============================================================================
# Import: parse
# ============================================================================

@router.post("/upload/parse", response_model=FileProcessResult)
async def parse_routine_file(
    file: UploadFile = FastAPIFile(...),
    parser: RoutineSheetParser = Depends(get_sheet_parser),
):
    """
    Parse an uploaded routine workbook.

    Only .xlsx files up to MAX_UPLOAD_BYTES are accepted; other files are
    rejected here and never reach the parser. Parsing problems come back in
    the result's errors/warnings with a 200 status.
    """
    filename = file.filename or "upload.xlsx"
    extension = os.path.splitext(filename)[1].lower()
    if extension != ".xlsx":
        raise HTTPException(status_code=400, detail="Solo se permiten archivos .xlsx")

    # one byte past the limit is enough to detect an oversize upload
    content = await file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(content) > settings.MAX_UPLOAD_BYTES:
        logger.warning(f"Rejected upload '{filename}': larger than {settings.MAX_UPLOAD_BYTES} bytes")
        raise HTTPException(status_code=413, detail="El archivo es demasiado grande (máximo 10MB)")

    file_info = FileInfo(
        filename=filename,
        extension=extension,
        size_bytes=len(content),
        content_type=file.content_type,
    )
    return await run_in_threadpool(parser.parse, content, file_info)


# ============================================================================
# Import: store
# ============================================================================

@router.post("/upload", response_model=UploadRoutineResponse)
async def upload_routine(
    request: UploadRoutineRequest,
    repository: RoutineRepository = Depends(get_routine_repository),
):
    """
    Store a parsed routine, replacing the user's routines for the weeks it covers.

    The replacement is atomic: on any failure the previous routines stay.
    """
    if not request.user_id or request.routine is None:
        raise HTTPException(status_code=400, detail="Usuario y rutina son requeridos")
    if not request.routine.days:
        raise HTTPException(status_code=400, detail="La rutina debe tener al menos un día")

    try:
        result = await run_in_threadpool(
            repository.replace_week, request.user_id, request.routine, request.week_number
        )
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    except IntegrityError as e:
        logger.exception(f"Integrity error storing routine: {e}")
        raise HTTPException(status_code=409, detail="Error de duplicación de datos")
    except SQLAlchemyError as e:
        logger.exception(f"Error storing routine: {e}")
        raise HTTPException(status_code=500, detail="Error interno del servidor al cargar la rutina")

    if result.replaced:
        message = (
            f"Rutina actualizada exitosamente. Se eliminaron {len(result.replaced)} rutinas "
            f"anteriores y se crearon {len(result.created)} nuevas rutinas."
        )
    else:
        message = "Rutina cargada exitosamente"

    return UploadRoutineResponse(
        message=message,
        routines=result.created,
        replaced_routines=result.replaced,
        summary=UploadSummary(
            user_id=result.user_id,
            week_number=result.week_number,
            weeks=result.weeks,
            days_created=len(request.routine.days),
            total_routines_created=len(result.created),
            total_routines_replaced=len(result.replaced),
            operation_type=result.operation_type,
        ),
    )


@router.get("/upload/stats", response_model=UploadStatsResponse)
async def upload_stats(
    user_id: int = Query(..., description="User whose routines are counted"),
    repository: RoutineRepository = Depends(get_routine_repository),
):
    """Routine counts per week and day, with the last upload time."""
    try:
        return await run_in_threadpool(repository.upload_stats, user_id)
    except SQLAlchemyError as e:
        logger.exception(f"Error reading routine stats: {e}")
        raise HTTPException(status_code=500, detail="Error al obtener estadísticas de rutinas")


# ============================================================================
# Export
# ============================================================================

@router.post("/export")
async def export_routine(request: ExportRoutineRequest):
    """Render the given routine days as an .xlsx download."""
    if not request.routine_days:
        raise HTTPException(status_code=400, detail="No hay días para exportar")

    try:
        content = await run_in_threadpool(ExportService.render_xlsx, request.week_number, request.routine_days)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _xlsx_response(content, ExportService.export_file_name(request.user_name, request.week_number))


@router.get("/export/{user_id}/{week_number}")
async def export_stored_routine(
    user_id: int,
    week_number: int,
    repository: RoutineRepository = Depends(get_routine_repository),
):
    """Render a stored week as an .xlsx download."""
    try:
        days = await run_in_threadpool(repository.require_week, user_id, week_number)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    except RoutineNotFoundError:
        raise HTTPException(status_code=404, detail="No hay rutinas para esta semana")

    user_name = await run_in_threadpool(repository.get_user_name, user_id) or "Usuario"
    try:
        content = await run_in_threadpool(ExportService.render_xlsx, week_number, days)
    except ValueError as e:
        logger.warning(f"Stored week {week_number} of user {user_id} cannot be exported: {e}")
        raise HTTPException(status_code=409, detail=str(e))
    return _xlsx_response(content, ExportService.export_file_name(user_name, week_number))


@router.get("/{user_id}/{week_number}", response_model=StoredWeekResponse)
async def get_stored_week(
    user_id: int,
    week_number: int,
    repository: RoutineRepository = Depends(get_routine_repository),
):
    """A stored week in the same shape the export accepts."""
    try:
        days = await run_in_threadpool(repository.get_week, user_id, week_number)
    except UserNotFoundError:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return StoredWeekResponse(user_id=user_id, week_number=week_number, days=days)
