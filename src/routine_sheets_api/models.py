"""Request and response models for the routine API."""
from pydantic import BaseModel, Field, model_validator
from typing import List, Optional

from routine_sheets_api.parsers.models import ParsedRoutine, RoutineDay

# Progress values the sheet writer accepts, in percent
PROGRESS_MIN = -90
PROGRESS_MAX = 90


class UploadRoutineRequest(BaseModel):
    """Store a parsed routine for a user."""
    user_id: Optional[int] = None
    routine: Optional[ParsedRoutine] = None
    # Stores every day under this week instead of the week read from its sheet
    week_number: Optional[int] = Field(default=None, ge=1)


class CreatedRoutine(BaseModel):
    id: int
    day: str
    week_number: int


class ReplacedRoutine(BaseModel):
    id: int
    day: str
    week_number: Optional[int] = None


class UploadSummary(BaseModel):
    user_id: int
    week_number: int
    weeks: List[int] = Field(default_factory=list)
    days_created: int
    total_routines_created: int
    total_routines_replaced: int
    operation_type: str  # 'create' or 'replace'


class UploadRoutineResponse(BaseModel):
    message: str
    routines: List[CreatedRoutine] = Field(default_factory=list)
    replaced_routines: List[ReplacedRoutine] = Field(default_factory=list)
    summary: UploadSummary


class UploadStatsEntry(BaseModel):
    week_number: int
    day_name: str
    routine_count: int
    last_upload: Optional[str] = None


class UploadStatsResponse(BaseModel):
    user_id: int
    total_routines: int
    routines_by_week_and_day: List[UploadStatsEntry] = Field(default_factory=list)


class ExportRoutineRequest(BaseModel):
    """Sheet writer input."""
    week_number: int = Field(..., ge=1)
    routine_days: List[RoutineDay] = Field(default_factory=list)
    user_name: str = "Usuario"

    @model_validator(mode="after")
    def _progress_in_range(self):
        for day in self.routine_days:
            for group in day.muscle_groups:
                for exercise in group.exercises:
                    for exercise_set in exercise.sets:
                        if not PROGRESS_MIN <= exercise_set.progress <= PROGRESS_MAX:
                            raise ValueError(
                                f"Progresión fuera de rango ({PROGRESS_MIN} a {PROGRESS_MAX}): "
                                f"{exercise.name} serie {exercise_set.series}"
                            )
        return self


class StoredWeekResponse(BaseModel):
    user_id: int
    week_number: int
    days: List[RoutineDay] = Field(default_factory=list)


class GroupColorResponse(BaseModel):
    name: str
    token: str
    fill: str
    badge: str


class DaysResponse(BaseModel):
    days: List[str]
