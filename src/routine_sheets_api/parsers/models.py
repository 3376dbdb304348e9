"""
Parser Models

Pydantic models for the normalized routine schema shared by the sheet parser,
the sheet writer and the routine store.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator


# Canonical, ordered day names. Shared by sheet validation and UI day selectors.
DAYS = ["Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo"]


class ExerciseSet(BaseModel):
    """One prescribed set of an exercise"""
    series: int = Field(..., ge=1, description="1-based position within the exercise")
    weight: float = Field(default=0, description="Weight in kg")
    reps: str = Field(default="", description="Reps as string to preserve '8-10', 'AMRAP'")
    rest: int = Field(default=0, ge=0, description="Rest in seconds")
    progress: float = Field(default=0, description="Signed percentage adjustment applied to weight")


class Exercise(BaseModel):
    """A named movement with an optional variant"""
    name: str = Field(..., min_length=1)
    variant: str = Field(default="", description="Empty string when absent, never null")
    sets: List[ExerciseSet] = Field(default_factory=list)

    @field_validator("variant", mode="before")
    @classmethod
    def _variant_not_null(cls, value):
        return "" if value is None else value

    @property
    def key(self) -> tuple:
        return (self.name, self.variant)


class MuscleGroup(BaseModel):
    """A named container of exercises"""
    name: str = Field(..., min_length=1)
    exercises: List[Exercise] = Field(default_factory=list)


class RoutineDay(BaseModel):
    """One training day within a week"""
    day: str
    week_number: int = Field(default=1, ge=1)
    muscle_groups: List[MuscleGroup] = Field(default_factory=list)

    @field_validator("day")
    @classmethod
    def _known_day(cls, value: str) -> str:
        if value not in DAYS:
            raise ValueError(f'Día "{value}" no es válido')
        return value


class ParsedRoutine(BaseModel):
    """Import result: every valid day found in a workbook"""
    user_name: str = "Usuario"
    week_number: int = Field(default=1, ge=1)
    days: List[RoutineDay] = Field(default_factory=list)


class FileProcessResult(BaseModel):
    """Result from the routine sheet parser"""
    success: bool = False
    routine: Optional[ParsedRoutine] = None
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


class FileInfo(BaseModel):
    """Information about the file being parsed"""
    filename: str
    extension: str
    size_bytes: int = 0
    content_type: Optional[str] = None
