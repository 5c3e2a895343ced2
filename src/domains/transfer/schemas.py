"""Import/export schemas.

Field names at this boundary use snake_case; the row schemas validate one
input row at a time so that a bad row becomes a row error, not a failed
request.
"""
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

TransferFormat = Literal["json", "csv"]
TransferType = Literal["all", "programs", "workouts", "exercises"]
CatalogLayout = Literal["bodybuilding", "fitnessprogramer"]


# Row schemas (one per entity)

class _Row(BaseModel):
    model_config = ConfigDict(extra="ignore")

    @field_validator("name", mode="before", check_fields=False)
    @classmethod
    def _clean_name(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("name must not be empty")
        return v


class ProgramRow(_Row):
    """Program row from a document or a PROGRAMS section."""

    id: int | None = None
    name: str = Field(max_length=255)
    description: str | None = None
    is_primary: bool | None = None
    order_index: int | None = None


class WorkoutRow(_Row):
    """Workout row; ``program_id`` is a local or store program ID."""

    id: int | None = None
    program_id: int
    name: str = Field(max_length=255)
    day_number: int | None = None
    order_index: int | None = None


class ExerciseRow(_Row):
    """Exercise row; both parent IDs are optional (pool exercise)."""

    id: int | None = None
    program_id: int | None = None
    workout_id: int | None = None
    name: str = Field(max_length=255)
    sets: int = Field(ge=1)
    reps: int = Field(ge=1)
    duration: str | None = Field(None, max_length=50)
    description: str | None = None
    order_index: int | None = None
    image_url: str | None = None
    muscle_group: str | None = Field(None, max_length=100)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration_as_text(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v


class ProgramDayRow(_Row):
    """Day inside a nested single-program document."""

    name: str = Field(max_length=255)
    day_number: int | None = None
    order_index: int | None = None


# Import

class ImportRequest(BaseModel):
    """Whole-hierarchy import request."""

    data: Any = None
    format: TransferFormat = "json"
    type: TransferType = "all"


class ImportedCounts(BaseModel):
    programs: int = 0
    workouts: int = 0
    exercises: int = 0


class ImportResult(BaseModel):
    """Summary of one import run, built row by row."""

    imported: ImportedCounts = Field(default_factory=ImportedCounts)
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)


class ImportResponse(BaseModel):
    success: bool = True
    imported: ImportedCounts
    skipped: int = 0
    errors: list[str] | None = None
    message: str


class TransferErrorResponse(BaseModel):
    success: bool = False
    error: str
    details: str | None = None


# Catalog import

class CatalogImportRequest(BaseModel):
    """Third-party exercise catalog upload."""

    csv_data: str | None = None
    program_id: int | None = None


class CatalogImportResult(BaseModel):
    imported: int = 0
    skipped: int = 0
    errors: list[str] = Field(default_factory=list)


class CatalogImportResponse(BaseModel):
    success: bool = True
    imported: int
    skipped: int
    errors: list[str] | None = None
    message: str


# Single-program transfer

class ProgramImportRequest(BaseModel):
    """Nested single-program document, as produced by the program export."""

    program_data: dict[str, Any] | None = None


class DayExerciseDocument(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sets: int
    reps: int
    duration: str | None = None
    description: str | None = None
    image_url: str | None = None
    muscle_group: str | None = None
    order_index: int


class DayDocument(BaseModel):
    id: int
    name: str
    day_number: int | None = None
    order_index: int
    exercises: list[DayExerciseDocument] = Field(default_factory=list)


class ProgramDocument(BaseModel):
    id: int
    name: str
    description: str | None = None
    is_primary: bool
    order_index: int
    created_at: datetime
    days: list[DayDocument] = Field(default_factory=list)


class ProgramImportResponse(BaseModel):
    program: ProgramDocument
    errors: list[str] | None = None
