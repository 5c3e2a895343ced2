"""Export serializer.

Reads the hierarchy in display order and renders it as a flat document
(the same shape the importer accepts) or as sectioned delimited text whose
quoting matches the tokenizer exactly, so an export can be imported back.
"""
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.programs.models import Exercise, Program, Workout
from src.domains.programs.service import ProgramService
from src.domains.transfer.schemas import (
    DayDocument,
    DayExerciseDocument,
    ProgramDocument,
    TransferType,
)
from src.domains.transfer.sections import SECTION_COLUMNS, Section
from src.domains.transfer.tokenizer import format_row

logger = structlog.get_logger(__name__)

_SECTION_KEYS = (
    (Section.PROGRAMS, "programs"),
    (Section.WORKOUTS, "workouts"),
    (Section.EXERCISES, "exercises"),
)


def _program_row(program: Program) -> dict[str, Any]:
    return {
        "id": program.id,
        "name": program.name,
        "description": program.description,
        "is_primary": program.is_primary,
        "order_index": program.order_index,
        "created_at": program.created_at.isoformat() if program.created_at else None,
    }


def _workout_row(workout: Workout) -> dict[str, Any]:
    return {
        "id": workout.id,
        "program_id": workout.program_id,
        "name": workout.name,
        "day_number": workout.day_number,
        "order_index": workout.order_index,
        "created_at": workout.created_at.isoformat() if workout.created_at else None,
    }


def _exercise_row(exercise: Exercise) -> dict[str, Any]:
    return {
        "id": exercise.id,
        "program_id": exercise.program_id,
        "workout_id": exercise.workout_id,
        "name": exercise.name,
        "sets": exercise.sets,
        "reps": exercise.reps,
        "duration": exercise.duration,
        "description": exercise.description,
        "order_index": exercise.order_index,
        "image_url": exercise.image_url,
        "muscle_group": exercise.muscle_group,
    }


def render_csv(document: dict[str, list[dict[str, Any]]]) -> str:
    """Render a flat document as sectioned text, one section per present key."""
    blocks: list[str] = []
    for section, key in _SECTION_KEYS:
        if key not in document:
            continue
        columns = SECTION_COLUMNS[section]
        lines = [section.value, ",".join(columns)]
        lines.extend(format_row(row.get(c) for c in columns) for row in document[key])
        blocks.append("\n".join(lines) + "\n")
    return "\n".join(blocks)


def export_filename(fmt: str, now: datetime | None = None) -> str:
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y%m%d-%H%M%S")
    return f"fitness-data-{stamp}.{fmt}"


class ExportService:
    """Service for reading the hierarchy out of the store."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.store = ProgramService(db)

    async def export_data(self, export_type: TransferType = "all") -> dict[str, list[dict[str, Any]]]:
        """Build the flat document: programs, then workouts, then exercises.

        Workouts follow their program's order; exercises follow their workout,
        then program-level exercises, then pool exercises last.
        """
        programs = await self.store.list_programs()
        program_rank = {p.id: i for i, p in enumerate(programs)}
        document: dict[str, list[dict[str, Any]]] = {}

        if export_type in ("all", "programs"):
            document["programs"] = [_program_row(p) for p in programs]

        workouts: list[Workout] = []
        if export_type in ("all", "workouts", "exercises"):
            workouts = sorted(
                await self.store.list_workouts(),
                key=lambda w: (program_rank.get(w.program_id, len(program_rank)), w.order_index, w.id),
            )
        if export_type in ("all", "workouts"):
            document["workouts"] = [_workout_row(w) for w in workouts]

        if export_type in ("all", "exercises"):
            workout_rank = {w.id: i for i, w in enumerate(workouts)}

            def _exercise_key(e: Exercise) -> tuple[int, int, int, int]:
                if e.workout_id is not None:
                    return (0, workout_rank.get(e.workout_id, len(workout_rank)), e.order_index, e.id)
                if e.program_id is not None:
                    return (1, program_rank.get(e.program_id, len(program_rank)), e.order_index, e.id)
                return (2, 0, e.order_index, e.id)

            exercises = sorted(await self.store.list_exercises(), key=_exercise_key)
            document["exercises"] = [_exercise_row(e) for e in exercises]

        logger.info(
            "export_built",
            type=export_type,
            **{key: len(rows) for key, rows in document.items()},
        )
        return document

    async def export_program(self, program_id: int) -> ProgramDocument | None:
        """Nested document for a single program: its days and their exercises."""
        program = await self.store.get_program(program_id)
        if program is None:
            return None

        days = []
        for workout in await self.store.list_workouts(program_id=program_id):
            exercises = await self.store.list_exercises(workout_id=workout.id)
            days.append(
                DayDocument(
                    id=workout.id,
                    name=workout.name,
                    day_number=workout.day_number,
                    order_index=workout.order_index,
                    exercises=[DayExerciseDocument.model_validate(e) for e in exercises],
                )
            )

        return ProgramDocument(
            id=program.id,
            name=program.name,
            description=program.description,
            is_primary=program.is_primary,
            order_index=program.order_index,
            created_at=program.created_at,
            days=days,
        )
