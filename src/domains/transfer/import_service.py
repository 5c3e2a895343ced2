"""Import orchestrator.

Runs the stages programs -> workouts -> exercises over a parsed payload,
rewriting parent references through a ``ReconciliationMap`` and committing
every row on its own. A failing row is rolled back, recorded with its
1-based position and skipped; it never stops the rest of the batch.

Parent references resolve in two tiers: the run's local-ID map first, then
the raw value as an existing store ID. The second tier only applies to IDs
the payload does not claim (see ``ReconciliationMap``), so a child of a failed
row, or a position past the end of its collection, is rejected. Either way
the parent must exist in the store, otherwise the row is rejected.
"""
import json
from dataclasses import dataclass, field
from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.settings import settings
from src.domains.programs.models import Program, Workout
from src.domains.programs.service import ProgramService
from src.domains.transfer.catalog import CATALOG_LAYOUTS
from src.domains.transfer.exceptions import ImportFormatError, RowError
from src.domains.transfer.reconciliation import ReconciliationMap
from src.domains.transfer.schemas import (
    CatalogImportResult,
    ExerciseRow,
    ImportResult,
    ProgramDayRow,
    ProgramRow,
    TransferFormat,
    TransferType,
    WorkoutRow,
)
from src.domains.transfer.sections import Section, row_to_dict, split_sections
from src.domains.transfer.tokenizer import tokenize

logger = structlog.get_logger(__name__)

# Fewest cells a section row needs before its columns mean anything
SECTION_MIN_FIELDS = {
    Section.PROGRAMS: 2,
    Section.WORKOUTS: 3,
    Section.EXERCISES: 6,
}

_DOCUMENT_KEYS = {
    Section.PROGRAMS: "programs",
    Section.WORKOUTS: "workouts",
    Section.EXERCISES: "exercises",
}

_ROW_FAILURES = (RowError, ValidationError, SQLAlchemyError)


@dataclass
class _SectionRow:
    """A tokenized row from the sectioned text format."""

    cells: list[str]


@dataclass
class ParsedPayload:
    """Raw rows per entity, in input order, not yet validated."""

    programs: list[Any] = field(default_factory=list)
    workouts: list[Any] = field(default_factory=list)
    exercises: list[Any] = field(default_factory=list)


def _describe(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'row'}: {err['msg']}"
            for err in exc.errors()
        )
    if isinstance(exc, SQLAlchemyError):
        orig = getattr(exc, "orig", None)
        return str(orig) if orig is not None else type(exc).__name__
    return str(exc)


def parse_payload(data: Any, fmt: TransferFormat) -> ParsedPayload:
    """Read the top-level structure; raises ``ImportFormatError`` if it is unusable."""
    if data is None or (isinstance(data, str) and not data.strip()):
        raise ImportFormatError("Import failed", "data is required")

    if fmt == "csv":
        if not isinstance(data, str):
            raise ImportFormatError("Import failed", "csv data must be text")
        sections = split_sections(data)
        if not sections.found:
            raise ImportFormatError(
                "Import failed",
                "no PROGRAMS, WORKOUTS or EXERCISES section found",
            )
        return ParsedPayload(
            programs=[_SectionRow(r) for r in sections[Section.PROGRAMS]],
            workouts=[_SectionRow(r) for r in sections[Section.WORKOUTS]],
            exercises=[_SectionRow(r) for r in sections[Section.EXERCISES]],
        )

    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise ImportFormatError("Invalid JSON", str(e)) from e

    if not isinstance(data, dict):
        raise ImportFormatError(
            "Import failed",
            "expected an object with programs, workouts and exercises arrays",
        )

    payload = ParsedPayload()
    for key in _DOCUMENT_KEYS.values():
        rows = data.get(key)
        if rows is None:
            continue
        if not isinstance(rows, list):
            raise ImportFormatError("Import failed", f"'{key}' must be an array")
        setattr(payload, key, rows)
    return payload


def _row_values(item: Any, section: Section) -> dict[str, Any]:
    if isinstance(item, _SectionRow):
        if len(item.cells) < SECTION_MIN_FIELDS[section]:
            raise RowError(f"not enough fields ({len(item.cells)})")
        return row_to_dict(section, item.cells)
    if not isinstance(item, dict):
        raise RowError("row must be an object")
    return item


def _declared_id(item: Any) -> int | None:
    """Explicit local ID of a raw row, read without validating the rest of it."""
    if isinstance(item, _SectionRow):
        value: Any = item.cells[0] if item.cells else None
    elif isinstance(item, dict):
        value = item.get("id")
    else:
        return None

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class ImportService:
    """Service for importing program hierarchies and exercise catalogs."""

    def __init__(self, db: AsyncSession, error_limit: int | None = None):
        self.db = db
        self.store = ProgramService(db)
        self.error_limit = settings.IMPORT_ERROR_LIMIT if error_limit is None else error_limit

    # Whole-hierarchy import

    async def import_data(
        self,
        data: Any,
        fmt: TransferFormat = "json",
        import_type: TransferType = "all",
    ) -> ImportResult:
        """Import programs, workouts and exercises from a document or text payload."""
        payload = parse_payload(data, fmt)
        id_map = ReconciliationMap()
        result = ImportResult()

        logger.info(
            "import_started",
            format=fmt,
            type=import_type,
            programs=len(payload.programs),
            workouts=len(payload.workouts),
            exercises=len(payload.exercises),
        )

        if import_type in ("all", "programs"):
            await self._import_programs(payload.programs, id_map, result)
        if import_type in ("all", "workouts"):
            await self._import_workouts(payload.workouts, id_map, result)
        if import_type in ("all", "exercises"):
            await self._import_exercises(payload.exercises, id_map, result)

        logger.info(
            "import_completed",
            imported=result.imported.model_dump(),
            skipped=result.skipped,
            errors=len(result.errors),
        )
        result.errors = result.errors[: self.error_limit]
        return result

    async def _fail(self, result: ImportResult, label: str, position: int, exc: Exception) -> None:
        await self.db.rollback()
        message = f"{label} {position}: {_describe(exc)}"
        result.errors.append(message)
        logger.warning("import_row_failed", entity=label.lower(), position=position, error=message)

    async def _import_programs(
        self,
        rows: list[Any],
        id_map: ReconciliationMap,
        result: ImportResult,
    ) -> None:
        for position, item in enumerate(rows, start=1):
            local_id = _declared_id(item)
            if local_id is None:
                local_id = position
                id_map.positional_programs = True
            try:
                row = ProgramRow.model_validate(_row_values(item, Section.PROGRAMS))
                program = await self.store.create_program(
                    name=row.name,
                    is_primary=bool(row.is_primary),
                    order_index=row.order_index or 0,
                    description=row.description,
                )
                await self.db.commit()
            except _ROW_FAILURES as e:
                await self._fail(result, "Program", position, e)
                id_map.mark_program_failed(local_id)
                continue

            id_map.record_program(local_id, program.id)
            result.imported.programs += 1

    async def _import_workouts(
        self,
        rows: list[Any],
        id_map: ReconciliationMap,
        result: ImportResult,
    ) -> None:
        for position, item in enumerate(rows, start=1):
            local_id = _declared_id(item)
            if local_id is None:
                local_id = position
                id_map.positional_workouts = True
            try:
                row = WorkoutRow.model_validate(_row_values(item, Section.WORKOUTS))
                program = await self._resolve_program(row.program_id, id_map)
                if program is None:
                    raise RowError(f"program {row.program_id} not found")
                workout = await self.store.create_workout(
                    program_id=program.id,
                    name=row.name,
                    day_number=row.day_number,
                    order_index=row.order_index or 0,
                )
                await self.db.commit()
            except _ROW_FAILURES as e:
                await self._fail(result, "Workout", position, e)
                id_map.mark_workout_failed(local_id)
                continue

            id_map.record_workout(local_id, workout.id)
            result.imported.workouts += 1

    async def _import_exercises(
        self,
        rows: list[Any],
        id_map: ReconciliationMap,
        result: ImportResult,
    ) -> None:
        for position, item in enumerate(rows, start=1):
            try:
                row = ExerciseRow.model_validate(_row_values(item, Section.EXERCISES))
                program_id, workout_id = await self._resolve_exercise_parents(row, id_map)

                # Only pool exercises are deduplicated; bound ones are prescriptions
                if program_id is None and workout_id is None:
                    if await self.store.exercise_name_exists(row.name):
                        result.skipped += 1
                        logger.debug("import_exercise_skipped", position=position, name=row.name)
                        continue

                await self.store.create_exercise(
                    name=row.name,
                    sets=row.sets,
                    reps=row.reps,
                    program_id=program_id,
                    workout_id=workout_id,
                    duration=row.duration,
                    description=row.description,
                    image_url=row.image_url,
                    muscle_group=row.muscle_group,
                    order_index=row.order_index or 0,
                )
                await self.db.commit()
            except _ROW_FAILURES as e:
                await self._fail(result, "Exercise", position, e)
                continue

            result.imported.exercises += 1

    async def _resolve_exercise_parents(
        self,
        row: ExerciseRow,
        id_map: ReconciliationMap,
    ) -> tuple[int | None, int | None]:
        program_id: int | None = None
        workout_id: int | None = None

        if row.workout_id is not None:
            workout = await self._resolve_workout(row.workout_id, id_map)
            if workout is None:
                raise RowError(f"workout {row.workout_id} not found")
            workout_id = workout.id
            program_id = workout.program_id

        if row.program_id is not None:
            program = await self._resolve_program(row.program_id, id_map)
            if program is None:
                raise RowError(f"program {row.program_id} not found")
            if program_id is not None and program.id != program_id:
                raise RowError(
                    f"workout {row.workout_id} does not belong to program {row.program_id}"
                )
            program_id = program.id

        return program_id, workout_id

    async def _resolve_program(self, local_id: int, id_map: ReconciliationMap) -> Program | None:
        store_id = id_map.resolve_program(local_id)
        if store_id is None:
            if id_map.claims_program(local_id):
                return None
            store_id = local_id
        return await self.store.get_program(store_id)

    async def _resolve_workout(self, local_id: int, id_map: ReconciliationMap) -> Workout | None:
        store_id = id_map.resolve_workout(local_id)
        if store_id is None:
            if id_map.claims_workout(local_id):
                return None
            store_id = local_id
        return await self.store.get_workout(store_id)

    # Catalog import

    async def import_catalog(
        self,
        csv_data: str | None,
        layout: str,
        program_id: int | None = None,
    ) -> CatalogImportResult:
        """Import a third-party exercise catalog into the exercise pool.

        The first tokenized row is the catalog's header and is skipped.
        Exercises whose name already exists anywhere are counted as skipped.
        """
        catalog = CATALOG_LAYOUTS.get(layout)
        if catalog is None:
            raise ImportFormatError("Import failed", f"unknown catalog layout '{layout}'")
        if not csv_data or not csv_data.strip():
            raise ImportFormatError("Import failed", "CSV data is required")
        if program_id is not None and await self.store.get_program(program_id) is None:
            raise ImportFormatError("Import failed", f"program {program_id} not found")

        rows = tokenize(csv_data, min_fields=catalog.min_fields)
        result = CatalogImportResult()

        logger.info("catalog_import_started", layout=layout, rows=max(len(rows) - 1, 0))

        for position, fields in enumerate(rows[1:], start=1):
            try:
                record = catalog.extract(fields, position)
            except RowError as e:
                result.errors.append(str(e))
                logger.warning("catalog_row_failed", position=position, error=str(e))
                continue

            try:
                if await self.store.exercise_name_exists(record.name):
                    result.skipped += 1
                    continue

                await self.store.create_exercise(
                    name=record.name,
                    sets=record.sets,
                    reps=record.reps,
                    program_id=program_id,
                    description=record.description,
                    image_url=record.image_url,
                    muscle_group=record.muscle_group,
                    order_index=record.order_index,
                )
                await self.db.commit()
            except SQLAlchemyError as e:
                await self.db.rollback()
                result.errors.append(f"Row {position}: {_describe(e)}")
                logger.warning("catalog_row_failed", position=position, error=_describe(e))
                continue

            result.imported += 1

        logger.info(
            "catalog_import_completed",
            layout=layout,
            imported=result.imported,
            skipped=result.skipped,
            errors=len(result.errors),
        )
        result.errors = result.errors[: self.error_limit]
        return result

    # Single-program import

    async def import_program(self, program_data: dict[str, Any] | None) -> tuple[int, list[str]]:
        """Create one program with its nested days and exercises; returns its ID.

        The imported program is never made primary. Day and exercise failures
        are recorded and skipped like any other row.
        """
        if not program_data or not isinstance(program_data, dict):
            raise ImportFormatError("Import failed", "programData is required")

        days = program_data.get("days") or []
        if not isinstance(days, list):
            raise ImportFormatError("Import failed", "'days' must be an array")

        try:
            row = ProgramRow.model_validate(program_data)
        except ValidationError as e:
            raise ImportFormatError("Invalid program", _describe(e)) from e

        program = await self.store.create_program(
            name=row.name,
            is_primary=False,
            order_index=row.order_index or 0,
            description=row.description,
        )
        await self.db.commit()
        program_id = program.id
        errors: list[str] = []

        for day_position, day in enumerate(days, start=1):
            try:
                if not isinstance(day, dict):
                    raise RowError("row must be an object")
                day_row = ProgramDayRow.model_validate(day)
                workout = await self.store.create_workout(
                    program_id=program_id,
                    name=day_row.name,
                    day_number=day_row.day_number,
                    order_index=day_row.order_index if day_row.order_index is not None else day_position - 1,
                )
                await self.db.commit()
            except _ROW_FAILURES as e:
                await self.db.rollback()
                errors.append(f"Day {day_position}: {_describe(e)}")
                continue

            workout_id = workout.id
            exercises = day.get("exercises") or []
            if not isinstance(exercises, list):
                errors.append(f"Day {day_position}: 'exercises' must be an array")
                continue

            for position, item in enumerate(exercises, start=1):
                try:
                    if not isinstance(item, dict):
                        raise RowError("row must be an object")
                    ex = ExerciseRow.model_validate(item)
                    await self.store.create_exercise(
                        name=ex.name,
                        sets=ex.sets,
                        reps=ex.reps,
                        program_id=program_id,
                        workout_id=workout_id,
                        duration=ex.duration,
                        description=ex.description,
                        image_url=ex.image_url,
                        muscle_group=ex.muscle_group,
                        order_index=ex.order_index if ex.order_index is not None else position - 1,
                    )
                    await self.db.commit()
                except _ROW_FAILURES as e:
                    await self.db.rollback()
                    errors.append(f"Day {day_position} exercise {position}: {_describe(e)}")

        logger.info("program_imported", program_id=program_id, days=len(days), errors=len(errors))
        return program_id, errors[: self.error_limit]
