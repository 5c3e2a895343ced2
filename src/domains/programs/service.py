"""Program hierarchy store operations.

Methods flush but never commit: callers decide the transaction boundary.
The import engine commits row by row, so a failing row can be rolled back
without losing the rows before it.
"""
from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.programs.models import Exercise, Program, Workout


class ProgramService:
    """Service for program, workout and exercise persistence."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # Program operations

    async def get_program(self, program_id: int) -> Program | None:
        """Get a program by ID."""
        result = await self.db.execute(
            select(Program).where(Program.id == program_id)
        )
        return result.scalar_one_or_none()

    async def list_programs(self) -> list[Program]:
        """List programs in display order.

        Explicit order_index first, then the primary program, then newest.
        """
        result = await self.db.execute(
            select(Program).order_by(
                Program.order_index.asc(),
                Program.is_primary.desc(),
                Program.created_at.desc(),
                Program.id.asc(),
            )
        )
        return list(result.scalars().all())

    async def create_program(
        self,
        name: str,
        is_primary: bool = False,
        order_index: int = 0,
        description: str | None = None,
    ) -> Program:
        """Create a program, clearing the primary flag elsewhere if needed."""
        if is_primary:
            await self._clear_primary()

        program = Program(
            name=name,
            description=description,
            is_primary=is_primary,
            order_index=order_index,
        )
        self.db.add(program)
        await self.db.flush()
        return program

    async def update_program(
        self,
        program: Program,
        name: str | None = None,
        is_primary: bool | None = None,
        order_index: int | None = None,
        description: str | None = None,
    ) -> Program:
        """Update a program."""
        if is_primary:
            await self._clear_primary(exclude_id=program.id)

        if name is not None:
            program.name = name
        if is_primary is not None:
            program.is_primary = is_primary
        if order_index is not None:
            program.order_index = order_index
        if description is not None:
            program.description = description

        await self.db.flush()
        return program

    async def delete_program(self, program_id: int) -> None:
        """Delete a program; workouts and exercises go with it (FK cascade)."""
        await self.db.execute(delete(Program).where(Program.id == program_id))
        await self.db.flush()

    async def _clear_primary(self, exclude_id: int | None = None) -> None:
        query = update(Program).where(Program.is_primary == True)  # noqa: E712
        if exclude_id is not None:
            query = query.where(Program.id != exclude_id)
        await self.db.execute(query.values(is_primary=False))

    # Workout operations

    async def get_workout(self, workout_id: int) -> Workout | None:
        """Get a workout by ID."""
        result = await self.db.execute(
            select(Workout).where(Workout.id == workout_id)
        )
        return result.scalar_one_or_none()

    async def list_workouts(self, program_id: int | None = None) -> list[Workout]:
        """List workouts ordered by order_index, optionally for one program."""
        query = select(Workout)
        if program_id is not None:
            query = query.where(Workout.program_id == program_id)
        query = query.order_by(Workout.order_index.asc(), Workout.id.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_workout(
        self,
        program_id: int,
        name: str,
        day_number: int | None = None,
        order_index: int = 0,
    ) -> Workout:
        """Create a workout under an existing program."""
        workout = Workout(
            program_id=program_id,
            name=name,
            day_number=day_number,
            order_index=order_index,
        )
        self.db.add(workout)
        await self.db.flush()
        return workout

    # Exercise operations

    async def list_exercises(
        self,
        program_id: int | None = None,
        workout_id: int | None = None,
    ) -> list[Exercise]:
        """List exercises ordered by order_index."""
        query = select(Exercise)
        if program_id is not None:
            query = query.where(Exercise.program_id == program_id)
        if workout_id is not None:
            query = query.where(Exercise.workout_id == workout_id)
        query = query.order_by(Exercise.order_index.asc(), Exercise.id.asc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create_exercise(
        self,
        name: str,
        sets: int = 3,
        reps: int = 10,
        program_id: int | None = None,
        workout_id: int | None = None,
        duration: str | None = None,
        description: str | None = None,
        image_url: str | None = None,
        muscle_group: str | None = None,
        order_index: int = 0,
    ) -> Exercise:
        """Create an exercise; both parents may be None for pool exercises."""
        exercise = Exercise(
            program_id=program_id,
            workout_id=workout_id,
            name=name,
            sets=sets,
            reps=reps,
            duration=duration,
            description=description,
            image_url=image_url,
            muscle_group=muscle_group,
            order_index=order_index,
        )
        self.db.add(exercise)
        await self.db.flush()
        return exercise

    async def exercise_name_exists(self, name: str) -> bool:
        """Case-insensitive exact match against every exercise name.

        Both sides are folded by the database so a stored name always matches
        itself, whatever characters it holds.
        """
        result = await self.db.execute(
            select(Exercise.id)
            .where(func.lower(Exercise.name) == func.lower(name))
            .limit(1)
        )
        return result.scalar_one_or_none() is not None
