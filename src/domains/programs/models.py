"""Program hierarchy models: programs -> workouts (days) -> exercises."""
from sqlalchemy import Boolean, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.config.database import Base
from src.core.models import IntegerIDMixin, TimestampMixin


class Program(Base, IntegerIDMixin, TimestampMixin):
    """Top-level training program.

    At most one program is primary at any time; ProgramService enforces it.
    """

    __tablename__ = "programs"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    workouts: Mapped[list["Workout"]] = relationship(
        "Workout",
        back_populates="program",
        order_by="Workout.order_index",
        lazy="selectin",
        passive_deletes=True,  # Let DB handle CASCADE DELETE
    )

    def __repr__(self) -> str:
        return f"<Program {self.name}>"


class Workout(Base, IntegerIDMixin, TimestampMixin):
    """A training day inside a program."""

    __tablename__ = "workouts"

    program_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    day_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    program: Mapped["Program"] = relationship("Program", back_populates="workouts")
    exercises: Mapped[list["Exercise"]] = relationship(
        "Exercise",
        back_populates="workout",
        order_by="Exercise.order_index",
        lazy="selectin",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Workout {self.name}>"


class Exercise(Base, IntegerIDMixin, TimestampMixin):
    """Exercise prescription.

    Bound to a workout, directly to a program, or to neither (pool exercise).
    """

    __tablename__ = "exercises"

    program_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("programs.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    workout_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("workouts.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sets: Mapped[int] = mapped_column(Integer, default=3, nullable=False)
    reps: Mapped[int] = mapped_column(Integer, default=10, nullable=False)
    duration: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    muscle_group: Mapped[str | None] = mapped_column(String(100), nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    workout: Mapped["Workout | None"] = relationship("Workout", back_populates="exercises")

    def __repr__(self) -> str:
        return f"<Exercise {self.name}>"
