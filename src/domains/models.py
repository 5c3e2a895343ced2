"""Central import of all domain models.

This file imports all models to ensure they are registered with SQLAlchemy's
metadata before any database operations (like creating tables).
"""

# Programs domain
from src.domains.programs.models import (
    Exercise,
    Program,
    Workout,
)

__all__ = [
    "Exercise",
    "Program",
    "Workout",
]
