"""Section splitter for the sectioned whole-hierarchy text format.

A document holds any subset of three blocks, in any order::

    PROGRAMS
    id,name,is_primary,created_at
    1,"Beginner",true,2024-01-01T00:00:00+00:00

    WORKOUTS
    ...

Each marker sits alone on its row. The line right after it is the
column-description row and is discarded, even when that line is blank.
Other blank rows, repeated ``id,...`` header rows and rows that appear
before the first marker are ignored.
"""
import enum
from dataclasses import dataclass, field

from src.domains.transfer.tokenizer import iter_rows


class Section(str, enum.Enum):
    """Section markers, one per entity type."""

    PROGRAMS = "PROGRAMS"
    WORKOUTS = "WORKOUTS"
    EXERCISES = "EXERCISES"


PROGRAM_COLUMNS = ("id", "name", "is_primary", "created_at")
WORKOUT_COLUMNS = ("id", "program_id", "name", "day_number", "order_index", "created_at")
EXERCISE_COLUMNS = (
    "id",
    "program_id",
    "workout_id",
    "name",
    "sets",
    "reps",
    "duration",
    "description",
    "order_index",
    "image_url",
    "muscle_group",
)

SECTION_COLUMNS: dict[Section, tuple[str, ...]] = {
    Section.PROGRAMS: PROGRAM_COLUMNS,
    Section.WORKOUTS: WORKOUT_COLUMNS,
    Section.EXERCISES: EXERCISE_COLUMNS,
}

TEXT_COLUMNS = frozenset({"name", "duration", "description", "image_url", "muscle_group"})

_MARKERS = {s.value: s for s in Section}


@dataclass
class SectionedRows:
    """Data rows per section, in document order."""

    rows: dict[Section, list[list[str]]] = field(
        default_factory=lambda: {s: [] for s in Section}
    )

    def __getitem__(self, section: Section) -> list[list[str]]:
        return self.rows[section]

    @property
    def found(self) -> bool:
        return any(self.rows.values())


def _marker(row: list[str]) -> Section | None:
    if len(row) != 1:
        return None
    return _MARKERS.get(row[0].strip())


def _is_header(row: list[str]) -> bool:
    return bool(row) and row[0].strip().lower() == "id"


def _is_blank(row: list[str]) -> bool:
    return all(not cell.strip() for cell in row)


def split_sections(text: str) -> SectionedRows:
    """Route each data row of ``text`` to its section in one left-to-right scan."""
    result = SectionedRows()
    current: Section | None = None
    skip_description = False

    for row in iter_rows(text, keep_blank=True):
        marker = _marker(row)
        if marker is not None:
            current = marker
            skip_description = True
            continue
        if skip_description:
            skip_description = False
            continue
        if current is None or _is_blank(row) or _is_header(row):
            continue
        result.rows[current].append(row)

    return result


def row_to_dict(section: Section, row: list[str]) -> dict[str, str | None]:
    """Name a row's cells by the section's columns; empty cells become None.

    Free-text columns keep their whitespace, everything else is stripped.
    """
    columns = SECTION_COLUMNS[section]
    values: dict[str, str | None] = {}
    for index, column in enumerate(columns):
        cell = row[index] if index < len(row) else ""
        if not cell.strip():
            values[column] = None
        elif column in TEXT_COLUMNS:
            values[column] = cell
        else:
            values[column] = cell.strip()
    return values
