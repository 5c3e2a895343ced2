"""Row extractors for third-party exercise catalogs.

Two fixed column layouts are supported. Each extractor turns one tokenized
row into an ``ExerciseRecord`` or raises ``RowError``; neither touches the
database.

bodybuilding (10+ columns)::

    name, description_url, image, image_alt, muscle_group_detail,
    muscle_group, equipment_detail, equipment, rating, description

fitnessprogramer (3+ columns)::

    name, gif_url, overview, muscle_group, source_url
"""
import re
from collections.abc import Callable
from dataclasses import dataclass

from src.domains.transfer.exceptions import RowError

DEFAULT_SETS = 3
DEFAULT_REPS = 10
MIN_NAME_LENGTH = 2

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ExerciseRecord:
    """Normalized catalog exercise, ready for insertion into the pool."""

    name: str
    order_index: int
    description: str | None = None
    image_url: str | None = None
    muscle_group: str | None = None
    sets: int = DEFAULT_SETS
    reps: int = DEFAULT_REPS


def clean_name(raw: str | None) -> str:
    """Trim and collapse internal whitespace runs to single spaces."""
    return _WHITESPACE.sub(" ", (raw or "").strip())


def _valid_name(raw: str | None, position: int) -> str:
    name = clean_name(raw)
    if len(name) < MIN_NAME_LENGTH:
        raise RowError(f'Row {position}: Invalid exercise name: "{name}"')
    return name


def _cell(fields: list[str], index: int) -> str:
    return fields[index].strip() if index < len(fields) else ""


def extract_bodybuilding(fields: list[str], position: int) -> ExerciseRecord:
    if len(fields) < 10:
        raise RowError(f"Row {position}: Not enough fields ({len(fields)})")

    name = _valid_name(fields[0], position)
    image = _cell(fields, 2)
    image_alt = _cell(fields, 3)
    muscle_group = _cell(fields, 5)
    equipment = _cell(fields, 7)
    rating = _cell(fields, 8)

    lines = [_cell(fields, 9)]
    if muscle_group:
        lines.append(f"Muscle Group: {muscle_group}")
    if equipment:
        lines.append(f"Equipment: {equipment}")
    if rating:
        lines.append(f"Rating: {rating}")
    description = "\n".join(lines).strip()

    return ExerciseRecord(
        name=name,
        order_index=position,
        description=description or None,
        image_url=image or image_alt or None,
        muscle_group=muscle_group or None,
    )


def extract_fitnessprogramer(fields: list[str], position: int) -> ExerciseRecord:
    if len(fields) < 3:
        raise RowError(f"Row {position}: Not enough fields ({len(fields)})")

    name = _valid_name(fields[0], position)
    gif_url = _cell(fields, 1)
    overview = _cell(fields, 2)
    muscle_group = _cell(fields, 3)

    description = overview
    if muscle_group:
        description = f"Muscle Group: {muscle_group}\n\n{overview}"
    description = description.strip()

    return ExerciseRecord(
        name=name,
        order_index=position,
        description=description or None,
        image_url=gif_url or None,
        muscle_group=muscle_group or None,
    )


@dataclass(frozen=True)
class CatalogLayout:
    """Column layout of one catalog source."""

    name: str
    min_fields: int
    extract: Callable[[list[str], int], ExerciseRecord]


CATALOG_LAYOUTS: dict[str, CatalogLayout] = {
    "bodybuilding": CatalogLayout("bodybuilding", 10, extract_bodybuilding),
    "fitnessprogramer": CatalogLayout("fitnessprogramer", 3, extract_fitnessprogramer),
}
