"""Tests for the third-party catalog row extractors."""

import pytest

from src.domains.transfer.catalog import (
    CATALOG_LAYOUTS,
    DEFAULT_REPS,
    DEFAULT_SETS,
    clean_name,
    extract_bodybuilding,
    extract_fitnessprogramer,
)
from src.domains.transfer.exceptions import RowError


def bodybuilding_row(**overrides: str) -> list[str]:
    row = {
        "name": "Barbell  Curl",
        "description_url": "https://example.com/curl",
        "image": "https://example.com/curl.jpg",
        "image_alt": "https://example.com/curl-alt.jpg",
        "muscle_group_detail": "Biceps brachii",
        "muscle_group": "Biceps",
        "equipment_detail": "Olympic bar",
        "equipment": "Barbell",
        "rating": "8.9",
        "description": "Curl the bar up.",
    }
    row.update(overrides)
    return list(row.values())


class TestCleanName:
    """Tests for name normalization."""

    def test_collapses_whitespace_runs(self):
        assert clean_name("  Incline \t Dumbbell\n Press ") == "Incline Dumbbell Press"

    def test_none_is_empty(self):
        assert clean_name(None) == ""


class TestBodybuildingLayout:
    """Tests for the ten-column catalog layout."""

    def test_full_row(self):
        record = extract_bodybuilding(bodybuilding_row(), 4)

        assert record.name == "Barbell Curl"
        assert record.order_index == 4
        assert record.description == (
            "Curl the bar up.\nMuscle Group: Biceps\nEquipment: Barbell\nRating: 8.9"
        )
        assert record.image_url == "https://example.com/curl.jpg"
        assert record.muscle_group == "Biceps"
        assert record.sets == DEFAULT_SETS
        assert record.reps == DEFAULT_REPS

    def test_image_falls_back_to_secondary(self):
        record = extract_bodybuilding(bodybuilding_row(image=""), 1)

        assert record.image_url == "https://example.com/curl-alt.jpg"

    def test_no_image_at_all(self):
        record = extract_bodybuilding(bodybuilding_row(image="", image_alt=" "), 1)

        assert record.image_url is None

    def test_description_without_free_text_is_trimmed(self):
        record = extract_bodybuilding(
            bodybuilding_row(description="", equipment="", rating=""),
            1,
        )

        assert record.description == "Muscle Group: Biceps"

    def test_short_name_is_rejected(self):
        with pytest.raises(RowError, match=r'Row 7: Invalid exercise name: "X"'):
            extract_bodybuilding(bodybuilding_row(name=" X "), 7)

    def test_not_enough_fields(self):
        with pytest.raises(RowError, match=r"Row 2: Not enough fields \(3\)"):
            extract_bodybuilding(["a", "b", "c"], 2)


class TestFitnessprogramerLayout:
    """Tests for the five-column catalog layout."""

    def test_full_row(self):
        record = extract_fitnessprogramer(
            [
                "Cable  Fly",
                "https://example.com/fly.gif",
                "Squeeze at the top.",
                "Chest",
                "https://example.com/fly",
            ],
            3,
        )

        assert record.name == "Cable Fly"
        assert record.image_url == "https://example.com/fly.gif"
        assert record.description == "Muscle Group: Chest\n\nSqueeze at the top."
        assert record.muscle_group == "Chest"
        assert record.order_index == 3

    def test_three_fields_are_enough(self):
        record = extract_fitnessprogramer(["Dip", "", "Lower slowly."], 1)

        assert record.description == "Lower slowly."
        assert record.image_url is None
        assert record.muscle_group is None

    def test_empty_name_is_rejected(self):
        with pytest.raises(RowError, match="Invalid exercise name"):
            extract_fitnessprogramer(["   ", "", "text"], 1)


def test_layouts_declare_minimum_fields():
    assert CATALOG_LAYOUTS["bodybuilding"].min_fields == 10
    assert CATALOG_LAYOUTS["fitnessprogramer"].min_fields == 3
