"""Tests for the section splitter of the sectioned text format."""

from src.domains.transfer.sections import Section, row_to_dict, split_sections

DOCUMENT = """PROGRAMS
id,name,is_primary,created_at
1,"Beginner",true,2024-01-01T00:00:00+00:00

WORKOUTS
id,program_id,name,day_number,order_index,created_at
10,1,"Day 1",1,0,
11,1,"Day 2",2,1,

EXERCISES
id,program_id,workout_id,name,sets,reps,duration,description,order_index,image_url,muscle_group
100,1,10,"Squat",3,10,,"Keep your back straight",0,,"Legs"
"""


class TestSplitSections:
    """Tests for routing rows to sections."""

    def test_rows_are_routed_per_section(self):
        sections = split_sections(DOCUMENT)

        assert [r[1] for r in sections[Section.PROGRAMS]] == ["Beginner"]
        assert [r[2] for r in sections[Section.WORKOUTS]] == ["Day 1", "Day 2"]
        assert [r[3] for r in sections[Section.EXERCISES]] == ["Squat"]
        assert sections.found

    def test_row_after_marker_is_discarded_even_without_id(self):
        text = "PROGRAMS\nName,Primary\n2,\"Advanced\",false,\n"

        sections = split_sections(text)

        assert sections[Section.PROGRAMS] == [["2", "Advanced", "false", ""]]

    def test_blank_line_after_marker_is_the_description(self):
        text = 'PROGRAMS\n\n1,"A",false,\n2,"B",false,\n'

        sections = split_sections(text)

        assert [r[1] for r in sections[Section.PROGRAMS]] == ["A", "B"]

    def test_crlf_blank_line_after_marker_is_the_description(self):
        text = 'WORKOUTS\r\n\r\n1,1,"Day 1"\r\n'

        sections = split_sections(text)

        assert sections[Section.WORKOUTS] == [["1", "1", "Day 1"]]

    def test_repeated_header_rows_are_ignored(self):
        text = "WORKOUTS\nid,program_id,name\nid,program_id,name\n1,1,\"A\"\n"

        sections = split_sections(text)

        assert sections[Section.WORKOUTS] == [["1", "1", "A"]]

    def test_sections_in_any_order(self):
        text = "EXERCISES\nheader\n1,,,\"Plank\",3,1\nPROGRAMS\nheader\n1,\"P\"\n"

        sections = split_sections(text)

        assert len(sections[Section.EXERCISES]) == 1
        assert len(sections[Section.PROGRAMS]) == 1
        assert sections[Section.WORKOUTS] == []

    def test_rows_before_first_marker_are_ignored(self):
        sections = split_sections("1,\"orphan\"\nPROGRAMS\nheader\n")

        assert not sections.found

    def test_multiline_description_stays_in_one_row(self):
        text = 'EXERCISES\nheader\n1,,,"Row",3,10,,"line one\nline two",0,,\n'

        rows = split_sections(text)[Section.EXERCISES]

        assert len(rows) == 1
        assert rows[0][7] == "line one\nline two"


class TestRowToDict:
    """Tests for naming row cells by section columns."""

    def test_empty_cells_become_none(self):
        values = row_to_dict(Section.WORKOUTS, ["5", "1", "Day 1", "", " 2 "])

        assert values == {
            "id": "5",
            "program_id": "1",
            "name": "Day 1",
            "day_number": None,
            "order_index": "2",
            "created_at": None,
        }

    def test_text_columns_keep_whitespace(self):
        values = row_to_dict(
            Section.EXERCISES,
            ["1", "", "", "Curl", "3", "10", "", "  indented\n", "0", "", ""],
        )

        assert values["description"] == "  indented\n"
        assert values["program_id"] is None
