"""Integration tests for the import/export API endpoints."""

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.programs.models import Exercise, Program

TRANSFER = "/api/v1/transfer"


class TestImportEndpoint:
    """Tests for POST /transfer/import."""

    async def test_import_document(self, client: AsyncClient, db_session: AsyncSession):
        response = await client.post(
            f"{TRANSFER}/import",
            json={
                "format": "json",
                "type": "all",
                "data": {
                    "programs": [{"name": "Beginner"}],
                    "workouts": [{"program_id": 1, "name": "Day 1"}],
                    "exercises": [{"workout_id": 1, "name": "Squat", "sets": 3, "reps": 10}],
                },
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["imported"] == {"programs": 1, "workouts": 1, "exercises": 1}
        assert data["errors"] is None
        assert data["message"] == "1 programs, 1 workouts and 1 exercises imported"

    async def test_row_errors_still_succeed(self, client: AsyncClient):
        response = await client.post(
            f"{TRANSFER}/import",
            json={"data": {"workouts": [{"program_id": 42, "name": "Lost"}]}},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["imported"]["workouts"] == 0
        assert data["errors"] == ["Workout 1: program 42 not found"]

    async def test_invalid_json_text(self, client: AsyncClient):
        response = await client.post(
            f"{TRANSFER}/import",
            json={"data": "{broken", "format": "json"},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert data["error"] == "Invalid JSON"
        assert data["details"]

    async def test_missing_data(self, client: AsyncClient):
        response = await client.post(f"{TRANSFER}/import", json={"format": "csv"})

        assert response.status_code == 400
        assert response.json()["details"] == "data is required"

    async def test_unknown_format_is_rejected(self, client: AsyncClient):
        response = await client.post(f"{TRANSFER}/import", json={"data": {}, "format": "xml"})

        assert response.status_code == 422

    async def test_requires_admin_session(self, anonymous_client: AsyncClient):
        response = await anonymous_client.post(f"{TRANSFER}/import", json={"data": {}})

        assert response.status_code == 401


class TestExportEndpoint:
    """Tests for GET /transfer/export."""

    async def test_export_json(self, client: AsyncClient, sample_program: Program):
        response = await client.get(f"{TRANSFER}/export", params={"format": "json", "type": "all"})

        assert response.status_code == 200
        assert "attachment" in response.headers["content-disposition"]
        assert ".json" in response.headers["content-disposition"]
        data = response.json()
        assert [p["name"] for p in data["programs"]] == ["Strength Basics"]
        assert len(data["workouts"]) == 1
        assert len(data["exercises"]) == 3

    async def test_export_csv(self, client: AsyncClient, sample_program: Program):
        response = await client.get(f"{TRANSFER}/export", params={"format": "csv", "type": "programs"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert ".csv" in response.headers["content-disposition"]
        lines = response.text.splitlines()
        assert lines[0] == "PROGRAMS"
        assert lines[1] == "id,name,is_primary,created_at"
        assert lines[2].startswith('1,"Strength Basics",false,')

    async def test_csv_export_reimports(self, client: AsyncClient, db_session: AsyncSession, sample_program: Program):
        exported = await client.get(f"{TRANSFER}/export", params={"format": "csv"})

        response = await client.post(
            f"{TRANSFER}/import",
            json={"data": exported.text, "format": "csv"},
        )

        data = response.json()
        # Pool exercise already exists, bound exercises are always created
        assert data["imported"] == {"programs": 1, "workouts": 1, "exercises": 2}
        assert data["skipped"] == 1
        programs = await db_session.execute(select(Program.name))
        assert programs.scalars().all() == ["Strength Basics", "Strength Basics"]


class TestCatalogEndpoint:
    """Tests for POST /transfer/catalog/{layout}."""

    CSV = (
        "name,gif,overview,muscle,url\n"
        'Push Up,https://e.com/p.gif,"Keep a straight line, lower slowly.",Chest,https://e.com/p\n'
        "Pull Up,https://e.com/u.gif,Full hang at the bottom.,Back,https://e.com/u\n"
    )

    async def test_import_twice(self, client: AsyncClient, db_session: AsyncSession):
        first = await client.post(f"{TRANSFER}/catalog/fitnessprogramer", json={"csv_data": self.CSV})
        second = await client.post(f"{TRANSFER}/catalog/fitnessprogramer", json={"csv_data": self.CSV})

        assert first.status_code == 200
        assert first.json()["imported"] == 2
        assert second.json()["imported"] == 0
        assert second.json()["skipped"] == 2
        assert second.json()["message"] == "0 exercises imported, 2 skipped"

        push_up = (
            await db_session.execute(select(Exercise).where(Exercise.name == "Push Up"))
        ).scalar_one()
        assert push_up.description == "Muscle Group: Chest\n\nKeep a straight line, lower slowly."

    async def test_missing_csv(self, client: AsyncClient):
        response = await client.post(f"{TRANSFER}/catalog/bodybuilding", json={})

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Import failed",
            "details": "CSV data is required",
        }

    async def test_unknown_layout(self, client: AsyncClient):
        response = await client.post(f"{TRANSFER}/catalog/somewhere", json={"csv_data": self.CSV})

        assert response.status_code == 422


class TestProgramTransferEndpoints:
    """Tests for single-program export and import."""

    async def test_export_program(self, client: AsyncClient, sample_program: Program):
        program_id = sample_program.id

        response = await client.get(f"{TRANSFER}/programs/{program_id}/export")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Strength Basics"
        assert data["days"][0]["name"] == "Day 1"
        assert [e["name"] for e in data["days"][0]["exercises"]] == ["Back Squat", "Bench Press"]

    async def test_export_unknown_program(self, client: AsyncClient):
        response = await client.get(f"{TRANSFER}/programs/999/export")

        assert response.status_code == 404
        assert response.json()["detail"] == "Program not found"

    async def test_import_exported_program(self, client: AsyncClient, sample_program: Program):
        exported = await client.get(f"{TRANSFER}/programs/{sample_program.id}/export")

        response = await client.post(
            f"{TRANSFER}/programs/import",
            json={"program_data": exported.json()},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["errors"] is None
        program = data["program"]
        assert program["id"] != exported.json()["id"]
        assert program["is_primary"] is False
        assert len(program["days"][0]["exercises"]) == 2

    @pytest.mark.parametrize("body", [{}, {"program_data": {"days": []}}])
    async def test_import_invalid_program(self, client: AsyncClient, body: dict):
        response = await client.post(f"{TRANSFER}/programs/import", json=body)

        assert response.status_code == 400
        assert response.json()["success"] is False
