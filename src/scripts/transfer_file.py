"""
Import or export program data from the command line.

Run with:
    python -m src.scripts.transfer_file export --format csv --out backup.csv
    python -m src.scripts.transfer_file import backup.csv --format csv
    python -m src.scripts.transfer_file catalog exercises.csv --layout bodybuilding
"""

import asyncio
import json
from pathlib import Path

import structlog

from src.config.database import AsyncSessionLocal, init_db
from src.domains.transfer.exceptions import ImportFormatError
from src.domains.transfer.export_service import ExportService, render_csv
from src.domains.transfer.import_service import ImportService

logger = structlog.get_logger(__name__)


async def export_to_file(out: Path, fmt: str, export_type: str) -> None:
    async with AsyncSessionLocal() as session:
        document = await ExportService(session).export_data(export_type)

    if fmt == "csv":
        out.write_text(render_csv(document), encoding="utf-8")
    else:
        out.write_text(json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("export_written", path=str(out), format=fmt)


async def import_from_file(path: Path, fmt: str, import_type: str) -> None:
    data = path.read_text(encoding="utf-8")
    async with AsyncSessionLocal() as session:
        result = await ImportService(session).import_data(data, fmt, import_type)

    logger.info(
        "import_finished",
        path=str(path),
        imported=result.imported.model_dump(),
        skipped=result.skipped,
    )
    for error in result.errors:
        logger.warning("import_row_error", error=error)


async def import_catalog_file(path: Path, layout: str, program_id: int | None) -> None:
    data = path.read_text(encoding="utf-8")
    async with AsyncSessionLocal() as session:
        result = await ImportService(session).import_catalog(data, layout, program_id)

    logger.info(
        "catalog_import_finished",
        path=str(path),
        imported=result.imported,
        skipped=result.skipped,
    )
    for error in result.errors:
        logger.warning("catalog_row_error", error=error)


async def main():
    """Main function to run the transfer."""
    import argparse

    parser = argparse.ArgumentParser(description="Import or export program data")
    sub = parser.add_subparsers(dest="command", required=True)

    exp = sub.add_parser("export", help="Write the hierarchy to a file")
    exp.add_argument("--out", type=Path, required=True)
    exp.add_argument("--format", choices=["json", "csv"], default="json")
    exp.add_argument("--type", choices=["all", "programs", "workouts", "exercises"], default="all")

    imp = sub.add_parser("import", help="Read a hierarchy file into the database")
    imp.add_argument("path", type=Path)
    imp.add_argument("--format", choices=["json", "csv"], default="json")
    imp.add_argument("--type", choices=["all", "programs", "workouts", "exercises"], default="all")

    cat = sub.add_parser("catalog", help="Import a third-party exercise catalog")
    cat.add_argument("path", type=Path)
    cat.add_argument("--layout", choices=["bodybuilding", "fitnessprogramer"], required=True)
    cat.add_argument("--program-id", type=int, default=None)

    args = parser.parse_args()

    await init_db()

    try:
        if args.command == "export":
            await export_to_file(args.out, args.format, args.type)
        elif args.command == "import":
            await import_from_file(args.path, args.format, args.type)
        else:
            await import_catalog_file(args.path, args.layout, args.program_id)
    except ImportFormatError as e:
        logger.error("transfer_rejected", error=e.message, details=e.details)
        raise SystemExit(1) from e


if __name__ == "__main__":
    asyncio.run(main())
