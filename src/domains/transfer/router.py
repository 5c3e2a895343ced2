"""Import/export router."""
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import get_db
from src.core.observability import capture_exception
from src.domains.admin.dependencies import AdminSession
from src.domains.transfer.exceptions import ImportFormatError
from src.domains.transfer.export_service import ExportService, export_filename, render_csv
from src.domains.transfer.import_service import ImportService
from src.domains.transfer.schemas import (
    CatalogImportRequest,
    CatalogImportResponse,
    CatalogLayout,
    ImportRequest,
    ImportResponse,
    ProgramDocument,
    ProgramImportRequest,
    ProgramImportResponse,
    TransferErrorResponse,
    TransferFormat,
    TransferType,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


def _error_response(status_code: int, error: str, details: str | None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=TransferErrorResponse(error=error, details=details).model_dump(),
    )


def _format_error(e: ImportFormatError) -> JSONResponse:
    logger.info("import_rejected", error=e.message, details=e.details)
    return _error_response(status.HTTP_400_BAD_REQUEST, e.message, e.details)


def _unexpected_error(e: Exception, operation: str) -> JSONResponse:
    logger.error(f"{operation}_failed", error=str(e), type=type(e).__name__)
    capture_exception(e, tags={"operation": operation})
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, f"{operation.capitalize()} failed", str(e))


# ==================== Whole hierarchy ====================

@router.post(
    "/import",
    response_model=ImportResponse,
    responses={400: {"model": TransferErrorResponse}, 500: {"model": TransferErrorResponse}},
)
async def import_data(
    request: ImportRequest,
    admin: AdminSession,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ImportResponse | JSONResponse:
    """Import programs, workouts and exercises from a JSON document or sectioned CSV text."""
    service = ImportService(db)
    try:
        result = await service.import_data(request.data, request.format, request.type)
    except ImportFormatError as e:
        return _format_error(e)
    except Exception as e:
        return _unexpected_error(e, "import")

    counts = result.imported
    return ImportResponse(
        imported=counts,
        skipped=result.skipped,
        errors=result.errors or None,
        message=(
            f"{counts.programs} programs, {counts.workouts} workouts and "
            f"{counts.exercises} exercises imported"
        ),
    )


@router.get("/export")
async def export_data(
    admin: AdminSession,
    db: Annotated[AsyncSession, Depends(get_db)],
    format: Annotated[TransferFormat, Query()] = "json",
    type: Annotated[TransferType, Query()] = "all",
) -> Response:
    """Export the hierarchy as a JSON document or sectioned CSV text."""
    service = ExportService(db)
    try:
        document = await service.export_data(type)
    except Exception as e:
        return _unexpected_error(e, "export")

    disposition = {"Content-Disposition": f'attachment; filename="{export_filename(format)}"'}
    if format == "csv":
        return Response(
            content=render_csv(document),
            media_type="text/csv",
            headers=disposition,
        )
    return JSONResponse(content=document, headers=disposition)


# ==================== Exercise catalogs ====================

@router.post(
    "/catalog/{layout}",
    response_model=CatalogImportResponse,
    responses={400: {"model": TransferErrorResponse}, 500: {"model": TransferErrorResponse}},
)
async def import_catalog(
    layout: CatalogLayout,
    request: CatalogImportRequest,
    admin: AdminSession,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> CatalogImportResponse | JSONResponse:
    """Import a third-party exercise catalog into the exercise pool."""
    service = ImportService(db)
    try:
        result = await service.import_catalog(request.csv_data, layout, request.program_id)
    except ImportFormatError as e:
        return _format_error(e)
    except Exception as e:
        return _unexpected_error(e, "import")

    return CatalogImportResponse(
        imported=result.imported,
        skipped=result.skipped,
        errors=result.errors or None,
        message=f"{result.imported} exercises imported, {result.skipped} skipped",
    )


# ==================== Single program ====================

@router.get("/programs/{program_id}/export", response_model=ProgramDocument)
async def export_program(
    program_id: int,
    admin: AdminSession,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProgramDocument:
    """Export one program with its days and exercises as a nested document."""
    document = await ExportService(db).export_program(program_id)
    if document is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Program not found",
        )
    return document


@router.post(
    "/programs/import",
    response_model=ProgramImportResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": TransferErrorResponse}, 500: {"model": TransferErrorResponse}},
)
async def import_program(
    request: ProgramImportRequest,
    admin: AdminSession,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ProgramImportResponse | JSONResponse:
    """Create a program from a nested document produced by the program export."""
    try:
        program_id, errors = await ImportService(db).import_program(request.program_data)
    except ImportFormatError as e:
        return _format_error(e)
    except Exception as e:
        return _unexpected_error(e, "import")

    document = await ExportService(db).export_program(program_id)
    return ProgramImportResponse(program=document, errors=errors or None)
