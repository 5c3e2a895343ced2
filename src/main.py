import structlog
from contextlib import asynccontextmanager
from typing import Annotated, AsyncGenerator

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.config.database import AsyncSessionLocal, engine, get_db, init_db
from src.config.settings import settings
from src.core.observability import init_observability
from src.domains.admin.router import router as admin_router
from src.domains.programs.models import Exercise, Program, Workout
from src.domains.transfer.router import router as transfer_router

logger = structlog.get_logger(__name__)


async def log_store_summary() -> None:
    """Log how much content the store holds at startup."""
    async with AsyncSessionLocal() as session:
        counts = {}
        for label, model in (("programs", Program), ("workouts", Workout), ("exercises", Exercise)):
            counts[label] = await session.scalar(select(func.count(model.id)))
    logger.info("store_summary", **counts)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create tables on startup and release the engine on shutdown."""
    logger.info(
        "app_starting",
        app_name=settings.APP_NAME,
        environment=settings.APP_ENV,
        database=engine.url.get_backend_name(),
    )

    try:
        await init_db()
        logger.info("database_initialized")
    except Exception as e:
        logger.error("database_init_failed", error=str(e), type=type(e).__name__)
        # Refuse to serve imports against a store without tables
        if settings.is_production:
            raise

    try:
        await log_store_summary()
    except SQLAlchemyError as e:
        logger.warning("store_summary_failed", error=str(e), type=type(e).__name__)

    yield

    logger.info("app_shutting_down", app_name=settings.APP_NAME)
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    init_observability()

    app = FastAPI(
        title=settings.APP_NAME,
        description="Program, workout and exercise administration with bulk import/export",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    # The admin session travels in a cookie, so credentials must be allowed
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
        expose_headers=["Content-Disposition"],
    )

    app.include_router(admin_router, prefix=f"{settings.API_V1_PREFIX}/admin", tags=["Admin"])
    app.include_router(
        transfer_router,
        prefix=f"{settings.API_V1_PREFIX}/transfer",
        tags=["Import/Export"],
    )

    @app.get("/health")
    async def health_check(db: Annotated[AsyncSession, Depends(get_db)]) -> dict[str, str]:
        try:
            await db.execute(text("SELECT 1"))
            database = "ok"
        except SQLAlchemyError as e:
            logger.warning("health_database_unreachable", error=str(e))
            database = "unavailable"
        return {
            "status": "healthy" if database == "ok" else "degraded",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "environment": settings.APP_ENV,
            "database": database,
        }

    @app.get("/reference", include_in_schema=False)
    async def scalar_html():
        return get_scalar_api_reference(
            openapi_url=app.openapi_url,
            title=f"{settings.APP_NAME} - API Reference",
        )

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
