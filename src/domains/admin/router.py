"""Admin login/logout router."""
import structlog
from fastapi import APIRouter, HTTPException, Response, status

from src.config.settings import settings
from src.domains.admin.dependencies import ADMIN_COOKIE_NAME, create_session_token, verify_credentials
from src.domains.admin.schemas import LoginRequest, LoginResponse

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("/login", response_model=LoginResponse)
async def login(request: LoginRequest, response: Response) -> LoginResponse:
    """Start an admin session by setting the session cookie."""
    if not verify_credentials(request.email, request.password):
        logger.info("admin_login_failed", email=request.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    response.set_cookie(
        key=ADMIN_COOKIE_NAME,
        value=create_session_token(settings.ADMIN_EMAIL),
        max_age=settings.ADMIN_SESSION_MAX_AGE,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        path="/",
    )
    logger.info("admin_logged_in", email=request.email)
    return LoginResponse()


@router.post("/logout", response_model=LoginResponse)
async def logout(response: Response) -> LoginResponse:
    """End the admin session."""
    response.delete_cookie(key=ADMIN_COOKIE_NAME, path="/")
    return LoginResponse()
