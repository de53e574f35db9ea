from typing import Optional

import structlog
from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status

from linkhub_app.config import settings
from linkhub_app.dependencies import get_auth_service, require_user
from linkhub_app.models.user import User
from linkhub_app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from linkhub_app.schemas.common import MessageResponse
from linkhub_app.services.auth_service import AuthService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["auth"])


def set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
    )


async def start_session(auth_service: AuthService, response: Response, user: User, failure: str) -> None:
    session_id = await auth_service.create_session(user.username)
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=failure
        )
    set_session_cookie(response, session_id)


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Create an account and sign it in"""
    user = await auth_service.register(
        data.email,
        data.username,
        data.password,
        data.display_name or data.username,
    )
    if not user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username or email already exists"
        )

    await start_session(auth_service, response, user, "Registration failed. Please try again.")
    return AuthResponse(user=user)


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Sign in with a username or an email address"""
    user = await auth_service.login(data.username_or_email, data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials"
        )

    await start_session(auth_service, response, user, "Login failed. Please try again.")
    logger.info("user_logged_in", username=user.username)
    return AuthResponse(user=user)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    session_id: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    auth_service: AuthService = Depends(get_auth_service)
):
    """Drop the current session (safe to call when signed out)"""
    await auth_service.logout(session_id)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=User)
async def me(user: User = Depends(require_user)):
    """The signed-in user"""
    return user
