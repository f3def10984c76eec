"""Registration, login and logout endpoints."""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_session_store
from core.auth import (
    LOGIN_PATH,
    clear_session_cookie,
    get_session_token,
    set_session_cookie,
)
from models.user import User
from schemas.session_user import SessionUser
from schemas.user import UserLogin, UserRegister
from services import user_service
from services.session_store import SessionStore


router = APIRouter(tags=["auth"])


async def _start_session(store: SessionStore, user: User) -> RedirectResponse:
    token = await store.create(SessionUser(id=user.id, name=user.name, email=user.email))
    response = RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, token)
    return response


@router.post("/register", status_code=status.HTTP_303_SEE_OTHER)
async def register(
    data: UserRegister,
    db: AsyncSession = Depends(get_async_session),
    store: SessionStore = Depends(get_session_store),
) -> RedirectResponse:
    """Create an account and log it in; redirects to the task list."""
    try:
        user = await user_service.register_user(db, data)
    except user_service.EmailTakenError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Email already used.",
        ) from None
    return await _start_session(store, user)


@router.post("/login", status_code=status.HTTP_303_SEE_OTHER)
async def login(
    data: UserLogin,
    db: AsyncSession = Depends(get_async_session),
    store: SessionStore = Depends(get_session_store),
) -> RedirectResponse:
    """
    Log in with email and password; redirects to the task list.

    Unknown email and wrong password produce the same 401 message.
    """
    try:
        user = await user_service.authenticate_user(db, data.email, data.password)
    except user_service.InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password.",
        ) from None
    return await _start_session(store, user)


@router.post("/logout", status_code=status.HTTP_303_SEE_OTHER)
async def logout(
    request: Request,
    store: SessionStore = Depends(get_session_store),
) -> RedirectResponse:
    """Destroy the current session (if any) and redirect to the login page."""
    token = get_session_token(request)
    if token is not None:
        await store.delete(token)
    response = RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response)
    return response
