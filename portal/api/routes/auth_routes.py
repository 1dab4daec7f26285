"""
Authentication Routes

POST /users/register - Register new user (multipart form, optional cover image)
POST /users/login - Login and get access + refresh tokens
POST /users/logout - End the session
POST /users/refresh-token - Rotate the refresh token
POST /users/change-password - Change password
"""

import os
from typing import Optional
from fastapi import APIRouter, Cookie, Depends, File, Form, UploadFile
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool

from portal.api.deps import get_session_service
from portal.core.auth import get_current_user
from portal.core.config import get_settings
from portal.core.errors import BadRequestError
from portal.services.session_service import SessionService
from portal.utils.file_upload import save_upload_to_temp
from portal.schemas.schemas import (
    ChangePasswordRequest, LoginData, LoginRequest, RefreshRequest, RegisterForm, TokenPair, UserPublic, envelope
)

router = APIRouter(prefix="/users", tags=["Authentication"])

ACCESS_COOKIE = "accessToken"
REFRESH_COOKIE = "refreshToken"


def _set_auth_cookies(response: JSONResponse, access_token: str, refresh_token: str) -> None:
    secure = get_settings().cookie_secure
    response.set_cookie(ACCESS_COOKIE, access_token, httponly=True, secure=secure)
    response.set_cookie(REFRESH_COOKIE, refresh_token, httponly=True, secure=secure)


def _clear_auth_cookies(response: JSONResponse) -> None:
    secure = get_settings().cookie_secure
    response.delete_cookie(ACCESS_COOKIE, httponly=True, secure=secure)
    response.delete_cookie(REFRESH_COOKIE, httponly=True, secure=secure)


@router.post("/register", status_code=201)
async def register(
    fullname: str = Form(""),
    email: str = Form(""),
    username: str = Form(""),
    password: str = Form(""),
    mobile_number: str = Form("", alias="mobileNumber"),
    birth_date: str = Form("", alias="birthDate"),
    cover_image: Optional[UploadFile] = File(None, alias="coverImage"),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Register a new user account.

    All text fields are required. After registration, login to get tokens.
    """
    try:
        form = RegisterForm(
            fullname=fullname, email=email, username=username, password=password,
            mobile_number=mobile_number, birth_date=birth_date,
        )
    except ValidationError:
        raise BadRequestError("All fields are required")

    cover_path = await save_upload_to_temp(cover_image)
    try:
        user = await run_in_threadpool(sessions.register, form.model_dump(), cover_path)
    finally:
        # Left over when registration failed before the upload
        if cover_path and os.path.exists(cover_path):
            os.remove(cover_path)

    return JSONResponse(
        status_code=201,
        content=envelope(201, UserPublic.model_validate(user), "User registered successfully"),
    )


@router.post("/login")
def login(request: LoginRequest, sessions: SessionService = Depends(get_session_service)):
    """
    Login with username or email.

    Tokens are returned in the body and set as httpOnly cookies. Include the
    access token in requests as a cookie or `Authorization: Bearer <token>`.
    """
    result = sessions.login(request.password, username=request.username, email=request.email)

    data = LoginData(
        user=UserPublic.model_validate(result["user"]),
        access_token=result["access_token"],
        refresh_token=result["refresh_token"],
    )
    response = JSONResponse(content=envelope(200, data, "User logged in successfully"))
    _set_auth_cookies(response, result["access_token"], result["refresh_token"])
    return response


@router.post("/logout")
def logout(user: dict = Depends(get_current_user), sessions: SessionService = Depends(get_session_service)):
    sessions.logout(user["_id"])
    response = JSONResponse(content=envelope(200, {}, "User logged out successfully"))
    _clear_auth_cookies(response)
    return response


@router.post("/refresh-token")
def refresh_token(
    body: Optional[RefreshRequest] = None,
    refresh_cookie: Optional[str] = Cookie(None, alias=REFRESH_COOKIE),
    sessions: SessionService = Depends(get_session_service),
):
    """
    Exchange the refresh token for a new token pair.

    The `refreshToken` cookie wins over a `refreshToken` in the body, even if
    the cookie holds a stale token.
    """
    presented = refresh_cookie or (body.refresh_token if body else None)
    result = sessions.renew(presented)

    data = TokenPair(access_token=result["access_token"], refresh_token=result["refresh_token"])
    response = JSONResponse(content=envelope(200, data, "Access token refreshed"))
    _set_auth_cookies(response, result["access_token"], result["refresh_token"])
    return response


@router.post("/change-password")
def change_password(
    request: ChangePasswordRequest,
    user: dict = Depends(get_current_user),
    sessions: SessionService = Depends(get_session_service),
):
    sessions.change_password(user["_id"], request.old_password, request.new_password)
    return envelope(200, {}, "Password changed successfully")
