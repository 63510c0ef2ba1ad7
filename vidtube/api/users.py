"""User, session and channel profile endpoints."""

import json
import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, File, Form, Request, Response, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.auth import get_current_user, get_optional_user
from vidtube.config import get_settings
from vidtube.constants import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from vidtube.db import get_db
from vidtube.db.crud import (
    authenticate_user,
    change_password,
    create_user,
    ensure_available,
    issue_tokens,
    replace_avatar,
    replace_cover,
    revoke_refresh_token,
    rotate_refresh_token,
    update_account,
)
from vidtube.db.queries import get_channel_profile, get_watch_history
from vidtube.errors import BadRequestError, NotFoundError, UnauthorizedError
from vidtube.models.schemas import (
    AccountUpdate,
    ApiResponse,
    ChangePasswordRequest,
    ChannelProfile,
    LoginRequest,
    LoginResponse,
    RefreshTokenRequest,
    TokenPair,
    UserRead,
    UserRegister,
    VideoListItem,
    ok,
    parse_or_400,
)
from vidtube.models.user import User
from vidtube.services.storage import (
    BlobStorage,
    delete_quietly,
    extract_public_id,
    get_storage,
    upload_or_none,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def set_auth_cookies(response: Response, tokens: TokenPair) -> None:
    settings = get_settings()
    options: dict[str, Any] = {
        "httponly": True,
        "secure": settings.is_production,
        "samesite": "lax",
    }
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        tokens.access_token,
        max_age=settings.access_token_expire_minutes * 60,
        **options,
    )
    response.set_cookie(
        REFRESH_TOKEN_COOKIE,
        tokens.refresh_token,
        max_age=settings.refresh_token_expire_days * 24 * 60 * 60,
        **options,
    )


def clear_auth_cookies(response: Response) -> None:
    response.delete_cookie(ACCESS_TOKEN_COOKIE)
    response.delete_cookie(REFRESH_TOKEN_COOKIE)


async def read_payload(request: Request) -> dict[str, Any]:
    """Request body as a dict, from JSON or form encoding."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form = await request.form()
        return {key: value for key, value in form.items() if isinstance(value, str)}
    body = await request.body()
    if not body:
        return {}
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as e:
        raise BadRequestError("Request body must be valid JSON") from e
    if not isinstance(payload, dict):
        raise BadRequestError("Request body must be a JSON object")
    return payload


@router.post("/register", response_model=ApiResponse[UserRead], status_code=201)
async def register(
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
    username: Annotated[str, Form()],
    email: Annotated[str, Form()],
    full_name: Annotated[str, Form(alias="fullName")],
    password: Annotated[str, Form()],
    avatar: Annotated[UploadFile | None, File()] = None,
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse:
    """Register a new user with an avatar and optional cover image."""
    data = parse_or_400(
        UserRegister, username=username, email=email, full_name=full_name, password=password
    )
    if avatar is None or not avatar.filename:
        raise BadRequestError("Avatar file is required")

    await ensure_available(db, data.username, data.email)

    avatar_blob = await upload_or_none(storage, avatar, resource_type="image")
    if avatar_blob is None:
        raise BadRequestError("Avatar file is required")
    cover_blob = await upload_or_none(storage, cover_image, resource_type="image")

    user = await create_user(db, data, avatar_blob, cover_blob)
    logger.info(f"User registered: {user.username}")
    return ok(UserRead.model_validate(user), "User registered successfully", 201)


@router.post("/login", response_model=ApiResponse[LoginResponse])
async def login(
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """Log in with username or email and password (JSON or form body)."""
    payload = await read_payload(request)
    data = parse_or_400(
        LoginRequest,
        username=payload.get("username"),
        email=payload.get("email"),
        password=payload.get("password", ""),
    )
    user = await authenticate_user(db, data.password, username=data.username, email=data.email)
    tokens = await issue_tokens(db, user)
    set_auth_cookies(response, tokens)
    return ok(
        LoginResponse(
            user=UserRead.model_validate(user),
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
        ),
        "User logged in successfully",
    )


@router.post("/logout", response_model=ApiResponse[dict])
async def logout(
    response: Response,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    await revoke_refresh_token(db, user)
    clear_auth_cookies(response)
    return ok({}, "User logged out successfully")


@router.post("/refreshToken", response_model=ApiResponse[TokenPair])
async def refresh_access_token(
    request: Request,
    response: Response,
    db: Annotated[AsyncSession, Depends(get_db)],
    data: Annotated[RefreshTokenRequest | None, Body()] = None,
) -> ApiResponse:
    """Rotate the token pair using the refresh token (cookie first, then body)."""
    incoming = request.cookies.get(REFRESH_TOKEN_COOKIE) or (data.refresh_token if data else None)
    if not incoming:
        raise UnauthorizedError("Unauthorized request")

    _, tokens = await rotate_refresh_token(db, incoming)
    set_auth_cookies(response, tokens)
    return ok(tokens, "Access token refreshed")


@router.get("/me", response_model=ApiResponse[UserRead])
async def get_me(user: Annotated[User, Depends(get_current_user)]) -> ApiResponse:
    return ok(UserRead.model_validate(user), "Current user fetched successfully")


@router.post("/changePassword", response_model=ApiResponse[dict])
async def change_current_password(
    data: ChangePasswordRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    await change_password(db, user, data.old_password, data.new_password)
    return ok({}, "Password changed successfully")


@router.patch("/account", response_model=ApiResponse[UserRead])
async def update_account_details(
    request: Request,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    """Update full name and/or email."""
    payload = await read_payload(request)
    data = parse_or_400(
        AccountUpdate,
        full_name=payload.get("fullName", payload.get("full_name")),
        email=payload.get("email"),
    )
    user = await update_account(db, user, data)
    return ok(UserRead.model_validate(user), "Account details updated successfully")


@router.patch("/avatar", response_model=ApiResponse[UserRead])
async def update_avatar(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
    avatar: Annotated[UploadFile | None, File()] = None,
) -> ApiResponse:
    blob = await upload_or_none(storage, avatar, resource_type="image")
    if blob is None:
        raise BadRequestError("Avatar file is missing")

    previous_url = await replace_avatar(db, user, blob)
    await delete_quietly(storage, extract_public_id(previous_url), resource_type="image")
    return ok(UserRead.model_validate(user), "Avatar image updated successfully")


@router.patch("/coverImage", response_model=ApiResponse[UserRead])
async def update_cover_image(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    storage: Annotated[BlobStorage, Depends(get_storage)],
    cover_image: Annotated[UploadFile | None, File(alias="coverImage")] = None,
) -> ApiResponse:
    blob = await upload_or_none(storage, cover_image, resource_type="image")
    if blob is None:
        raise BadRequestError("Cover image file is missing")

    previous_url = await replace_cover(db, user, blob)
    await delete_quietly(storage, extract_public_id(previous_url), resource_type="image")
    return ok(UserRead.model_validate(user), "Cover image updated successfully")


@router.get("/c/{username}", response_model=ApiResponse[ChannelProfile])
async def get_user_channel_profile(
    username: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    viewer: Annotated[User | None, Depends(get_optional_user)],
) -> ApiResponse:
    if not username.strip():
        raise BadRequestError("Username is missing")

    profile = await get_channel_profile(db, username, viewer.id if viewer else None)
    if profile is None:
        raise NotFoundError("Channel does not exist")
    return ok(ChannelProfile(**profile), "User channel fetched successfully")


@router.get("/history", response_model=ApiResponse[list[VideoListItem]])
async def get_user_watch_history(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApiResponse:
    history = await get_watch_history(db, user.id)
    return ok(history, "Watch history fetched successfully")
