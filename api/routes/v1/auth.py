"""
api/routes/v1/auth.py -- Registration, login and two-factor endpoints.

Routes:
  POST /api/v1/auth/register   -- create account + default vault (public)
  POST /api/v1/auth/login      -- password (+ 2FA) login; sets JWT cookie (public)
  POST /api/v1/auth/logout     -- clears cookie
  GET  /api/v1/auth/me         -- current user (requires auth)
  POST /api/v1/auth/2fa        -- enable two-factor, returns backup codes (requires auth)

Security:
  POST /login and /register are rate-limited per IP.
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on login and 2FA responses.
  Login returns one generic error for every failure cause.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.limiter import limiter
from api.models import (
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    TwoFactorEnableRequest,
    TwoFactorEnableResponse,
    UserResponse,
)
from auth.accounts import create_user, enable_two_factor
from auth.dependencies import get_current_user
from auth.tokens import authenticate_user, create_access_token, set_auth_cookie
from core.config import get_settings
from vault.models import User
from vault.store import VaultStore

router = APIRouter()


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit("10/minute")
@router.post("/auth/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> UserResponse:
    """Create an account. A default vault named "<first name>'s Vault" is created with it."""
    store: VaultStore = request.app.state.store
    user = create_user(store, body.email, body.password, body.first_name, body.last_name)
    return UserResponse.model_validate(user)


@limiter.limit(get_settings().login_rate_limit)
@router.post("/auth/login", response_model=LoginResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email, password and (when enabled) a two-factor token."""
    store: VaultStore = request.app.state.store
    user = authenticate_user(store, body.email, body.password, body.two_factor_token)
    if user is None:
        resp = JSONResponse(
            status_code=401,
            content={"error": {"code": "bad_credentials", "message": "Invalid email, password or code."}},
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    expires_in = get_settings().token_expire_seconds
    token = create_access_token(user.id, user.email)
    resp = JSONResponse(
        status_code=200,
        content=LoginResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=expires_in,
            user_id=user.id,
            email=user.email,
        ).model_dump(),
    )
    set_auth_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout")
async def logout() -> JSONResponse:
    """Clear the JWT cookie and end the session."""
    resp = JSONResponse(content={"message": "Logged out."})
    resp.delete_cookie("access_token")
    return resp


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=UserResponse)
async def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.post("/auth/2fa", response_model=TwoFactorEnableResponse)
def enable_2fa(
    request: Request,
    body: TwoFactorEnableRequest,
    current_user: User = Depends(get_current_user),
) -> JSONResponse:
    """Enable two-factor for the current user. Backup codes are shown once."""
    store: VaultStore = request.app.state.store
    codes = enable_two_factor(store, current_user.id, body.secret)
    resp = JSONResponse(content=TwoFactorEnableResponse(success=True, backup_codes=codes).model_dump())
    resp.headers["Cache-Control"] = "no-store"
    return resp
