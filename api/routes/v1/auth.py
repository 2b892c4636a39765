"""
api/routes/v1/auth.py -- Registration and login REST endpoints.

Routes:
  POST /api/v1/auth/register   -- create an identity; 201 with token
  POST /api/v1/auth/login      -- email/password login; 200 with token + JWT cookie
  POST /api/v1/auth/logout     -- clears cookie; 204 (requires auth)
  GET  /api/v1/auth/me         -- current user info (requires auth)

Security:
  POST /login is rate-limited to 10 requests/minute per IP.
  AuthService.login() equalizes timing between unknown email and wrong
  password, and both failures return the same 401 body.
  Cache-Control: no-store on every login response.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from api.limiter import LOGIN_LIMIT, limiter
from api.models import AuthResponse, ErrorDetail, ErrorResponse, LoginRequest, MeResponse, RegisterRequest
from auth.dependencies import get_current_user
from auth.models import User
from auth.service import AuthService
from auth.tokens import set_auth_cookie
from core.errors import InvalidCredentialsError

logger = logging.getLogger("orderdesk.api")

# Auth policy:
# - POST /api/v1/auth/register: public
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/logout:   requires auth (get_current_user)
# - GET  /api/v1/auth/me:       requires auth (get_current_user)
router = APIRouter()


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> AuthResponse:
    """Register a new user and return a bearer token.

    A duplicate email raises DuplicateEmailError, which the app-level
    DomainError handler answers with 400 duplicate_email.
    """
    auth_service: AuthService = request.app.state.auth_service
    result = auth_service.register(body.username, body.email, body.password)
    return AuthResponse.from_result(result)


@limiter.limit(LOGIN_LIMIT)  # must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; return the token and set the JWT cookie.

    Unknown email and wrong password produce the same 401 body.
    """
    auth_service: AuthService = request.app.state.auth_service
    try:
        result = auth_service.login(body.email, body.password)
    except InvalidCredentialsError as exc:
        resp = JSONResponse(
            status_code=exc.http_status,
            content=ErrorResponse(error=ErrorDetail(code=exc.code, message=exc.message)).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"
        return resp

    resp = JSONResponse(status_code=200, content=AuthResponse.from_result(result).model_dump())
    set_auth_cookie(resp, result.token, secure=request.app.state.settings.secure_cookies)
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/logout", status_code=204)
async def logout(request: Request, current_user: User = Depends(get_current_user)) -> Response:
    """Clear the JWT cookie.

    The token itself stays valid until it expires -- there is no server-side
    revocation list.
    """
    resp = Response(status_code=204)
    resp.delete_cookie(
        "access_token",
        httponly=True,
        samesite="strict",
        secure=request.app.state.settings.secure_cookies,
    )
    logger.info("User id=%s logged out", current_user.id)
    return resp


@router.get("/auth/me", response_model=MeResponse)
async def me(current_user: User = Depends(get_current_user)) -> MeResponse:
    """Return identity information for the currently authenticated user."""
    return MeResponse.from_user(current_user)
