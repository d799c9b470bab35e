"""
Remote analytics and auth endpoints.

    GET      /analytics?section=<overview|traffic|security|connectivity|bots|tools|anomaly>
    GET|POST /auth?action=<login|signup|logout|check>
"""
import logging
from typing import Any, Dict, Optional

import numpy as np
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse

from ..auth import AuthAction, validate_signup
from ..config import Settings
from ..errors import AuthorizationFailure, DuplicateAccountError, ValidationFailure
from ..sections import SectionId
from ..synthetic import generate
from . import database

logger = logging.getLogger("sast.server.routes")

router = APIRouter()


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings  # type: ignore[attr-defined]


def get_rng(request: Request) -> np.random.Generator:
    return request.app.state.rng  # type: ignore[attr-defined]


def bearer_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer "):] or None
    return None


async def read_json(request: Request) -> Dict[str, Any]:
    """Request body as a dict; an empty or malformed body reads as ``{}``."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


# =============================================================================
# Analytics
# =============================================================================

@router.get("/analytics", tags=["analytics"])
async def analytics(section: str = Query(default=""), rng: np.random.Generator = Depends(get_rng)):
    """Section payload. Unknown sections are rejected with 400."""
    section_id = SectionId.parse(section)
    return generate(section_id, rng)


# =============================================================================
# Auth
# =============================================================================

@router.api_route("/auth", methods=["GET", "POST"], tags=["auth"])
async def auth(
    request: Request,
    action: str = Query(default=""),
    settings: Settings = Depends(get_settings_dep),
):
    handlers = {
        AuthAction.LOGIN: _login,
        AuthAction.SIGNUP: _signup,
        AuthAction.LOGOUT: _logout,
        AuthAction.CHECK: _check,
    }
    return await handlers[AuthAction.parse(action)](request, settings)


async def _login(request: Request, settings: Settings):
    body = await read_json(request)
    email = str(body.get("email") or "").strip()
    password = str(body.get("password") or "")
    if not email or not password:
        raise ValidationFailure("Email and password are required.")

    user = database.authenticate(settings.database_path, email, password)
    if user is None:
        raise AuthorizationFailure("Invalid email or password.")

    token = database.create_session(settings.database_path, user["id"], settings.session_ttl_hours)
    logger.info(f"Issued session for user {user['id']}")
    return {
        "success": True,
        "token": token,
        "user": {"id": user["id"], "username": user["username"], "email": user["email"]},
    }


async def _signup(request: Request, settings: Settings):
    body = await read_json(request)
    username = str(body.get("username") or "").strip()
    email = str(body.get("email") or "").strip()
    password = str(body.get("password") or "")
    validate_signup(username, email, password, settings.min_password_length)

    if database.user_exists(settings.database_path, username, email):
        raise DuplicateAccountError("Username or email already taken.")

    user_id = database.create_user(settings.database_path, username, email, password)
    logger.info(f"Created user {user_id}")
    return {"success": True, "message": "Account created. You can now log in."}


async def _logout(request: Request, settings: Settings):
    token = bearer_token(request)
    if token:
        database.delete_session(settings.database_path, token)
    return {"success": True}


async def _check(request: Request, settings: Settings):
    token = bearer_token(request)
    user = database.session_user(settings.database_path, token) if token else None
    if user is None:
        return JSONResponse(status_code=401, content={"authenticated": False})
    return {"authenticated": True, "user": dict(user)}
