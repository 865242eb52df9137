from fastapi import Header, HTTPException, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import jwt

from credably.config import get_settings
from credably.database import get_db
from credably.models.user import User
from credably.utils.logger import logger, request_user_id_var


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"}
    )


def extract_session_token(request: Request, authorization: Optional[str]) -> Optional[str]:
    """
    Session token from "Authorization: Bearer <jwt>", falling back to the
    session cookie set by the web sign-in flow
    """
    if authorization:
        parts = authorization.split()
        if len(parts) != 2 or parts[0].lower() != "bearer":
            raise _unauthorized()
        return parts[1]
    return request.cookies.get(get_settings().session_cookie_name)


def decode_session_token(token: str) -> dict:
    """Verify an HS256 session JWT and return its claims"""
    settings = get_settings()
    if not settings.auth_secret:
        logger.error("[Auth] AUTH_SECRET is not configured")
        raise HTTPException(status_code=500, detail="Server misconfiguration: session secret not set")

    try:
        return jwt.decode(
            token,
            settings.auth_secret,
            algorithms=["HS256"],
            options={"verify_aud": False}
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized()
    except jwt.InvalidTokenError as e:
        logger.warning(f"[Auth] Invalid session token: {e}")
        raise _unauthorized()


async def get_current_user_id(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
) -> str:
    """
    Dependency resolving the signed-in user's id

    Usage:
        @router.get("/endpoint")
        async def endpoint(user_id: str = Depends(get_current_user_id)):
            ...

    The user row is created on first sight so every owned table can
    reference it.
    """
    token = extract_session_token(request, authorization)
    if not token:
        raise _unauthorized()

    claims = decode_session_token(token)
    user_id = claims.get("sub") or claims.get("id")
    if not user_id:
        raise _unauthorized()
    user_id = str(user_id)

    user = await db.get(User, user_id)
    if user is None:
        user = User(id=user_id, email=claims.get("email"), name=claims.get("name"), image=claims.get("picture"))
        db.add(user)
        await db.commit()
        logger.info(f"[Auth] Created user record for {user_id}")

    request_user_id_var.set(user_id)
    return user_id


def check_ownership(record, user_id: str, label: str = "Record"):
    """
    404 when the record doesn't exist, 403 when it belongs to another user.
    Returns the record so lookups read as one line in routes.
    """
    if record is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    if record.user_id != user_id:
        raise HTTPException(status_code=403, detail="Forbidden")
    return record
