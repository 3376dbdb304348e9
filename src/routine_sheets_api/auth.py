"""
Authentication module for bearer JWT and API key validation.
Provides FastAPI dependencies for securing the admin endpoints.
"""
import os
import jwt
from fastapi import Depends, HTTPException, Header
from typing import Optional
import logging

logger = logging.getLogger(__name__)

_jwks_client = None


def get_jwks_client():
    """Get or create the JWKS client for JWT validation."""
    global _jwks_client
    jwks_url = os.getenv("AUTH_JWKS_URL", "")
    if _jwks_client is None and jwks_url:
        _jwks_client = jwt.PyJWKClient(jwks_url)
    return _jwks_client


async def get_current_user(
    authorization: Optional[str] = Header(None),
    x_api_key: Optional[str] = Header(None, alias="X-API-Key")
) -> dict:
    """
    Authenticate via API key OR bearer JWT.
    Returns {"user_id": str, "is_moderator": bool}.

    Usage:
        @app.get("/protected")
        async def protected_route(user: dict = Depends(get_current_user)):
            return {"user_id": user["user_id"]}
    """
    # Option 1: API Key authentication
    if x_api_key:
        return authenticate_api_key(x_api_key)

    # Option 2: JWT authentication
    if authorization:
        return validate_jwt(authorization)

    raise HTTPException(
        status_code=401,
        detail="Missing authentication. Provide Authorization header or X-API-Key."
    )


async def require_admin(user: dict = Depends(get_current_user)) -> dict:
    """Only moderators may manage other users' routines."""
    if not user.get("is_moderator"):
        raise HTTPException(status_code=403, detail="Acceso restringido a administradores")
    return user


def authenticate_api_key(api_key: str) -> dict:
    """
    Resolve an X-API-Key header to a user.

    The header holds "<key>" or "<key>:<user_id>", and <key> must be one of
    the comma-separated API_KEYS. A bare key authenticates as "admin".
    API-key callers are moderators unless API_KEY_MODERATOR is false.
    """
    configured = {k.strip() for k in os.getenv("API_KEYS", "").split(",") if k.strip()}
    if not configured:
        logger.warning("No API keys configured (API_KEYS env var empty)")
        raise HTTPException(status_code=401, detail="API key authentication not configured")

    key, _, user_id = api_key.partition(":")
    if key not in configured:
        raise HTTPException(status_code=401, detail="Invalid API key")

    return {"user_id": user_id or "admin", "is_moderator": api_keys_are_moderators()}


def api_keys_are_moderators() -> bool:
    return os.getenv("API_KEY_MODERATOR", "true").strip().lower() not in ("0", "false", "no", "off")


def validate_jwt(authorization: str) -> dict:
    """Validate a bearer JWT and return the user with its moderator flag."""
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization header format")

    token = authorization.split(" ", 1)[1]
    jwks_client = get_jwks_client()

    if not jwks_client:
        raise HTTPException(
            status_code=500,
            detail="JWT validation not configured (missing AUTH_JWKS_URL)"
        )

    try:
        signing_key = jwks_client.get_signing_key_from_jwt(token)
        payload = jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            options={"verify_aud": False}
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(status_code=401, detail="Token missing user ID")

    metadata = payload.get("metadata") or {}
    is_moderator = bool(payload.get("is_moderator") or metadata.get("role") == "admin")
    return {"user_id": user_id, "is_moderator": is_moderator}
