"""
JWT Authentication and role-based authorization

Tokens are issued by an external identity provider. They are verified with
a shared secret (HS256) when JWT_SECRET is configured, otherwise with the
provider's published JWKS. The 'sub' claim names a row in the users table,
whose role drives authorization.
"""
import time
import logging
from typing import Callable, Optional

import httpx
from fastapi import Depends, HTTPException, Header
from jose import jwt, jwk
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app import config
from app.db.session import get_db
from app.db.models.user import User as UserORM
from app.models.user import Actor, UserRole

logger = logging.getLogger(__name__)

# JWKS cache
_jwks_cache: Optional[dict] = None
_jwks_cache_time: float = 0
JWKS_CACHE_DURATION = 60 * 60  # 1 hour in seconds


async def get_jwks() -> dict:
    """
    Fetch and cache the JWKS of the identity provider
    Returns cached JWKS if available and not expired
    """
    global _jwks_cache, _jwks_cache_time

    now = time.time()

    if _jwks_cache and (now - _jwks_cache_time) < JWKS_CACHE_DURATION:
        return _jwks_cache

    if not config.AUTH_JWKS_URL:
        logger.error("Neither JWT_SECRET nor AUTH_JWKS_URL is configured")
        raise HTTPException(
            status_code=500,
            detail="Authentication is not properly configured"
        )

    logger.info(f"Fetching JWKS from: {config.AUTH_JWKS_URL}")

    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(config.AUTH_JWKS_URL, timeout=10.0)
            response.raise_for_status()
            _jwks_cache = response.json()
            _jwks_cache_time = now
            logger.info(f"JWKS cached with {len(_jwks_cache.get('keys', []))} keys")
            return _jwks_cache
    except httpx.HTTPError as e:
        logger.error(f"Failed to fetch JWKS: {e}")
        # If we have a cached version, use it even if expired
        if _jwks_cache:
            logger.warning("Using expired JWKS cache due to fetch failure")
            return _jwks_cache
        raise HTTPException(
            status_code=500,
            detail="Failed to fetch authentication keys"
        )


def _decode_options() -> dict:
    # Audience is only checked when one is configured
    options = {"options": {"verify_aud": bool(config.AUTH_JWT_AUDIENCE)}}
    if config.AUTH_JWT_AUDIENCE:
        options["audience"] = config.AUTH_JWT_AUDIENCE
    if config.AUTH_JWT_ISSUER:
        options["issuer"] = config.AUTH_JWT_ISSUER
    return options


async def _decode_with_jwks(token: str) -> dict:
    jwks = await get_jwks()

    unverified_header = jwt.get_unverified_header(token)
    kid = unverified_header.get("kid")
    if not kid:
        raise HTTPException(
            status_code=401,
            detail="Token missing key ID (kid)"
        )

    key_data = next(
        (key for key in jwks.get("keys", []) if key.get("kid") == kid),
        None
    )
    if not key_data:
        raise HTTPException(
            status_code=401,
            detail=f"Key with ID '{kid}' not found in JWKS"
        )

    return jwt.decode(
        token,
        jwk.construct(key_data),
        algorithms=["ES256", "RS256"],
        **_decode_options(),
    )


async def verify_token(token: str) -> dict:
    """
    Verify a bearer token and return its payload.
    Raises HTTPException(401) if verification fails.
    """
    try:
        if config.JWT_SECRET:
            return jwt.decode(
                token,
                config.JWT_SECRET,
                algorithms=["HS256"],
                **_decode_options(),
            )
        return await _decode_with_jwks(token)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=401,
            detail="Token has expired"
        )
    except jwt.JWTClaimsError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Token validation failed: {str(e)}"
        )
    except jwt.JWTError as e:
        raise HTTPException(
            status_code=401,
            detail=f"Invalid token: {str(e)}"
        )


async def get_current_user_id(
    authorization: Optional[str] = Header(None)
) -> str:
    """
    FastAPI dependency to extract and verify JWT token from Authorization header
    Returns the authenticated user ID
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail="Authorization header missing"
        )

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(
            status_code=401,
            detail="Invalid authorization header format. Expected 'Bearer <token>'"
        )

    payload = await verify_token(token)

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=401,
            detail="Invalid token: no user ID"
        )
    return user_id


async def get_current_actor(
    user_id: str = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db)
) -> Actor:
    """
    FastAPI dependency resolving the authenticated user and their role
    """
    try:
        result = await db.execute(select(UserORM).where(UserORM.id == user_id))
        user = result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Failed to load user {user_id}: {e}")
        raise HTTPException(
            status_code=500,
            detail="Failed to load user"
        )

    if not user:
        logger.warning(f"Token subject {user_id} has no user record")
        raise HTTPException(
            status_code=401,
            detail="User not found"
        )

    return Actor(id=user.id, role=UserRole(user.role))


def require_roles(*roles: UserRole) -> Callable:
    """
    Build a dependency that only lets the given roles through.

    Usage:
        @router.delete("/{task_id}")
        async def delete_task(actor: Actor = Depends(require_roles(UserRole.ADMIN))):
            ...
    """
    allowed = set(roles)

    async def dependency(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            logger.warning(f"User {actor.id} with role '{actor.role.value}' denied")
            raise HTTPException(
                status_code=403,
                detail="You do not have permission to perform this action"
            )
        return actor

    return dependency
