"""
Passwords, access/refresh tokens and the auth dependencies for routes.

Access tokens are short-lived JWTs. Refresh tokens are opaque random strings
stored in the refresh_tokens collection so they can be rotated and revoked.
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from bson import ObjectId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

import config
from database import create_document, get_db, to_object_id, utcnow
from schemas import RefreshToken

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


class AuthError(Exception):
    """Raised when a refresh token cannot be used."""


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not password_hash:
        return False
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(user_id: str, expires_delta: Optional[timedelta] = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {"sub": str(user_id), "type": "access", "exp": expire}
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def generate_tokens(user_id) -> dict:
    """Issue an access token and store a new refresh token for the user."""
    refresh_token = secrets.token_hex(64)
    record = RefreshToken(
        token=refresh_token,
        user=ObjectId(str(user_id)),
        expires_at=utcnow() + timedelta(days=config.REFRESH_TOKEN_EXPIRE_DAYS),
    )
    create_document("refresh_tokens", record)
    return {
        "access_token": create_access_token(str(user_id)),
        "refresh_token": refresh_token,
    }


def consume_refresh_token(token: str) -> dict:
    """
    Revoke a live refresh token and return it with its user attached.

    Match and revoke are a single find_one_and_update; a token is consumed once.
    Raises AuthError when the token is unknown, revoked, expired or orphaned.
    """
    db = get_db()
    record = db["refresh_tokens"].find_one_and_update(
        {"token": token, "is_revoked": False, "expires_at": {"$gt": utcnow()}},
        {"$set": {"is_revoked": True, "updated_at": utcnow()}},
    )
    if not record:
        raise AuthError("Invalid or expired refresh token")

    user = db["users"].find_one({"_id": record["user"]})
    if not user:
        raise AuthError("Refresh token owner no longer exists")
    record["user_doc"] = user
    return record


def revoke_refresh_token(token: str) -> None:
    get_db()["refresh_tokens"].update_one(
        {"token": token},
        {"$set": {"is_revoked": True, "updated_at": utcnow()}},
    )


def revoke_all_user_tokens(user_id) -> int:
    result = get_db()["refresh_tokens"].update_many(
        {"user": ObjectId(str(user_id)), "is_revoked": False},
        {"$set": {"is_revoked": True, "updated_at": utcnow()}},
    )
    logger.info("Revoked %d refresh tokens for user %s", result.modified_count, user_id)
    return result.modified_count


def _user_from_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token expired")
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid access token")

    user_id = to_object_id(payload.get("sub")) if payload.get("type") == "access" else None
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid access token")

    user = get_db()["users"].find_one({"_id": user_id})
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="User not found")
    return user


# Auth helpers
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> dict:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Access token required")
    return _user_from_token(credentials.credentials)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[dict]:
    if credentials is None or credentials.scheme.lower() != "bearer":
        return None
    try:
        return _user_from_token(credentials.credentials)
    except HTTPException:
        return None


def public_user(user: dict) -> dict:
    """User document without password hash and tokens."""
    return {
        "id": str(user["_id"]),
        "email": user.get("email"),
        "name": user.get("name"),
        "bio": user.get("bio"),
        "avatar_url": user.get("avatar_url"),
        "is_email_verified": user.get("is_email_verified", False),
        "created_at": user.get("created_at"),
        "updated_at": user.get("updated_at"),
    }
