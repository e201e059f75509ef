"""Account endpoints: signup, signin, token refresh, signout, profile, email/password flows."""
import logging
import secrets
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

import config
from database import create_document, get_db, utcnow
from emailer import EmailNotConfigured, send_password_reset_email, send_verification_email
from ratelimit import auth_limiter
from schemas import (
    AuthResponse,
    ForgotPasswordRequest,
    ProfileUpdateRequest,
    RefreshRequest,
    ResetPasswordRequest,
    SigninRequest,
    SignoutRequest,
    SignupRequest,
    User,
    VerifyEmailRequest,
)
from security import (
    AuthError,
    consume_refresh_token,
    generate_tokens,
    get_current_user,
    hash_password,
    public_user,
    revoke_all_user_tokens,
    revoke_refresh_token,
    verify_password,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED,
             dependencies=[Depends(auth_limiter)])
async def signup(payload: SignupRequest):
    db = get_db()
    if db["users"].find_one({"email": payload.email}):
        raise HTTPException(status_code=400, detail="User already exists")

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        name=payload.name,
        email_verification_token=secrets.token_hex(32),
    )
    try:
        user_id = create_document("users", user)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="User already exists")

    doc = db["users"].find_one({"email": payload.email})
    try:
        send_verification_email(doc, user.email_verification_token)
    except EmailNotConfigured as e:
        logger.error("Failed to send verification email to %s: %s", payload.email, e)

    logger.info("New user signed up: %s", user_id)
    return {"message": "User created successfully", "user": public_user(doc), **generate_tokens(user_id)}


@router.post("/signin", response_model=AuthResponse, dependencies=[Depends(auth_limiter)])
async def signin(payload: SigninRequest):
    user = get_db()["users"].find_one({"email": payload.email})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return {"message": "Signed in successfully", "user": public_user(user), **generate_tokens(user["_id"])}


@router.post("/refresh", response_model=AuthResponse)
async def refresh(payload: RefreshRequest):
    if not payload.refresh_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Refresh token required")

    # Rotation: a refresh token is good for exactly one exchange
    try:
        record = consume_refresh_token(payload.refresh_token)
    except AuthError as e:
        logger.info("Refresh rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token")

    user = record["user_doc"]
    return {"message": "Tokens refreshed successfully", "user": public_user(user), **generate_tokens(user["_id"])}


@router.post("/signout")
async def signout(payload: SignoutRequest, current_user: dict = Depends(get_current_user)):
    if payload.refresh_token:
        revoke_refresh_token(payload.refresh_token)
    return {"message": "Signed out successfully"}


@router.post("/signout-all")
async def signout_all(current_user: dict = Depends(get_current_user)):
    revoke_all_user_tokens(current_user["_id"])
    return {"message": "Signed out from all devices"}


@router.get("/me")
async def me(current_user: dict = Depends(get_current_user)):
    return {"user": public_user(current_user)}


@router.put("/me")
async def update_me(payload: ProfileUpdateRequest, current_user: dict = Depends(get_current_user)):
    name = (payload.name or "").strip()
    if len(name) < 2:
        raise HTTPException(status_code=400, detail="Name must be at least 2 characters")
    if len(name) > 50:
        raise HTTPException(status_code=400, detail="Name must be less than 50 characters")
    if payload.bio and len(payload.bio) > 500:
        raise HTTPException(status_code=400, detail="Bio must be less than 500 characters")

    updated = get_db()["users"].find_one_and_update(
        {"_id": current_user["_id"]},
        {"$set": {
            "name": name,
            "bio": payload.bio.strip() if payload.bio else None,
            "updated_at": utcnow(),
        }},
        return_document=ReturnDocument.AFTER,
    )
    return {"message": "Profile updated successfully", "user": public_user(updated)}


@router.post("/verify-email")
async def verify_email(payload: VerifyEmailRequest):
    db = get_db()
    user = db["users"].find_one({"email_verification_token": payload.token}) if payload.token else None
    if not user:
        raise HTTPException(status_code=400, detail="Invalid verification token")

    db["users"].update_one(
        {"_id": user["_id"]},
        {"$set": {"is_email_verified": True, "email_verification_token": None, "updated_at": utcnow()}},
    )
    return {"message": "Email verified successfully"}


@router.post("/forgot-password", dependencies=[Depends(auth_limiter)])
async def forgot_password(payload: ForgotPasswordRequest):
    message = {"message": "If the email exists, a reset link has been sent"}
    db = get_db()
    user = db["users"].find_one({"email": payload.email.strip().lower()})
    if not user:
        # Same answer either way so accounts cannot be enumerated
        return message

    reset_token = secrets.token_hex(32)
    db["users"].update_one(
        {"_id": user["_id"]},
        {"$set": {
            "password_reset_token": reset_token,
            "password_reset_expires": utcnow() + timedelta(minutes=config.PASSWORD_RESET_EXPIRE_MINUTES),
            "updated_at": utcnow(),
        }},
    )
    try:
        send_password_reset_email(user, reset_token)
    except EmailNotConfigured as e:
        logger.error("Failed to send password reset email to %s: %s", user["email"], e)
    return message


@router.post("/reset-password", dependencies=[Depends(auth_limiter)])
async def reset_password(payload: ResetPasswordRequest):
    if not payload.password or len(payload.password) < 6:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    db = get_db()
    user = None
    if payload.token:
        user = db["users"].find_one({
            "password_reset_token": payload.token,
            "password_reset_expires": {"$gt": utcnow()},
        })
    if not user:
        raise HTTPException(status_code=400, detail="Invalid or expired reset token")

    db["users"].update_one(
        {"_id": user["_id"]},
        {"$set": {
            "password_hash": hash_password(payload.password),
            "password_reset_token": None,
            "password_reset_expires": None,
            "updated_at": utcnow(),
        }},
    )
    revoke_all_user_tokens(user["_id"])
    return {"message": "Password reset successfully"}
