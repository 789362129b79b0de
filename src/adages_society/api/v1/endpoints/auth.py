# src/adages_society/api/v1/endpoints/auth.py
"""Authentication endpoints: registration, login and password recovery."""

from fastapi import APIRouter, Request, status

from adages_society.api.v1.dependencies import SessionDep, client_key, enforce_rate_limit
from adages_society.core.security import create_access_token
from adages_society.schemas.common import ApiResponse
from adages_society.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserProfile,
    VerifyEmailRequest,
)
from adages_society.services import user_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register", response_model=ApiResponse[UserProfile], status_code=status.HTTP_201_CREATED
)
async def register(
    payload: RegisterRequest, request: Request, db: SessionDep
) -> ApiResponse[UserProfile]:
    """Create an account; a verification link is emailed to the new member."""
    enforce_rate_limit(f"register:{client_key(request)}")
    user = user_service.register_user(db, payload)
    return ApiResponse(
        data=UserProfile.model_validate(user),
        message="Account created. Please check your email to verify your address.",
    )


@router.post("/login", response_model=ApiResponse[TokenResponse])
async def login(
    payload: LoginRequest, request: Request, db: SessionDep
) -> ApiResponse[TokenResponse]:
    enforce_rate_limit(f"login:{client_key(request)}")
    user = user_service.authenticate(db, payload.email, payload.password)
    token = create_access_token(user.id, {"role": user.role})
    return ApiResponse(
        data=TokenResponse(access_token=token, user=UserProfile.model_validate(user)),
        message="Logged in",
    )


@router.post("/verify-email", response_model=ApiResponse[None])
async def verify_email(payload: VerifyEmailRequest, db: SessionDep) -> ApiResponse[None]:
    changed = user_service.verify_email(db, payload.email, payload.token)
    message = "Email verified" if changed else "Email already verified"
    return ApiResponse(message=message)


@router.post("/forgot-password", response_model=ApiResponse[None])
async def forgot_password(
    payload: ForgotPasswordRequest, request: Request, db: SessionDep
) -> ApiResponse[None]:
    """Always succeeds so the response does not reveal which emails exist."""
    enforce_rate_limit(f"forgot:{client_key(request)}")
    user_service.issue_password_reset(db, payload.email)
    return ApiResponse(
        message="If an account exists for that email, a reset link has been sent."
    )


@router.post("/reset-password", response_model=ApiResponse[None])
async def reset_password(payload: ResetPasswordRequest, db: SessionDep) -> ApiResponse[None]:
    user_service.reset_password(db, payload.token, payload.password)
    return ApiResponse(message="Password updated")
