# Standard e-mail/password auth, delegated to Supabase Auth.
# Mounted at settings.auth_base_path (default /api/auth).

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (sends the verification e-mail)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.admin.sign_out() - Revoke a session
- auth.verify_otp() - Confirm an e-mail address
- auth.reset_password_for_email() - Send a password reset e-mail

Account rows (role, FIN, lockout state) live in the accounts table; sign in
goes through the same lockout rules as citizen login.
"""
from fastapi import APIRouter, Depends, Request

from civic_auth.config import settings
from civic_auth.core.dependencies import get_auth_service, get_current_token
from civic_auth.core.rate_limit import limiter
from civic_auth.modules.auth.schemas import (
    ForgetPasswordRequest, LoginResponse, MessageResponse, NewPasswordRequest, SessionResponse,
    SignInRequest, SignUpRequest, SignUpResponse, VerifyEmailRequest
)
from civic_auth.modules.auth.service import AuthService

router = APIRouter(prefix=settings.auth_base_path, tags=["auth"])


@router.post("/sign-up/email", response_model=SignUpResponse, status_code=201)
async def sign_up(
    body: SignUpRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user with e-mail and password"""
    return service.sign_up(body)


@router.post("/sign-in/email", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
async def sign_in(
    request: Request,
    body: SignInRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login with e-mail and password"""
    return service.sign_in(body.email, body.password)


@router.post("/sign-out", response_model=MessageResponse)
async def sign_out(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    return service.sign_out(token)


@router.get("/get-session", response_model=SessionResponse)
async def get_session(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Current session user and account"""
    return service.get_session(token)


@router.post("/verify-email", response_model=MessageResponse)
@limiter.limit(settings.login_rate_limit)
async def verify_email(
    request: Request,
    body: VerifyEmailRequest,
    service: AuthService = Depends(get_auth_service)
):
    return service.verify_email(body.email, body.token)


@router.post("/forget-password", response_model=MessageResponse)
@limiter.limit(settings.login_rate_limit)
async def forget_password(
    request: Request,
    body: ForgetPasswordRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Send a password reset e-mail if the account exists"""
    return service.forget_password(body.email)


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    body: NewPasswordRequest,
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Set a new password using the recovery session from the reset e-mail"""
    return service.reset_password(token, body.newPassword)
