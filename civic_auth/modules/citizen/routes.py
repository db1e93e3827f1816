from fastapi import APIRouter, Depends, Request

from civic_auth.config import settings
from civic_auth.core.dependencies import (
    get_account_repository, get_auth_provider, get_auth_service, get_fayda_client
)
from civic_auth.core.rate_limit import limiter
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.auth.provider import AuthProvider
from civic_auth.modules.auth.schemas import LoginResponse, MessageResponse
from civic_auth.modules.auth.service import AuthService
from civic_auth.modules.citizen.schemas import (
    CitizenLoginRequest, CompleteRegisterRequest, InitiateRegisterRequest, InitiateResetRequest,
    OtpSentResponse, RegisterResponse, ResetPasswordRequest
)
from civic_auth.modules.citizen.service import CitizenService
from civic_auth.modules.fayda.client import FaydaClient

router = APIRouter(prefix="/citizen", tags=["citizen"])


def get_citizen_service(
    accounts: AccountRepository = Depends(get_account_repository),
    fayda: FaydaClient = Depends(get_fayda_client),
    provider: AuthProvider = Depends(get_auth_provider),
    auth_service: AuthService = Depends(get_auth_service),
) -> CitizenService:
    return CitizenService(
        accounts,
        fayda,
        provider,
        auth_service,
        phone_country_code=settings.phone_country_code,
        min_password_length=settings.min_password_length,
        max_password_length=settings.max_password_length,
    )


@router.post("/initiate-register", response_model=OtpSentResponse)
@limiter.limit(settings.login_rate_limit)
async def initiate_register(
    request: Request,
    body: InitiateRegisterRequest,
    service: CitizenService = Depends(get_citizen_service)
):
    """Start registration: Fayda sends an OTP for the FIN"""
    return service.initiate_registration(body.fin)


@router.post("/complete-register", response_model=RegisterResponse)
@limiter.limit(settings.login_rate_limit)
async def complete_register(
    request: Request,
    body: CompleteRegisterRequest,
    service: CitizenService = Depends(get_citizen_service)
):
    """Finish registration after Fayda OTP verification"""
    return service.complete_registration(body)


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    body: CitizenLoginRequest,
    service: CitizenService = Depends(get_citizen_service)
):
    """Login with FIN or phone number"""
    return service.login(body)


@router.post("/initiate-reset", response_model=MessageResponse)
@limiter.limit(settings.login_rate_limit)
async def initiate_reset(
    request: Request,
    body: InitiateResetRequest,
    service: CitizenService = Depends(get_citizen_service)
):
    """Request a password reset OTP via Fayda"""
    return service.initiate_reset(body.fin)


@router.post("/reset-password", response_model=MessageResponse)
@limiter.limit(settings.login_rate_limit)
async def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    service: CitizenService = Depends(get_citizen_service)
):
    """Set a new password after Fayda OTP verification"""
    return service.reset_password(body)
