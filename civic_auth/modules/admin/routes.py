from fastapi import APIRouter, Depends, Query, Request
from typing import List, Optional

from civic_auth.config import settings
from civic_auth.core.dependencies import (
    get_account_repository, get_auth_provider, get_auth_service, get_current_token, require_admin
)
from civic_auth.core.rate_limit import limiter
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.accounts.schemas import Account, AccountResponse, Role
from civic_auth.modules.admin.schemas import (
    AccountUpdate, AdminLoginRequest, AdminLoginResponse, AdminMeResponse, RefreshRequest,
    RefreshResponse, SystemLogsResponse
)
from civic_auth.modules.admin.service import AdminService
from civic_auth.modules.auth.provider import AuthProvider
from civic_auth.modules.auth.schemas import MessageResponse
from civic_auth.modules.auth.service import AuthService

router = APIRouter(prefix="/admin", tags=["admin"])


def get_admin_service(
    accounts: AccountRepository = Depends(get_account_repository),
    provider: AuthProvider = Depends(get_auth_provider),
    auth_service: AuthService = Depends(get_auth_service),
) -> AdminService:
    return AdminService(accounts, provider, auth_service)


# --- PUBLIC ROUTES (No Token Required) ---

@router.post("/login", response_model=AdminLoginResponse)
@limiter.limit(settings.login_rate_limit)
async def login(
    request: Request,
    body: AdminLoginRequest,
    service: AdminService = Depends(get_admin_service)
):
    """Admin login; non-admin accounts are signed out and rejected"""
    return service.login(body.email, body.password)


@router.post("/refresh", response_model=RefreshResponse)
async def refresh(
    body: RefreshRequest,
    service: AdminService = Depends(get_admin_service)
):
    return service.refresh(body.refresh_token)


# --- PROTECTED ROUTES (Token Required) ---

@router.post("/logout", response_model=MessageResponse)
async def logout(
    admin: Account = Depends(require_admin()),
    token: str = Depends(get_current_token),
    service: AdminService = Depends(get_admin_service)
):
    service.logout(token)
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=AdminMeResponse)
async def me(
    request: Request,
    admin: Account = Depends(require_admin()),
    service: AdminService = Depends(get_admin_service)
):
    """Get current admin"""
    return service.me(admin, getattr(request.state, "auth_user", None))


@router.get("/users", response_model=List[AccountResponse])
async def list_users(
    role: Optional[Role] = None,
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    admin: Account = Depends(require_admin()),
    service: AdminService = Depends(get_admin_service)
):
    """List accounts, newest first, optionally filtered by role"""
    return service.list_accounts(role, limit, offset)


@router.patch("/users/{user_id}", response_model=AccountResponse)
async def update_user(
    user_id: str,
    body: AccountUpdate,
    admin: Account = Depends(require_admin()),
    service: AdminService = Depends(get_admin_service)
):
    """Unlock an account; changing roles requires a super admin"""
    return service.update_account(admin, user_id, body)


@router.get("/system-logs", response_model=SystemLogsResponse)
async def system_logs(
    admin: Account = Depends(require_admin(Role.SUPER_ADMIN)),
    service: AdminService = Depends(get_admin_service)
):
    """Super admin only"""
    return service.system_logs()
