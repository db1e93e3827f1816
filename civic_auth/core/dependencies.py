"""
Core dependencies: service wiring and route protection.
"""

from fastapi import Depends, Request, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from datetime import timedelta
from supabase import Client
from typing import Callable, Optional
import logging

from civic_auth.config import settings
from civic_auth.core.errors import AuthenticationFailed, Forbidden, NotFound
from civic_auth.database.supabase_client import get_supabase, get_supabase_anon
from civic_auth.modules.accounts.lockout import LockoutPolicy, utc_now
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.accounts.schemas import Account, Role
from civic_auth.modules.auth.provider import AuthProvider, AuthUser, SupabaseAuthProvider
from civic_auth.modules.auth.service import AuthService
from civic_auth.modules.fayda.client import FaydaClient

logger = logging.getLogger(__name__)

security = HTTPBearer()

_fayda_client: Optional[FaydaClient] = None


def get_account_repository(supabase: Client = Depends(get_supabase)) -> AccountRepository:
    return AccountRepository(supabase, settings.accounts_table)


def get_auth_provider(
    supabase: Client = Depends(get_supabase),
    supabase_anon: Client = Depends(get_supabase_anon),
) -> AuthProvider:
    return SupabaseAuthProvider(client=supabase_anon, admin_client=supabase)


def get_fayda_client() -> FaydaClient:
    global _fayda_client
    if _fayda_client is None:
        _fayda_client = FaydaClient(settings.fayda_api_url, timeout=settings.fayda_timeout_seconds)
    return _fayda_client


def get_lockout_policy() -> LockoutPolicy:
    return LockoutPolicy(
        max_attempts=settings.max_failed_login_attempts,
        lock_duration=timedelta(minutes=settings.lockout_minutes),
    )


def get_clock() -> Callable:
    return utc_now


def get_auth_service(
    accounts: AccountRepository = Depends(get_account_repository),
    provider: AuthProvider = Depends(get_auth_provider),
    policy: LockoutPolicy = Depends(get_lockout_policy),
    clock: Callable = Depends(get_clock),
) -> AuthService:
    return AuthService(accounts, provider, policy, public_base_url=settings.public_base_url, clock=clock)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def require_admin(required_role: Optional[Role] = None):
    """Factory for a dependency that admits admins, or only super admins when asked."""
    def check_admin(
        request: Request,
        token: str = Depends(get_current_token),
        provider: AuthProvider = Depends(get_auth_provider),
        accounts: AccountRepository = Depends(get_account_repository),
    ) -> Account:
        user: Optional[AuthUser] = provider.get_user(token)
        if user is None:
            raise AuthenticationFailed("Invalid or Expired Token")

        account = accounts.get_by_id(user.id)
        if account is None:
            raise NotFound("Profile not found")

        if not account.role.is_admin:
            raise Forbidden("Unauthorized: Admins Only")
        if required_role == Role.SUPER_ADMIN and account.role != Role.SUPER_ADMIN:
            raise Forbidden("Unauthorized: Super Admins Only")

        request.state.auth_user = user
        return account
    return check_admin
