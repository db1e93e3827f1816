import logging
from datetime import datetime, timezone
from typing import List, Optional

from civic_auth.core.errors import AuthenticationFailed, Forbidden, NotFound, ValidationFailed
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.accounts.schemas import Account, AccountResponse, Role
from civic_auth.modules.admin.schemas import (
    AccountUpdate, AdminLoginResponse, AdminMeResponse, AdminUser, RefreshResponse, SessionPayload,
    SystemLogEntry, SystemLogsResponse
)
from civic_auth.modules.auth.provider import AuthProvider, AuthSession, AuthUser
from civic_auth.modules.auth.service import AuthService

logger = logging.getLogger(__name__)

STARTED_AT = datetime.now(timezone.utc)


def _session_payload(session: AuthSession) -> SessionPayload:
    return SessionPayload(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        expires_at=session.expires_at,
        token_type=session.token_type,
    )


class AdminService:
    def __init__(self, accounts: AccountRepository, provider: AuthProvider, auth_service: AuthService):
        self.accounts = accounts
        self.provider = provider
        self.auth_service = auth_service

    def login(self, email: Optional[str], password: Optional[str]) -> AdminLoginResponse:
        if not email or not password:
            raise ValidationFailed("Missing credentials")

        account = self.accounts.get_by_email(email)
        if account is None:
            raise AuthenticationFailed("Invalid Credentials")

        _, session = self.auth_service.authenticate_account(account, password)

        if not account.role.is_admin:
            # Do not leave a live session behind for a non-admin
            self.provider.sign_out(session.access_token)
            logger.warning("Non-admin account %s attempted admin login", account.id)
            raise Forbidden("Unauthorized: Access denied for non-admin accounts.")

        return AdminLoginResponse(
            session=_session_payload(session),
            user=AdminUser(id=account.id, name=account.full_name, email=account.email, role=account.role),
        )

    def refresh(self, refresh_token: Optional[str]) -> RefreshResponse:
        if not refresh_token:
            raise ValidationFailed("Missing Refresh Token")
        session = self.provider.refresh(refresh_token)
        if session is None:
            raise AuthenticationFailed("Session Expired. Please Login Again.")
        return RefreshResponse(session=_session_payload(session))

    def logout(self, token: str) -> None:
        self.provider.sign_out(token)

    def me(self, account: Account, user: Optional[AuthUser]) -> AdminMeResponse:
        return AdminMeResponse(
            id=account.id,
            email=account.email,
            role=account.role,
            last_login=user.last_sign_in_at if user else None,
        )

    def list_accounts(self, role: Optional[Role], limit: int, offset: int) -> List[AccountResponse]:
        return [
            AccountResponse.model_validate(account)
            for account in self.accounts.list_accounts(role=role, limit=limit, offset=offset)
        ]

    def update_account(self, actor: Account, account_id: str, changes: AccountUpdate) -> AccountResponse:
        fields = {}
        if changes.unlock:
            fields["failed_login_attempts"] = 0
            fields["locked_until"] = None
        if changes.role is not None:
            if actor.role != Role.SUPER_ADMIN:
                raise Forbidden("Unauthorized: Super Admins Only")
            if actor.id == account_id and changes.role != Role.SUPER_ADMIN:
                raise ValidationFailed("Super admins cannot demote themselves")
            fields["role"] = changes.role
        if not fields:
            raise ValidationFailed("Nothing to update")

        account = self.accounts.update(account_id, fields)
        if account is None:
            raise NotFound("User not found")
        logger.info("Admin %s updated account %s: %s", actor.id, account_id, sorted(fields))
        return AccountResponse.model_validate(account)

    def system_logs(self) -> SystemLogsResponse:
        return SystemLogsResponse(logs=[
            SystemLogEntry(id=1, event="System Started", time=STARTED_AT),
            SystemLogEntry(id=2, event="Logs Requested", time=datetime.now(timezone.utc)),
        ])
