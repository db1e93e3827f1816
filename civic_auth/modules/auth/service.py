import logging
from typing import Callable, Optional, Tuple

from civic_auth.core.errors import (
    AccountLocked, AuthenticationFailed, Conflict, UpstreamError, ValidationFailed
)
from civic_auth.modules.accounts.lockout import LockoutPolicy, utc_now
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.accounts.schemas import Account, AccountResponse, AccountSummary, Role
from civic_auth.modules.auth.provider import AuthProvider, AuthSession, AuthUser
from civic_auth.modules.auth.schemas import (
    LoginResponse, MessageResponse, SessionResponse, SessionUser, SignUpRequest, SignUpResponse
)

logger = logging.getLogger(__name__)


class AuthService:
    """Password login guarded by lockout, plus the delegated e-mail/password flows."""

    def __init__(
        self,
        accounts: AccountRepository,
        provider: AuthProvider,
        policy: LockoutPolicy,
        public_base_url: str = "",
        clock: Callable = utc_now,
    ):
        self.accounts = accounts
        self.provider = provider
        self.policy = policy
        self.public_base_url = public_base_url.rstrip("/")
        self.clock = clock

    def authenticate_account(self, account: Account, password: str) -> Tuple[AuthUser, AuthSession]:
        """Check a password for a resolved account, applying the lockout rules."""
        now = self.clock()
        if self.policy.is_locked(account.locked_until, now):
            minutes = self.policy.minutes_remaining(account.locked_until, now)
            raise AccountLocked(f"Account locked. Try again in {minutes} minutes.")

        result = self.provider.authenticate(account.email, password)
        if result is None:
            outcome = self.accounts.record_failed_login(account, self.policy, now)
            if outcome.locked:
                logger.warning("Account %s locked after %d failed logins", account.id, outcome.attempts)
                raise AccountLocked(
                    f"Too many failed attempts. Account locked for {self.policy.lock_minutes} minutes."
                )
            logger.info("Failed login for account %s (%d/%d)", account.id, outcome.attempts, self.policy.max_attempts)
            raise AuthenticationFailed(
                f"Invalid credentials. {outcome.remaining_attempts} attempts remaining."
            )

        self.accounts.clear_failed_logins(account.id)
        return result

    def discard_user(self, user_id: str) -> None:
        """Remove a managed-auth user whose account row was never written."""
        try:
            self.provider.delete_user(user_id)
        except UpstreamError:
            logger.exception("Orphaned auth user %s could not be removed", user_id)

    def login_response(self, account: Account, session: AuthSession) -> LoginResponse:
        return LoginResponse(
            token=session.access_token,
            refresh_token=session.refresh_token,
            expires_in=session.expires_in,
            user=AccountSummary.from_account(account),
        )

    def sign_up(self, request: SignUpRequest) -> SignUpResponse:
        if self.accounts.email_exists(request.email):
            raise Conflict("Email already registered")
        user = self.provider.sign_up(
            request.email, request.password, request.name, redirect_to=self.public_base_url or None
        )
        try:
            account = self.accounts.create({
                "id": user.id,
                "email": request.email,
                "full_name": request.name,
                "role": Role.CITIZEN,
                "email_verified": user.email_confirmed,
            })
        except Exception:
            self.discard_user(user.id)
            raise
        return SignUpResponse(
            message="Registration successful. Check your e-mail to verify your account.",
            user=AccountSummary.from_account(account),
        )

    def sign_in(self, email: str, password: str) -> LoginResponse:
        account = self.accounts.get_by_email(email)
        if account is None:
            raise AuthenticationFailed("Invalid credentials")
        _, session = self.authenticate_account(account, password)
        return self.login_response(account, session)

    def sign_out(self, access_token: str) -> MessageResponse:
        self.provider.sign_out(access_token)
        return MessageResponse(message="Logged out successfully")

    def require_user(self, access_token: str) -> AuthUser:
        user = self.provider.get_user(access_token)
        if user is None:
            raise AuthenticationFailed("Invalid or Expired Token")
        return user

    def get_session(self, access_token: str) -> SessionResponse:
        user = self.require_user(access_token)
        account = self.accounts.get_by_id(user.id)
        return SessionResponse(
            user=SessionUser(id=user.id, email=user.email, email_confirmed=user.email_confirmed),
            account=AccountResponse.model_validate(account) if account else None,
        )

    def verify_email(self, email: str, token: str) -> MessageResponse:
        result = self.provider.verify_email(email, token)
        if result is None:
            raise ValidationFailed("Invalid or expired verification token")
        user, _ = result
        self.accounts.update(user.id, {"email_verified": True})
        return MessageResponse(message="Email verified successfully")

    def forget_password(self, email: str) -> MessageResponse:
        # Same answer whether or not the account exists
        if self.accounts.email_exists(email):
            redirect_to: Optional[str] = f"{self.public_base_url}/reset-password" if self.public_base_url else None
            self.provider.send_password_reset(email, redirect_to)
        return MessageResponse(message="If an account exists, a password reset e-mail has been sent.")

    def reset_password(self, access_token: str, new_password: str) -> MessageResponse:
        user = self.require_user(access_token)
        self.provider.set_password(user.id, new_password)
        self.accounts.clear_failed_logins(user.id)
        return MessageResponse(message="Password updated successfully")
