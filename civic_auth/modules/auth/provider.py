"""
Managed authentication capability.

Password hashing, session issuance and e-mail flows are delegated to the
platform behind AuthProvider. Lockout and identifier resolution sit in front
of it and never look at its internals.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from supabase import AuthApiError, AuthError, Client

from civic_auth.core.errors import UpstreamError, ValidationFailed

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: Optional[str]
    email_confirmed: bool = False
    last_sign_in_at: Optional[datetime] = None


@dataclass
class AuthSession:
    access_token: str
    refresh_token: str
    expires_in: int
    expires_at: Optional[int] = None
    token_type: str = "bearer"


class AuthProvider(ABC):
    @abstractmethod
    def create_user(self, email: str, password: str, full_name: Optional[str] = None) -> AuthUser:
        """Create a user whose e-mail is already trusted (confirmed on creation)."""

    @abstractmethod
    def sign_up(self, email: str, password: str, full_name: Optional[str] = None,
                redirect_to: Optional[str] = None) -> AuthUser:
        """Self-service sign up; the platform sends a verification e-mail."""

    @abstractmethod
    def delete_user(self, user_id: str) -> None: ...

    @abstractmethod
    def authenticate(self, email: str, password: str) -> Optional[Tuple[AuthUser, AuthSession]]:
        """Return the user and a new session, or None when the credentials are rejected."""

    @abstractmethod
    def refresh(self, refresh_token: str) -> Optional[AuthSession]: ...

    @abstractmethod
    def get_user(self, access_token: str) -> Optional[AuthUser]: ...

    @abstractmethod
    def sign_out(self, access_token: str) -> None: ...

    @abstractmethod
    def set_password(self, user_id: str, password: str) -> None:
        """Force a new password without checking the old one."""

    @abstractmethod
    def verify_email(self, email: str, token: str) -> Optional[Tuple[AuthUser, Optional[AuthSession]]]: ...

    @abstractmethod
    def send_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None: ...


def _to_user(user) -> AuthUser:
    return AuthUser(
        id=str(user.id),
        email=user.email,
        email_confirmed=bool(getattr(user, "email_confirmed_at", None)),
        last_sign_in_at=getattr(user, "last_sign_in_at", None),
    )


def _to_session(session) -> AuthSession:
    return AuthSession(
        access_token=session.access_token,
        refresh_token=session.refresh_token,
        expires_in=session.expires_in,
        expires_at=getattr(session, "expires_at", None),
        token_type=getattr(session, "token_type", None) or "bearer",
    )


class SupabaseAuthProvider(AuthProvider):
    """Supabase Auth (GoTrue) implementation.

    ``client`` carries the anon key and is used for the calls a user would
    make; ``admin_client`` carries the service role key for auth.admin calls.
    """

    def __init__(self, client: Client, admin_client: Client):
        self.client = client
        self.admin_client = admin_client

    def create_user(self, email: str, password: str, full_name: Optional[str] = None) -> AuthUser:
        try:
            response = self.admin_client.auth.admin.create_user({
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": {"full_name": full_name} if full_name else {},
            })
        except AuthApiError as e:
            raise ValidationFailed(e.message)
        except AuthError as e:
            raise UpstreamError(f"Failed to create user: {e.message}")
        if not response.user:
            raise UpstreamError("Failed to create user")
        return _to_user(response.user)

    def sign_up(self, email: str, password: str, full_name: Optional[str] = None,
                redirect_to: Optional[str] = None) -> AuthUser:
        options = {"data": {"full_name": full_name} if full_name else {}}
        if redirect_to:
            options["email_redirect_to"] = redirect_to
        try:
            response = self.client.auth.sign_up({
                "email": email,
                "password": password,
                "options": options,
            })
        except AuthApiError as e:
            raise ValidationFailed(e.message)
        except AuthError as e:
            raise UpstreamError(f"Registration failed: {e.message}")
        if not response.user:
            raise UpstreamError("Failed to register user")
        return _to_user(response.user)

    def delete_user(self, user_id: str) -> None:
        try:
            self.admin_client.auth.admin.delete_user(user_id)
        except AuthError as e:
            raise UpstreamError(f"Failed to delete user: {e.message}")

    def authenticate(self, email: str, password: str) -> Optional[Tuple[AuthUser, AuthSession]]:
        try:
            response = self.client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except AuthApiError as e:
            logger.debug("Sign in rejected for %s: %s", email, e.message)
            return None
        except AuthError as e:
            raise UpstreamError(f"Login failed: {e.message}")
        if not response.user or not response.session:
            return None
        logger.info("[AUDIT] Session created for user: %s", response.user.id)
        return _to_user(response.user), _to_session(response.session)

    def refresh(self, refresh_token: str) -> Optional[AuthSession]:
        try:
            response = self.client.auth.refresh_session(refresh_token)
        except AuthError:
            return None
        if not response.session:
            return None
        return _to_session(response.session)

    def get_user(self, access_token: str) -> Optional[AuthUser]:
        try:
            response = self.admin_client.auth.get_user(jwt=access_token)
        except AuthError:
            return None
        if not response or not response.user:
            return None
        return _to_user(response.user)

    def sign_out(self, access_token: str) -> None:
        try:
            self.admin_client.auth.admin.sign_out(access_token)
        except AuthError as e:
            logger.error("Logout error: %s", e.message)

    def set_password(self, user_id: str, password: str) -> None:
        try:
            response = self.admin_client.auth.admin.update_user_by_id(user_id, {"password": password})
        except AuthApiError as e:
            raise ValidationFailed(e.message)
        except AuthError as e:
            raise UpstreamError(f"Password reset failed: {e.message}")
        if not response.user:
            raise UpstreamError("Password reset failed")

    def verify_email(self, email: str, token: str) -> Optional[Tuple[AuthUser, Optional[AuthSession]]]:
        try:
            response = self.client.auth.verify_otp({"email": email, "token": token, "type": "signup"})
        except AuthApiError:
            return None
        except AuthError as e:
            raise UpstreamError(f"Email verification failed: {e.message}")
        if not response.user:
            return None
        session = _to_session(response.session) if response.session else None
        return _to_user(response.user), session

    def send_password_reset(self, email: str, redirect_to: Optional[str] = None) -> None:
        options = {"redirect_to": redirect_to} if redirect_to else {}
        try:
            self.client.auth.reset_password_for_email(email, options)
        except AuthError as e:
            # Not surfaced to the caller so the response does not reveal whether the account exists
            logger.warning("Password reset e-mail for %s failed: %s", email, e.message)
