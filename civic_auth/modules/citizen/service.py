"""
Citizen authentication backed by Fayda identity verification.

Flow:
1. initiate_registration: FIN -> Fayda sends an OTP
2. complete_registration: OTP verified with Fayda -> managed-auth user + account row with KYC data
3. login: FIN or phone number + password, with lockout
4. initiate_reset: FIN -> Fayda sends an OTP
5. reset_password: OTP verified with Fayda -> password force-updated
"""

import logging

from civic_auth.core.errors import AuthenticationFailed, Conflict, NotFound, ValidationFailed
from civic_auth.modules.accounts.identifiers import classify_identifier, is_valid_fin, mask_fin
from civic_auth.modules.accounts.repository import AccountRepository
from civic_auth.modules.accounts.schemas import AccountSummary, Role
from civic_auth.modules.auth.provider import AuthProvider
from civic_auth.modules.auth.schemas import LoginResponse, MessageResponse
from civic_auth.modules.auth.service import AuthService
from civic_auth.modules.citizen.schemas import (
    CitizenLoginRequest, CompleteRegisterRequest, OtpSentResponse, RegisterResponse, ResetPasswordRequest
)
from civic_auth.modules.fayda.client import FaydaClient

logger = logging.getLogger(__name__)

INVALID_FIN = "Invalid FIN. Must be 12 digits."


class CitizenService:
    def __init__(
        self,
        accounts: AccountRepository,
        fayda: FaydaClient,
        provider: AuthProvider,
        auth_service: AuthService,
        phone_country_code: str = "251",
        min_password_length: int = 8,
        max_password_length: int = 128,
    ):
        self.accounts = accounts
        self.fayda = fayda
        self.provider = provider
        self.auth_service = auth_service
        self.phone_country_code = phone_country_code
        self.min_password_length = min_password_length
        self.max_password_length = max_password_length

    def _check_password(self, password: str) -> None:
        if not self.min_password_length <= len(password) <= self.max_password_length:
            raise ValidationFailed(
                f"Password must be between {self.min_password_length} and {self.max_password_length} characters"
            )

    def initiate_registration(self, fin: str) -> OtpSentResponse:
        if not is_valid_fin(fin):
            raise ValidationFailed(INVALID_FIN)
        if self.accounts.fin_exists(fin):
            raise Conflict("User already registered. Please login.")
        self.fayda.request_otp(fin)
        return OtpSentResponse(message="OTP sent successfully", fin=fin)

    def complete_registration(self, request: CompleteRegisterRequest) -> RegisterResponse:
        if not (request.fin and request.otp and request.email and request.password):
            raise ValidationFailed("FIN, OTP, email, and password are required")
        if not is_valid_fin(request.fin):
            raise ValidationFailed(INVALID_FIN)
        self._check_password(request.password)

        # Uniqueness is settled before Fayda is contacted
        if self.accounts.fin_exists(request.fin):
            raise Conflict("User already registered. Please login.")
        if self.accounts.email_exists(request.email):
            raise Conflict("Email already registered")

        kyc = self.fayda.verify_otp(request.fin, request.otp)
        identity = kyc.personal_identity

        user = self.provider.create_user(request.email, request.password, identity.full_name)
        try:
            account = self.accounts.create({
                "id": user.id,
                "email": request.email,
                "fin": request.fin,
                "full_name": identity.full_name,
                "phone_number": identity.phone,
                "dob": identity.dob,
                "gender": identity.gender,
                "photo_url": kyc.photo,
                "role": Role.CITIZEN,
                "email_verified": True,
            })
        except Exception:
            logger.error("Account row for %s could not be saved; removing auth user", mask_fin(request.fin))
            self.auth_service.discard_user(user.id)
            raise

        logger.info("Citizen registered: FIN %s (%s)", mask_fin(request.fin), account.id)
        return RegisterResponse(user=AccountSummary.from_account(account))

    def login(self, request: CitizenLoginRequest) -> LoginResponse:
        raw = (request.loginInput or "").strip()
        if not raw or not request.password:
            raise ValidationFailed("Login input and password are required")

        identifier = classify_identifier(raw, self.phone_country_code)
        account = self.accounts.resolve(identifier)
        if account is None:
            raise AuthenticationFailed("Invalid credentials")

        _, session = self.auth_service.authenticate_account(account, request.password)
        return self.auth_service.login_response(account, session)

    def initiate_reset(self, fin: str) -> MessageResponse:
        if not fin:
            raise ValidationFailed("FIN is required")
        if not self.accounts.fin_exists(fin):
            return MessageResponse(message="If an account exists, an OTP has been sent.")
        self.fayda.request_otp(fin)
        return MessageResponse(message="OTP sent successfully")

    def reset_password(self, request: ResetPasswordRequest) -> MessageResponse:
        if not (request.fin and request.otp and request.newPassword):
            raise ValidationFailed("FIN, OTP, and new password are required")
        self._check_password(request.newPassword)

        # OTP possession is the proof of identity; the old password is not asked for
        self.fayda.verify_otp(request.fin, request.otp)

        account = self.accounts.get_by_fin(request.fin)
        if account is None:
            raise NotFound("User not found")

        self.provider.set_password(account.id, request.newPassword)
        self.accounts.clear_failed_logins(account.id)
        logger.info("Password reset for FIN %s", mask_fin(request.fin))
        return MessageResponse(message="Password updated successfully")
