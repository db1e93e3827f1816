from pydantic import BaseModel, EmailStr, Field
from typing import Annotated, Optional

from civic_auth.config import settings
from civic_auth.modules.accounts.schemas import AccountResponse, AccountSummary

Password = Annotated[
    str, Field(min_length=settings.min_password_length, max_length=settings.max_password_length)
]


class SignUpRequest(BaseModel):
    email: EmailStr
    password: Password
    name: Optional[str] = None


class SignInRequest(BaseModel):
    email: EmailStr
    password: str


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    token: str


class ForgetPasswordRequest(BaseModel):
    email: EmailStr


class NewPasswordRequest(BaseModel):
    newPassword: Password


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class SignUpResponse(BaseModel):
    success: bool = True
    message: str
    user: AccountSummary


class LoginResponse(BaseModel):
    success: bool = True
    message: str = "Login successful"
    token: str
    refresh_token: str
    expires_in: int
    user: AccountSummary


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None
    email_confirmed: bool = False


class SessionResponse(BaseModel):
    success: bool = True
    user: SessionUser
    account: Optional[AccountResponse] = None
