from pydantic import BaseModel, EmailStr
from typing import Optional

from civic_auth.modules.accounts.schemas import AccountSummary


# Request fields are optional so that missing values get the endpoint's own 400 message
class InitiateRegisterRequest(BaseModel):
    fin: Optional[str] = None


class CompleteRegisterRequest(BaseModel):
    fin: Optional[str] = None
    otp: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None


class CitizenLoginRequest(BaseModel):
    loginInput: Optional[str] = None
    password: Optional[str] = None


class InitiateResetRequest(BaseModel):
    fin: Optional[str] = None


class ResetPasswordRequest(BaseModel):
    fin: Optional[str] = None
    otp: Optional[str] = None
    newPassword: Optional[str] = None


class OtpSentResponse(BaseModel):
    success: bool = True
    message: str
    fin: Optional[str] = None


class RegisterResponse(BaseModel):
    success: bool = True
    message: str = "Registration successful"
    user: AccountSummary
