from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

from civic_auth.modules.accounts.schemas import Role


class AdminLoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class SessionPayload(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    expires_at: Optional[int] = None
    token_type: str = "bearer"


class AdminUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: str
    role: Role


class AdminLoginResponse(BaseModel):
    success: bool = True
    message: str = "Welcome Admin"
    session: SessionPayload
    user: AdminUser


class RefreshResponse(BaseModel):
    success: bool = True
    session: SessionPayload


class AdminMeResponse(BaseModel):
    id: str
    email: str
    role: Role
    last_login: Optional[datetime] = None


class AccountUpdate(BaseModel):
    unlock: bool = False
    role: Optional[Role] = None


class SystemLogEntry(BaseModel):
    id: int
    event: str
    time: datetime


class SystemLogsResponse(BaseModel):
    logs: List[SystemLogEntry]
