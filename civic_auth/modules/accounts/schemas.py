from enum import Enum
from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class Role(str, Enum):
    CITIZEN = "citizen"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"

    @property
    def is_admin(self) -> bool:
        return self in (Role.ADMIN, Role.SUPER_ADMIN)


class Account(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")

    id: str
    email: str
    fin: Optional[str] = None
    phone_number: Optional[str] = None
    full_name: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None
    photo_url: Optional[str] = None
    role: Role = Role.CITIZEN
    email_verified: bool = False
    failed_login_attempts: int = 0
    locked_until: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AccountSummary(BaseModel):
    """Public projection returned by login and registration endpoints."""
    id: str
    email: str
    name: Optional[str] = None
    role: Role

    @classmethod
    def from_account(cls, account: Account) -> "AccountSummary":
        return cls(id=account.id, email=account.email, name=account.full_name, role=account.role)


class AccountResponse(BaseModel):
    """Admin view of an account, including lockout state."""
    id: str
    email: str
    fin: Optional[str] = None
    phone_number: Optional[str] = None
    full_name: Optional[str] = None
    role: Role
    email_verified: bool
    failed_login_attempts: int
    locked_until: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
