from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class PersonalIdentity(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    full_name: str = Field(alias="fullName")
    phone: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None


class Biometrics(BaseModel):
    model_config = ConfigDict(extra="ignore")

    face: Optional[str] = None


class KycData(BaseModel):
    """Identity attributes returned by Fayda after a successful OTP check."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    personal_identity: PersonalIdentity = Field(alias="personalIdentity")
    biometrics: Optional[Biometrics] = None

    @property
    def photo(self) -> Optional[str]:
        return self.biometrics.face if self.biometrics else None
