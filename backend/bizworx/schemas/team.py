from pydantic import BaseModel, Field
from typing import Optional

from ..enums import UserRole

PIN_PATTERN = r"^\d{4,8}$"


class TeamMemberCreate(BaseModel):
    username: str = Field(min_length=1)
    pin: str = Field(pattern=PIN_PATTERN, description="4 to 8 digits")
    first_name: str
    last_name: str
    role: UserRole = UserRole.MEMBER
    phone: Optional[str] = None
    email: Optional[str] = None


class TeamMemberUpdate(BaseModel):
    username: Optional[str] = None
    pin: Optional[str] = Field(None, pattern=PIN_PATTERN)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: Optional[UserRole] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: Optional[bool] = None
