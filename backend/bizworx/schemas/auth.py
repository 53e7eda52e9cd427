from pydantic import BaseModel, EmailStr, Field, computed_field
from datetime import datetime
from typing import Optional

from ..enums import UserRole


class BusinessRegisterRequest(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    password: str = Field(min_length=8)
    phone: Optional[str] = None
    address: Optional[str] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserLoginRequest(BaseModel):
    """Team member login; sent together with the business bearer token."""
    username: str
    pin: str


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class BusinessResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    logo: Optional[str] = None
    api_key_prefix: Optional[str] = None
    api_key_created_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def has_api_key(self) -> bool:
        return self.api_key_prefix is not None


class TeamMemberResponse(BaseModel):
    id: int
    business_id: int
    username: str
    role: UserRole
    first_name: str
    last_name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    business: BusinessResponse
    user: Optional[TeamMemberResponse] = None
    access_token: str
    token_type: str = "bearer"


class MeResponse(BaseModel):
    business: BusinessResponse
    user: Optional[TeamMemberResponse] = None


class ApiKeyResponse(BaseModel):
    """The raw key is only ever returned here, once."""
    api_key: str
    api_key_prefix: str
    created_at: datetime
    message: str = "Store this key now; it cannot be shown again."
