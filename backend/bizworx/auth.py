import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .core.settings import get_settings
from .db import get_db
from .enums import UserRole
from .exceptions import AuthenticationError, AuthorizationError
from .models import Business, User
from .services.storage import TenantContext, TenantStorage

settings = get_settings()

SECRET_KEY = settings.secret_key
ALGORITHM = settings.algorithm
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password (or PIN) against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password (or PIN) hash."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """Create JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> Optional[dict]:
    """Verify JWT token and return payload."""
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None


def authenticate_business(db: Session, email: str, password: str) -> Optional[Business]:
    """Authenticate a business owner with email and password."""
    business = db.query(Business).filter(Business.email == email.lower()).first()
    if not business:
        return None
    if not verify_password(password, business.password_hash):
        return None
    return business


# API keys
def generate_raw_api_key() -> str:
    return f"{settings.api_key_prefix}{secrets.token_urlsafe(32)}"


def hash_api_key(raw_key: str) -> str:
    """Only this digest is stored; the raw key is shown once at issue time."""
    return hashlib.sha256(raw_key.encode("utf-8")).hexdigest()


def authenticate_api_key(db: Session, raw_key: Optional[str]) -> Optional[Business]:
    """One indexed lookup by digest."""
    if not raw_key:
        return None
    return db.query(Business).filter(Business.api_key_hash == hash_api_key(raw_key)).first()


# Request dependencies
bearer_scheme = HTTPBearer(auto_error=False)
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_current_tenant(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> TenantContext:
    """Resolve the session surface caller from the JWT bearer token."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = verify_token(credentials.credentials)
    if payload is None or payload.get("sub") is None or payload.get("business_id") is None:
        raise AuthenticationError("Could not validate credentials")

    business = db.get(Business, payload["business_id"])
    if business is None or business.email != payload["sub"]:
        raise AuthenticationError("Could not validate credentials")

    user = None
    if payload.get("user_id") is not None:
        user = db.get(User, payload["user_id"])
        if user is None or user.business_id != business.id or not user.is_active:
            raise AuthenticationError("Team member is no longer active")

    return TenantContext(business=business, user=user, storage=TenantStorage(db, business.id))


def get_api_key_tenant(
    api_key: Optional[str] = Security(api_key_header),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> TenantContext:
    """Resolve the external surface caller from X-API-Key or an Authorization bearer key."""
    raw_key = api_key or (credentials.credentials if credentials else None)
    if not raw_key:
        raise AuthenticationError("API key required")

    business = authenticate_api_key(db, raw_key)
    if business is None:
        raise AuthenticationError("Invalid API key")

    return TenantContext(business=business, storage=TenantStorage(db, business.id))


def require_admin(ctx: TenantContext = Depends(get_current_tenant)) -> TenantContext:
    """The business owner token, or a team member with the admin role."""
    if ctx.user is not None and ctx.user.role != UserRole.ADMIN:
        raise AuthorizationError("Admin access required")
    return ctx


def require_team_member(ctx: TenantContext = Depends(get_current_tenant)) -> TenantContext:
    if ctx.user is None:
        raise AuthorizationError("Team member login required")
    return ctx
