import logging
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models
from ..auth import (
    ACCESS_TOKEN_EXPIRE_MINUTES,
    authenticate_business,
    create_access_token,
    generate_raw_api_key,
    get_password_hash,
    hash_api_key,
    verify_password,
)
from ..exceptions import AuthenticationError, ConflictError
from ..schemas import (
    AuthResponse,
    BusinessRegisterRequest,
    BusinessResponse,
    LoginRequest,
    TeamMemberResponse,
    UserLoginRequest,
)
from ..timeutils import utcnow

logger = logging.getLogger(__name__)


class AuthService:
    """Service for handling authentication business logic."""

    @staticmethod
    def check_business_exists(db: Session, email: str) -> bool:
        """Check if a business with the given email already exists."""
        return db.query(models.Business).filter(models.Business.email == email.lower()).first() is not None

    @staticmethod
    def create_access_token_for(business: models.Business, user: Optional[models.User] = None) -> str:
        """Business token, or a team member token when ``user`` is given."""
        claims = {"sub": business.email, "business_id": business.id}
        if user is not None:
            claims["user_id"] = user.id
        return create_access_token(data=claims, expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))

    @staticmethod
    def register_business(db: Session, request: BusinessRegisterRequest) -> AuthResponse:
        """
        Create a new business account.

        Raises:
            ConflictError: If the email is already registered
        """
        email = request.email.lower()
        if AuthService.check_business_exists(db, email):
            raise ConflictError("Email already registered")

        business = models.Business(
            name=request.name,
            email=email,
            password_hash=get_password_hash(request.password),
            phone=request.phone,
            address=request.address,
        )
        try:
            db.add(business)
            db.commit()
            db.refresh(business)
        except IntegrityError:
            db.rollback()
            raise ConflictError("Email already registered")

        logger.info(f"Registered business {business.id}")
        return AuthResponse(
            business=BusinessResponse.model_validate(business),
            access_token=AuthService.create_access_token_for(business),
        )

    @staticmethod
    def login_business(db: Session, request: LoginRequest) -> AuthResponse:
        business = authenticate_business(db, request.email, request.password)
        if not business:
            raise AuthenticationError("Incorrect email or password")

        return AuthResponse(
            business=BusinessResponse.model_validate(business),
            access_token=AuthService.create_access_token_for(business),
        )

    @staticmethod
    def login_team_member(db: Session, business: models.Business, request: UserLoginRequest) -> AuthResponse:
        """
        PIN login for a team member of an already authenticated business.
        The same error is returned for an unknown username and a wrong PIN.
        """
        user = db.query(models.User).filter(
            models.User.business_id == business.id,
            models.User.username == request.username,
            models.User.is_active.is_(True),
        ).first()
        if user is None or not verify_password(request.pin, user.pin_hash):
            raise AuthenticationError("Invalid username or PIN")

        logger.info(f"Team member {user.id} logged in to business {business.id}")
        return AuthResponse(
            business=BusinessResponse.model_validate(business),
            user=TeamMemberResponse.model_validate(user),
            access_token=AuthService.create_access_token_for(business, user),
        )

    @staticmethod
    def generate_api_key(db: Session, business: models.Business) -> Tuple[str, models.Business]:
        """
        Issue a new API key, replacing any previous one. Returns the raw key,
        which is not recoverable afterwards.
        """
        while True:
            raw_key = generate_raw_api_key()
            key_hash = hash_api_key(raw_key)
            taken = db.query(models.Business.id).filter(models.Business.api_key_hash == key_hash).first()
            if taken is None:
                break

        business.api_key_hash = key_hash
        business.api_key_prefix = raw_key[:12]
        business.api_key_created_at = utcnow()
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("Could not issue an API key, please retry")
        db.refresh(business)

        logger.info(f"API key regenerated for business {business.id}")
        return raw_key, business

    @staticmethod
    def revoke_api_key(db: Session, business: models.Business) -> models.Business:
        business.api_key_hash = None
        business.api_key_prefix = None
        business.api_key_created_at = None
        db.commit()
        db.refresh(business)
        logger.info(f"API key revoked for business {business.id}")
        return business
