import logging
from typing import List

from sqlalchemy.exc import IntegrityError

from .. import models
from ..auth import get_password_hash
from ..exceptions import ConflictError, ValidationError
from ..schemas import BusinessSettingsUpdate, TeamMemberCreate, TeamMemberUpdate
from .storage import TenantStorage

logger = logging.getLogger(__name__)


class TeamService:
    """Team members log in with a PIN under the business account."""

    @staticmethod
    def list_members(storage: TenantStorage, include_inactive: bool = False) -> List[models.User]:
        return storage.list_users(active_only=not include_inactive)

    @staticmethod
    def create_member(storage: TenantStorage, request: TeamMemberCreate) -> models.User:
        if storage.find_user_by_username(request.username) is not None:
            raise ConflictError("Username already taken")

        data = request.model_dump(exclude={"pin"})
        user = models.User(**data, pin_hash=get_password_hash(request.pin), is_active=True)
        try:
            user = storage.save(user)
        except IntegrityError:
            storage.rollback()
            raise ConflictError("Username already taken")

        logger.info(f"Added team member {user.id} to business {storage.business_id}")
        return user

    @staticmethod
    def update_member(storage: TenantStorage, user_id: int, request: TeamMemberUpdate) -> models.User:
        user = storage.get_user(user_id)
        data = request.model_dump(exclude_unset=True)

        username = data.get("username")
        if username and username != user.username:
            if storage.find_user_by_username(username) is not None:
                raise ConflictError("Username already taken")

        pin = data.pop("pin", None)
        if pin:
            user.pin_hash = get_password_hash(pin)
        for field, value in data.items():
            if value is None and field in ("username", "first_name", "last_name", "role", "is_active"):
                continue
            setattr(user, field, value)

        try:
            return storage.save(user)
        except IntegrityError:
            storage.rollback()
            raise ConflictError("Username already taken")

    @staticmethod
    def deactivate_member(storage: TenantStorage, user_id: int, acting_user_id=None) -> models.User:
        """Members are deactivated, never deleted, so their time entries survive."""
        if acting_user_id is not None and acting_user_id == user_id:
            raise ValidationError("You cannot deactivate yourself")
        user = storage.get_user(user_id)
        user.is_active = False
        user = storage.save(user)
        logger.info(f"Deactivated team member {user.id}")
        return user


class BusinessService:

    @staticmethod
    def update_settings(storage: TenantStorage, request: BusinessSettingsUpdate) -> models.Business:
        business = storage.get_business()
        data = request.model_dump(exclude_unset=True)

        email = data.get("email")
        if email:
            email = email.lower()
            clash = storage.db.query(models.Business).filter(
                models.Business.email == email,
                models.Business.id != business.id,
            ).first()
            if clash is not None:
                raise ConflictError("Email already registered")
            data["email"] = email

        for field, value in data.items():
            if value is None and field in ("name", "email"):
                continue
            setattr(business, field, value)

        storage.db.commit()
        storage.db.refresh(business)
        return business
