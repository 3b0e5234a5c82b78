# storefront/services/user_service.py
from typing import Any, Dict, List, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel, ProfileModel
from storefront.domain.errors import ConflictError, NotFoundError
from storefront.domain.schemas import UserCreateIn, UserUpdateIn, ProfileUpdateIn
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger
from storefront.utils.security import hash_password
from storefront.utils.uploads import public_url

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.repo = UserRepo(db)

    def _get(self, user_id: int) -> UserModel:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    # =====================================================
    # ADMIN
    # =====================================================
    def list_users(self, search: str, page: int, limit: int) -> Tuple[List[Dict[str, Any]], int]:
        total = self.repo.count_users(search)
        return [self._user_dict(u) for u in self.repo.list_users(search, page, limit)], total

    def get_user(self, user_id: int) -> Dict[str, Any]:
        return self._user_dict(self._get(user_id))

    def create_user(self, payload: UserCreateIn, actor_id: int) -> Dict[str, Any]:
        email = payload.email.lower()
        if self.repo.email_taken(email):
            raise ConflictError("Email already registered")

        user = self.repo.add_user(
            UserModel(
                email=email,
                password=hash_password(payload.password),
                role=payload.role,
                created_by=actor_id,
                updated_by=actor_id,
                profile=ProfileModel(
                    full_name=payload.full_name.strip(),
                    phone_number=payload.phone,
                    address=payload.address,
                    created_by=actor_id,
                    updated_by=actor_id,
                ),
            )
        )
        self.repo.commit()
        logger.info(f"User {user.id} created by {actor_id}")
        return self._user_dict(user)

    def update_user(self, user_id: int, payload: UserUpdateIn, actor_id: int) -> Dict[str, Any]:
        user = self._get(user_id)
        self._apply(user, payload, actor_id)
        if payload.role is not None:
            user.role = payload.role
        self.repo.commit()
        logger.info(f"User {user_id} updated by {actor_id}")
        return self._user_dict(user)

    def delete_user(self, user_id: int):
        user = self._get(user_id)
        try:
            self.repo.delete_user(user)
            self.repo.commit()
        except IntegrityError:
            self.repo.rollback()
            raise ConflictError("User still has transactions and cannot be deleted")
        logger.info(f"User {user_id} deleted")

    # =====================================================
    # PROFILE
    # =====================================================
    def get_profile(self, user_id: int) -> Dict[str, Any]:
        user = self._get(user_id)
        profile = self._user_dict(user)
        profile["joinDate"] = user.created_at
        return profile

    def update_profile(self, user_id: int, payload: ProfileUpdateIn) -> Dict[str, Any]:
        user = self._get(user_id)
        self._apply(user, payload, user_id)
        self.repo.commit()
        logger.info(f"Profile of user {user_id} updated")
        return self.get_profile(user_id)

    def _apply(self, user: UserModel, payload, actor_id: int):
        if payload.email is not None:
            email = payload.email.lower()
            if self.repo.email_taken(email, exclude_id=user.id):
                raise ConflictError("Email already registered")
            user.email = email
        if payload.password is not None:
            user.password = hash_password(payload.password)

        if user.profile is None:
            user.profile = ProfileModel(full_name="", created_by=actor_id)
        profile = user.profile
        if payload.full_name is not None:
            profile.full_name = payload.full_name.strip()
        if payload.phone is not None:
            profile.phone_number = payload.phone
        if payload.address is not None:
            profile.address = payload.address

        user.updated_by = actor_id
        profile.updated_by = actor_id

    def _user_dict(self, user: UserModel) -> Dict[str, Any]:
        profile = user.profile
        return {
            "id": user.id,
            "profilePhoto": public_url(profile.profile_photo if profile else None),
            "fullName": (profile.full_name if profile else None) or "",
            "email": user.email,
            "address": (profile.address if profile else None) or "",
            "phone": (profile.phone_number if profile else None) or "",
            "role": user.role,
        }
