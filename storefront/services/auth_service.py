# storefront/services/auth_service.py
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from redis.exceptions import RedisError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel, ProfileModel, PasswordResetModel
from storefront.domain.errors import AppError, ConflictError, NotFoundError, UnauthorizedError
from storefront.domain.schemas import RegisterIn, LoginIn, ForgotPasswordIn, ResetPasswordIn
from storefront.repos.user_repo import UserRepo
from storefront.services.cache_service import CacheService
from storefront.services.notification_service import NotificationService
from storefront.utils.logging import get_logger
from storefront.utils.security import hash_password, verify_password, create_access_token, decode_access_token
from storefront.utils.settings import PASSWORD_RESET_TOKEN_LENGTH, PASSWORD_RESET_EXPIRE_MINUTES

logger = get_logger(__name__)

_TOKEN_CHARS = string.digits + string.ascii_letters


def generate_reset_token(length: int = PASSWORD_RESET_TOKEN_LENGTH) -> str:
    return "".join(secrets.choice(_TOKEN_CHARS) for _ in range(length))


def _remaining_seconds(payload: dict) -> int:
    return int(payload["exp"] - datetime.now(timezone.utc).timestamp())


class AuthService:
    def __init__(
        self,
        db: Session,
        cache: CacheService,
        notification_service: NotificationService | None = None,
    ):
        self.repo = UserRepo(db)
        self.cache = cache
        self.notification_service = notification_service or NotificationService()

    def register(self, payload: RegisterIn) -> Dict[str, Any]:
        email = payload.email.lower()
        if self.repo.email_taken(email):
            raise ConflictError("Email already registered")

        user = self.repo.add_user(
            UserModel(
                email=email,
                password=hash_password(payload.password),
                role=payload.role,
                profile=ProfileModel(full_name=payload.full_name.strip()),
            )
        )
        user.created_by = user.updated_by = user.id
        user.profile.created_by = user.profile.updated_by = user.id
        self.repo.commit()

        logger.info(f"Registered user {user.id} ({user.email})")
        return {"id": user.id, "fullName": user.profile.full_name, "email": user.email, "role": user.role}

    def login(self, payload: LoginIn) -> str:
        user = self.repo.get_user_by_email(payload.email)
        if not user or not verify_password(payload.password, user.password):
            raise UnauthorizedError("Wrong email or password")

        logger.info(f"User {user.id} logged in")
        return create_access_token(user.id, user.role)

    def logout(self, token: str):
        """
        Blacklists the token until its own expiry, so the key disappears
        exactly when the token would be rejected anyway.
        """
        payload = decode_access_token(token)

        ttl = _remaining_seconds(payload)
        if ttl <= 0:
            raise UnauthorizedError("Token already expired")

        if self.cache.is_blacklisted(token):
            raise UnauthorizedError("Token has been revoked, please login again")

        try:
            self.cache.blacklist_token(token, ttl)
        except RedisError as e:
            logger.error(f"Failed to blacklist token of user {payload['id']}: {e}")
            raise AppError("Failed to logout, please try again")

        logger.info(f"User {payload['id']} logged out, token blacklisted for {ttl}s")

    # =====================================================
    # PASSWORD RESET
    # =====================================================
    def forgot_password(self, payload: ForgotPasswordIn) -> Dict[str, Any]:
        user = self.repo.get_user_by_email(payload.email)
        if not user:
            raise NotFoundError("Email not found")

        token = generate_reset_token()
        # one live token per user
        self.repo.delete_reset_tokens(user.id)
        self.repo.add_reset_token(
            PasswordResetModel(
                user_id=user.id,
                token_reset=token,
                expired_at=datetime.now(timezone.utc) + timedelta(minutes=PASSWORD_RESET_EXPIRE_MINUTES),
                created_by=user.id,
                updated_by=user.id,
            )
        )
        self.repo.commit()

        if not self.notification_service.send_password_reset_email(user.email, token):
            raise AppError("Failed to send token via email")

        logger.info(f"Password reset token issued for user {user.id}")
        return {"email": user.email}

    def reset_password(self, payload: ResetPasswordIn, caller_token: str | None = None):
        """
        Sets a new password from a valid email/token pair.
        A bearer token sent along is revoked afterwards.
        """
        caller = decode_access_token(caller_token) if caller_token else None

        user = self.repo.get_user_by_email(payload.email)
        reset = self.repo.get_reset_token(user.id, payload.token) if user else None
        if not reset:
            raise NotFoundError("Invalid token")

        expired_at = reset.expired_at
        if expired_at.tzinfo is None:
            # sqlite hands back naive datetimes
            expired_at = expired_at.replace(tzinfo=timezone.utc)
        if datetime.now(timezone.utc) > expired_at:
            self.repo.delete_reset_tokens(user.id)
            self.repo.commit()
            raise NotFoundError("Token has expired")

        user.password = hash_password(payload.new_password)
        user.updated_by = user.id
        self.repo.delete_reset_tokens(user.id)
        self.repo.commit()
        logger.info(f"Password of user {user.id} reset")

        if caller is not None:
            self._revoke_after_reset(caller_token, caller)

    def _revoke_after_reset(self, token: str, payload: dict):
        ttl = _remaining_seconds(payload)
        if ttl <= 0:
            return
        try:
            self.cache.blacklist_token(token, ttl)
        except RedisError as e:
            # password already changed, only logged
            logger.warning(f"Failed to blacklist token of user {payload['id']} after reset: {e}")
