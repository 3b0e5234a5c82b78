# storefront/repos/user_repo.py
from typing import List

from sqlalchemy import select, func, delete
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel, ProfileModel, PasswordResetModel


class UserRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_user(self, user_id: int) -> UserModel | None:
        return self.db.get(UserModel, user_id)

    def get_user_by_email(self, email: str) -> UserModel | None:
        return self.db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        ).scalar_one_or_none()

    def email_taken(self, email: str, exclude_id: int | None = None) -> bool:
        user = self.get_user_by_email(email)
        return user is not None and user.id != exclude_id

    def _search_clause(self, search: str):
        return ProfileModel.full_name.ilike(f"%{search}%")

    def count_users(self, search: str = "") -> int:
        stmt = select(func.count(UserModel.id)).select_from(UserModel).join(ProfileModel, isouter=True)
        if search:
            stmt = stmt.where(self._search_clause(search))
        return self.db.execute(stmt).scalar_one()

    def list_users(self, search: str, page: int, limit: int) -> List[UserModel]:
        stmt = select(UserModel).join(ProfileModel, isouter=True)
        if search:
            stmt = stmt.where(self._search_clause(search))
        stmt = stmt.order_by(UserModel.id).offset((page - 1) * limit).limit(limit)
        return list(self.db.execute(stmt).scalars().all())

    def add_user(self, user: UserModel) -> UserModel:
        self.db.add(user)
        self.db.flush()
        return user

    def delete_user(self, user: UserModel):
        self.db.delete(user)

    # password reset tokens
    def add_reset_token(self, reset: PasswordResetModel) -> PasswordResetModel:
        self.db.add(reset)
        self.db.flush()
        return reset

    def get_reset_token(self, user_id: int, token: str) -> PasswordResetModel | None:
        stmt = select(PasswordResetModel).where(
            PasswordResetModel.user_id == user_id,
            PasswordResetModel.token_reset == token,
        )
        return self.db.execute(stmt).scalars().first()

    def delete_reset_tokens(self, user_id: int) -> int:
        result = self.db.execute(
            delete(PasswordResetModel)
            .where(PasswordResetModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
