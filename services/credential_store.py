"""User lookups and creation on top of DBStorage."""
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import case, or_

from models.db_storage import DBStorage
from models.user import User


class CredentialStore:
    def __init__(self, storage: DBStorage):
        self.storage = storage

    def find_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        """Return the user whose username OR email matches, else None. An email match wins."""
        session = self.storage.get_session()
        return (
            session.query(User)
            .filter(or_(User.username == username, User.email == email))
            .order_by(case((User.email == email, 0), else_=1))
            .first()
        )

    def find_by_id(self, user_id: str) -> Optional[User]:
        return self.storage.get(User, user_id)

    def create(self, username: str, email: str, password_hash: str) -> User:
        """Insert a user and commit. IntegrityError propagates on a uniqueness race."""
        user = User(username=username, email=email, password_hash=password_hash)
        self.storage.new(user)
        self.storage.save()
        return user

    def list_users(self, page: int, limit: int) -> Tuple[List[User], int]:
        session = self.storage.get_session()
        query = session.query(User)
        total = query.count()
        rows = query.order_by(User.username.asc()).offset((page - 1) * limit).limit(limit).all()
        return rows, total
