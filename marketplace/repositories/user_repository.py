from typing import Dict, Iterable, Optional

from sqlalchemy.orm import Session

from marketplace.models.user import User


class UserRepository:
    """User store lookups."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get(self, user_id: str) -> Optional[User]:
        return self._db.get(User, user_id)

    def exists(self, user_id: str) -> bool:
        return self._db.query(User.id).filter(User.id == user_id).first() is not None

    def get_many(self, user_ids: Iterable[str]) -> Dict[str, User]:
        ids = set(user_ids)
        if not ids:
            return {}
        users = self._db.query(User).filter(User.id.in_(ids)).all()
        return {user.id: user for user in users}

    def by_email(self, email: str) -> Optional[User]:
        return self._db.query(User).filter(User.email == email).first()

    def by_username(self, username: str) -> Optional[User]:
        return self._db.query(User).filter(User.username == username).first()
