from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from payroll.crud.base import CRUDBase
from payroll.models.user import User
from payroll.schemas.auth import SignupRequest


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class CRUDUser(CRUDBase[User, SignupRequest, SignupRequest]):
    def get_by_email(self, db: Session, email: str) -> Optional[User]:
        return db.execute(select(User).where(User.email == normalize_email(email))).scalar_one_or_none()

    def get_for_update(self, db: Session, id: str) -> Optional[User]:
        """Row-locked read for the refresh read-compare-write (no-op lock on SQLite)."""
        return db.execute(select(User).where(User.id == id).with_for_update()).scalar_one_or_none()

    def create_with_password_hash(self, db: Session, *, email: str, password_hash: str) -> User:
        user = User(email=normalize_email(email), password_hash=password_hash, hashed_rt=None)
        db.add(user); db.commit(); db.refresh(user)
        return user

    def set_refresh_hash(self, db: Session, user_id: str, hashed_rt: Optional[str]) -> bool:
        """Overwrite the stored refresh hash. Returns False when no such user exists."""
        result = db.execute(update(User).where(User.id == user_id).values(hashed_rt=hashed_rt))
        db.commit()
        return result.rowcount > 0


user_crud = CRUDUser(User)
