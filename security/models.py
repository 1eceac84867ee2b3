import datetime as dt
import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum, Index
from sqlalchemy.orm import relationship

from healthapp import db
from .passwords import hash_password, verify_password


def utcnow() -> dt.datetime:
    """Naive UTC timestamp, matching what SQLite hands back."""
    return dt.datetime.now(dt.timezone.utc).replace(tzinfo=None)


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"

    def satisfies(self, required: "Role") -> bool:
        return required in _GRANTS[self]

    @classmethod
    def parse(cls, value):
        """Return the Role for a raw value, or None when it is not one of ours."""
        try:
            return cls(value)
        except ValueError:
            return None


_GRANTS = {
    Role.USER: frozenset({Role.USER}),
    Role.ADMIN: frozenset({Role.USER, Role.ADMIN}),
}


class User(db.Model):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True)
    username = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(Role, values_callable=lambda roles: [r.value for r in roles],
                       name="user_role", validate_strings=True),
                  nullable=False, default=Role.USER)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=utcnow)
    last_login_at = Column(DateTime, nullable=True)

    workouts = relationship("Workout", back_populates="owner",
                            cascade="all, delete-orphan", passive_deletes=True)
    metrics = relationship("Metric", back_populates="owner",
                           cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("SessionRecord", cascade="all, delete-orphan", passive_deletes=True)

    def set_password(self, password: str):
        self.password_hash = hash_password(password)

    def check_password(self, password: str) -> bool:
        return verify_password(password, self.password_hash)

    def __repr__(self) -> str:
        return f"<User {self.username} ({self.role.value})>"


class LoginAttempt(db.Model):
    """Append-only audit row, one per login attempt.

    ``user_id`` is not a foreign key: the row outlives the account it
    points at, unchanged.
    """
    __tablename__ = "login_attempts"
    id = Column(Integer, primary_key=True)
    identifier = Column(String(255), nullable=False)
    user_id = Column(Integer, nullable=True, index=True)
    success = Column(Boolean, nullable=False)
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(512), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)


class SessionRecord(db.Model):
    """Server-held session. Rows without a user only carry a flash message."""
    __tablename__ = "sessions"
    token = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True)
    username = Column(String(20), nullable=True)
    role = Column(Enum(Role, values_callable=lambda roles: [r.value for r in roles],
                       name="session_role", validate_strings=True),
                  nullable=True)
    flash_kind = Column(String(16), nullable=True)
    flash_message = Column(String(255), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    expires_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index("ix_sessions_lookup", "token", "expires_at"),
    )
