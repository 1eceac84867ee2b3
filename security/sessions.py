import datetime as dt
import logging
import secrets
from dataclasses import dataclass
from typing import Callable, Optional

from flask_login import UserMixin
from sqlalchemy import select, update, delete

from healthapp import db
from .models import SessionRecord, Role, utcnow

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Flash:
    kind: str
    message: str


@dataclass(frozen=True, eq=False)
class SessionUser(UserMixin):
    """Identity snapshot taken at login; handed to every gated view."""
    token: str
    id: int
    username: str
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role.satisfies(Role.ADMIN)


class SessionManager:
    """Server-side sessions keyed by an opaque token.

    Store errors are not caught here: a session lookup that cannot reach the
    database must fail the request, not degrade to an anonymous visitor.
    """

    def __init__(self, lifetime: dt.timedelta, clock: Callable[[], dt.datetime] = utcnow,
                 purge_interval: dt.timedelta = dt.timedelta(minutes=15)):
        self.lifetime = lifetime
        self.purge_interval = purge_interval
        self._clock = clock
        self._last_purge = None

    def _purge_if_due(self, now: dt.datetime) -> None:
        # expired rows are swept while new sessions are being opened
        if self._last_purge is not None and now - self._last_purge < self.purge_interval:
            return
        self._last_purge = now
        removed = self.purge_expired()
        if removed:
            log.info("Purged %d expired session(s)", removed)

    def _open(self, user_id=None, username=None, role=None) -> str:
        now = self._clock()
        self._purge_if_due(now)
        token = secrets.token_urlsafe(32)
        db.session.add(SessionRecord(token=token, user_id=user_id, username=username, role=role,
                                     created_at=now, expires_at=now + self.lifetime))
        db.session.commit()
        return token

    def create(self, user) -> str:
        """Issue a session for ``user``. Other sessions of the same user stay valid."""
        token = self._open(user.id, user.username, user.role)
        log.info("Session opened for user id=%s", user.id)
        return token

    def create_guest(self) -> str:
        """A session with no identity, used only to carry a flash message."""
        return self._open()

    def _live(self, token: str):
        return (SessionRecord.token == token) & (SessionRecord.expires_at > self._clock())

    def resolve(self, token: Optional[str]) -> Optional[SessionUser]:
        if not token:
            return None
        record = db.session.execute(
            select(SessionRecord).where(self._live(token), SessionRecord.user_id.is_not(None))
        ).scalar_one_or_none()
        if record is None:
            return None
        return SessionUser(token=record.token, id=record.user_id,
                           username=record.username, role=record.role)

    def destroy(self, token: Optional[str]) -> None:
        if not token:
            return
        db.session.execute(delete(SessionRecord).where(SessionRecord.token == token))
        db.session.commit()

    def revoke_user(self, user_id: int) -> int:
        result = db.session.execute(delete(SessionRecord).where(SessionRecord.user_id == user_id))
        db.session.commit()
        if result.rowcount:
            log.info("Revoked %d session(s) of user id=%s", result.rowcount, user_id)
        return result.rowcount

    def purge_expired(self) -> int:
        result = db.session.execute(delete(SessionRecord).where(SessionRecord.expires_at <= self._clock()))
        db.session.commit()
        return result.rowcount

    def set_flash(self, token: Optional[str], kind: str, message: str) -> bool:
        """Store a one-shot message; False when the token has no live session."""
        if not token:
            return False
        result = db.session.execute(
            update(SessionRecord).where(self._live(token))
            .values(flash_kind=kind, flash_message=message)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        return result.rowcount == 1

    def take_flash(self, token: Optional[str]) -> Optional[Flash]:
        if not token:
            return None
        row = db.session.execute(
            select(SessionRecord.flash_kind, SessionRecord.flash_message)
            .where(self._live(token), SessionRecord.flash_message.is_not(None))
        ).first()
        if row is None:
            return None
        # compare-and-clear: only the reader that empties the slot gets the message
        cleared = db.session.execute(
            update(SessionRecord)
            .where(SessionRecord.token == token,
                   SessionRecord.flash_kind == row.flash_kind,
                   SessionRecord.flash_message == row.flash_message)
            .values(flash_kind=None, flash_message=None)
            .execution_options(synchronize_session=False)
        )
        db.session.commit()
        if cleared.rowcount != 1:
            return None
        return Flash(row.flash_kind, row.flash_message)
