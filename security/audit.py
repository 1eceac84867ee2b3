import logging

from sqlalchemy import event, select

from healthapp import db
from healthapp.results import Outcome, store_call
from .models import LoginAttempt

log = logging.getLogger(__name__)


class AuditLogError(RuntimeError):
    pass


@event.listens_for(LoginAttempt, "before_update")
def _refuse_update(mapper, connection, target):
    raise AuditLogError("login audit records are write-once")


@event.listens_for(LoginAttempt, "before_delete")
def _refuse_delete(mapper, connection, target):
    raise AuditLogError("login audit records are write-once")


def record_login_attempt(identifier, user_id, success, ip_address=None, user_agent=None) -> LoginAttempt:
    """Append one audit row and commit it.

    Store errors propagate: an attempt that cannot be audited fails the
    request.
    """
    attempt = LoginAttempt(
        identifier=(identifier or "")[:255],
        user_id=user_id,
        success=bool(success),
        ip_address=(ip_address or "")[:64] or None,
        user_agent=(user_agent or "")[:512] or None,
    )
    db.session.add(attempt)
    db.session.commit()
    log.info("Login attempt identifier=%r user_id=%s success=%s ip=%s",
             attempt.identifier, user_id, attempt.success, attempt.ip_address)
    return attempt


@store_call
def recent_login_attempts(limit=50) -> Outcome:
    rows = db.session.execute(
        select(LoginAttempt).order_by(LoginAttempt.created_at.desc(), LoginAttempt.id.desc()).limit(limit)
    ).scalars().all()
    return Outcome.success(rows)
