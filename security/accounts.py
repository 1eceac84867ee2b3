import logging

from sqlalchemy import select, or_
from sqlalchemy.exc import IntegrityError

from healthapp import db
from healthapp.results import Outcome, ErrorKind, store_call
from .models import User, Role, utcnow

log = logging.getLogger(__name__)


@store_call
def find_by_identifier(identifier: str) -> Outcome:
    """Username or email. A miss is a successful lookup with value None."""
    identifier = (identifier or "").strip()
    if not identifier:
        return Outcome.success(None)
    user = db.session.execute(
        select(User).where(or_(User.username == identifier, User.email == identifier.lower()))
    ).scalars().first()
    return Outcome.success(user)


@store_call
def get_user(user_id: int) -> Outcome:
    user = db.session.get(User, user_id)
    if user is None:
        return Outcome.fail(ErrorKind.NOT_FOUND)
    return Outcome.success(user)


@store_call
def taken_identities(username: str, email: str) -> Outcome:
    rows = db.session.execute(
        select(User.username, User.email).where(or_(User.username == username, User.email == email))
    ).all()
    return Outcome.success({
        "username": any(r.username == username for r in rows),
        "email": any(r.email == email for r in rows),
    })


@store_call
def register_user(username: str, email: str, password: str, role: Role = Role.USER) -> Outcome:
    user = User(username=username, email=email.lower(), role=role, is_active=True)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return Outcome.fail(ErrorKind.CONFLICT)
    log.info("Registered user %s (role=%s)", user.username, user.role.value)
    return Outcome.success(user)


@store_call
def mark_logged_in(user: User) -> Outcome:
    user.last_login_at = utcnow()
    db.session.commit()
    return Outcome.success(user)


@store_call
def delete_account(user_id: int) -> Outcome:
    """Removes the user; workouts, metrics and sessions go with it."""
    user = db.session.get(User, user_id)
    if user is None:
        return Outcome.fail(ErrorKind.NOT_FOUND)
    db.session.delete(user)
    db.session.commit()
    log.info("Deleted account id=%s", user_id)
    return Outcome.success(user_id)


# -------- Admin mutations --------

@store_call
def list_users() -> Outcome:
    return Outcome.success(db.session.execute(select(User).order_by(User.id)).scalars().all())


@store_call
def set_role(actor_id: int, target_id: int, role: Role) -> Outcome:
    user = db.session.get(User, target_id)
    if user is None:
        return Outcome.fail(ErrorKind.NOT_FOUND)
    if user.id == actor_id and role is not Role.ADMIN:
        return Outcome.fail(ErrorKind.SELF_PROTECTED)
    user.role = role
    db.session.commit()
    log.info("User id=%s set role of id=%s to %s", actor_id, target_id, role.value)
    return Outcome.success(user)


@store_call
def toggle_active(actor_id: int, target_id: int) -> Outcome:
    user = db.session.get(User, target_id)
    if user is None:
        return Outcome.fail(ErrorKind.NOT_FOUND)
    if user.id == actor_id:
        return Outcome.fail(ErrorKind.SELF_PROTECTED)
    user.is_active = not user.is_active
    db.session.commit()
    log.info("User id=%s set active=%s on id=%s", actor_id, user.is_active, target_id)
    return Outcome.success(user)
