import datetime as dt

from healthapp import db
from security.models import SessionRecord, User, Role
from security.sessions import SessionManager, Flash


class FakeClock:
    def __init__(self):
        self.now = dt.datetime(2024, 1, 1, 12, 0, 0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += dt.timedelta(**kwargs)


def _manager(clock=None):
    return SessionManager(dt.timedelta(hours=2), clock=clock or FakeClock())


def test_create_and_resolve_snapshot(app, make_user):
    uid = make_user("alice")
    with app.app_context():
        manager = _manager()
        token = manager.create(db.session.get(User, uid))
        resolved = manager.resolve(token)
        assert resolved.id == uid
        assert resolved.username == "alice"
        assert resolved.role is Role.USER
        assert resolved.is_authenticated
        assert not resolved.is_admin


def test_tokens_are_unique_and_opaque(app, make_user):
    uid = make_user("alice")
    with app.app_context():
        manager = _manager()
        user = db.session.get(User, uid)
        first, second = manager.create(user), manager.create(user)
        assert first != second
        assert str(uid) not in first
        # both sessions stay valid
        assert manager.resolve(first) and manager.resolve(second)


def test_unknown_or_missing_token_resolves_to_none(app):
    with app.app_context():
        manager = _manager()
        assert manager.resolve(None) is None
        assert manager.resolve("") is None
        assert manager.resolve("not-a-token") is None


def test_session_expires_after_lifetime(app, make_user):
    uid = make_user("alice")
    clock = FakeClock()
    with app.app_context():
        manager = _manager(clock)
        token = manager.create(db.session.get(User, uid))
        clock.advance(hours=1, minutes=59)
        assert manager.resolve(token) is not None
        clock.advance(minutes=1)
        assert manager.resolve(token) is None


def test_destroy_is_idempotent(app, make_user):
    uid = make_user("alice")
    with app.app_context():
        manager = _manager()
        token = manager.create(db.session.get(User, uid))
        manager.destroy(token)
        manager.destroy(token)
        manager.destroy(None)
        assert manager.resolve(token) is None


def test_guest_session_never_authenticates(app):
    with app.app_context():
        manager = _manager()
        token = manager.create_guest()
        assert manager.resolve(token) is None
        assert manager.set_flash(token, "info", "hello")


def test_flash_is_delivered_once(app):
    with app.app_context():
        manager = _manager()
        token = manager.create_guest()
        assert manager.take_flash(token) is None
        manager.set_flash(token, "success", "Saved.")
        assert manager.take_flash(token) == Flash("success", "Saved.")
        assert manager.take_flash(token) is None


def test_flash_needs_a_live_session(app):
    clock = FakeClock()
    with app.app_context():
        manager = _manager(clock)
        assert manager.set_flash(None, "info", "x") is False
        assert manager.set_flash("missing", "info", "x") is False
        token = manager.create_guest()
        clock.advance(hours=3)
        assert manager.set_flash(token, "info", "x") is False


def test_revoke_user_and_purge_expired(app, make_user):
    uid = make_user("alice")
    clock = FakeClock()
    with app.app_context():
        manager = _manager(clock)
        user = db.session.get(User, uid)
        tokens = [manager.create(user), manager.create(user)]
        guest = manager.create_guest()
        assert manager.revoke_user(uid) == 2
        assert all(manager.resolve(t) is None for t in tokens)

        clock.advance(hours=3)
        assert manager.purge_expired() == 1
        assert db.session.get(SessionRecord, guest) is None


def test_expired_rows_are_swept_when_sessions_open(app, make_user):
    uid = make_user("alice")
    clock = FakeClock()
    with app.app_context():
        manager = _manager(clock)
        stale = [manager.create_guest() for _ in range(3)] + [manager.create(db.session.get(User, uid))]
        clock.advance(hours=3)
        fresh = manager.create_guest()
        assert all(db.session.get(SessionRecord, t) is None for t in stale)
        assert db.session.get(SessionRecord, fresh) is not None


def test_sweep_runs_at_most_once_per_interval(app):
    clock = FakeClock()
    with app.app_context():
        manager = SessionManager(dt.timedelta(minutes=1), clock=clock,
                                 purge_interval=dt.timedelta(minutes=15))
        first = manager.create_guest()
        clock.advance(minutes=5)
        manager.create_guest()
        # expired, but the next sweep is not due yet
        assert db.session.get(SessionRecord, first) is not None
        clock.advance(minutes=10)
        manager.create_guest()
        assert db.session.get(SessionRecord, first) is None


def test_anonymous_traffic_does_not_pile_up(app):
    clock = FakeClock()
    app.extensions["session_manager"] = _manager(clock)
    for _ in range(5):
        resp = app.test_client().get("/dashboard")
        assert resp.status_code == 302
    with app.app_context():
        assert db.session.query(SessionRecord).count() == 5

    clock.advance(hours=3)
    app.test_client().get("/dashboard")
    with app.app_context():
        assert db.session.query(SessionRecord).count() == 1
