import pytest

from healthapp import db
from security.models import Role, User

from conftest import PASSWORD


def _role(app, uid):
    with app.app_context():
        return db.session.get(User, uid).role


@pytest.mark.parametrize("path", ["/admin", "/admin/users", "/admin/logins"])
def test_admin_pages_need_login(client, path):
    resp = client.get(path)
    assert resp.status_code == 302
    assert resp.headers["Location"].startswith("/auth/login")


@pytest.mark.parametrize("path", ["/admin", "/admin/users", "/admin/logins"])
def test_admin_pages_forbidden_for_users(client, make_user, login, path):
    make_user("alice")
    login("alice")
    resp = client.get(path)
    assert resp.status_code == 403
    assert b"Forbidden" in resp.data


def test_user_cannot_change_roles(client, app, make_user, login):
    alice = make_user("alice")
    bob = make_user("bob")
    login("alice")
    resp = client.post(f"/admin/users/{bob}/role", data={"role": "admin"})
    assert resp.status_code == 403
    assert _role(app, bob) is Role.USER
    assert _role(app, alice) is Role.USER


def test_admin_pages_render(client, make_user, login, add_workout):
    make_user("root", role=Role.ADMIN)
    alice = make_user("alice")
    add_workout(alice)
    login("root")
    overview = client.get("/admin")
    assert overview.status_code == 200
    assert b"Users: 2" in overview.data
    assert b"alice (1 workouts)" in overview.data

    users = client.get("/admin/users")
    assert b"alice@example.com" in users.data

    logins = client.get("/admin/logins")
    assert b"root" in logins.data
    assert b"success" in logins.data


def test_admin_changes_role_of_another_user(client, app, make_user, login):
    make_user("root", role=Role.ADMIN)
    bob = make_user("bob")
    login("root")
    resp = client.post(f"/admin/users/{bob}/role", data={"role": "admin"})
    assert resp.status_code == 303
    assert resp.headers["Location"] == "/admin/users"
    assert _role(app, bob) is Role.ADMIN
    assert b"bob is now admin." in client.get("/admin/users").data


def test_unknown_role_is_rejected(client, app, make_user, login):
    make_user("root", role=Role.ADMIN)
    bob = make_user("bob")
    login("root")
    resp = client.post(f"/admin/users/{bob}/role", data={"role": "superuser"})
    assert resp.status_code == 303
    assert _role(app, bob) is Role.USER


def test_role_change_for_missing_user_is_404(client, make_user, login):
    make_user("root", role=Role.ADMIN)
    login("root")
    assert client.post("/admin/users/999/role", data={"role": "admin"}).status_code == 404


def test_admin_cannot_demote_self(client, app, make_user, login):
    root = make_user("root", role=Role.ADMIN)
    login("root")
    resp = client.post(f"/admin/users/{root}/role", data={"role": "user"})
    assert resp.status_code == 303
    assert _role(app, root) is Role.ADMIN
    assert b"You cannot remove your own admin access" in client.get("/admin/users").data


def test_admin_cannot_deactivate_self(client, app, make_user, login):
    root = make_user("root", role=Role.ADMIN)
    login("root")
    resp = client.post(f"/admin/users/{root}/toggle-active")
    assert resp.status_code == 303
    with app.app_context():
        assert db.session.get(User, root).is_active is True


def test_deactivation_ends_open_sessions(app, make_user):
    make_user("root", role=Role.ADMIN)
    bob = make_user("bob")
    admin_client, bob_client = app.test_client(), app.test_client()
    admin_client.post("/auth/login", data={"identifier": "root", "password": PASSWORD})
    bob_client.post("/auth/login", data={"identifier": "bob", "password": PASSWORD})
    assert bob_client.get("/dashboard").status_code == 200

    assert admin_client.post(f"/admin/users/{bob}/toggle-active").status_code == 303
    with app.app_context():
        assert db.session.get(User, bob).is_active is False

    resp = bob_client.get("/dashboard")
    assert resp.status_code == 302
    assert resp.headers["Location"].startswith("/auth/login")

    # reactivating restores the ability to log in
    admin_client.post(f"/admin/users/{bob}/toggle-active")
    resp = bob_client.post("/auth/login", data={"identifier": "bob", "password": PASSWORD})
    assert resp.status_code == 302


def test_role_change_applies_from_next_login(app, make_user):
    make_user("root", role=Role.ADMIN)
    bob = make_user("bob")
    admin_client, bob_client = app.test_client(), app.test_client()
    admin_client.post("/auth/login", data={"identifier": "root", "password": PASSWORD})
    bob_client.post("/auth/login", data={"identifier": "bob", "password": PASSWORD})

    admin_client.post(f"/admin/users/{bob}/role", data={"role": "admin"})
    assert bob_client.get("/admin").status_code == 403

    bob_client.get("/auth/logout")
    bob_client.post("/auth/login", data={"identifier": "bob", "password": PASSWORD})
    assert bob_client.get("/admin").status_code == 200


def test_user_listing_is_ordered(app, make_user):
    from security.accounts import list_users
    make_user("zed")
    make_user("amy")
    with app.app_context():
        assert [u.username for u in list_users().value] == ["zed", "amy"]
