import datetime as dt

import pytest

from healthapp import db
from healthapp.models import Workout

VALID = {"date": "2024-03-01", "type": "Running", "duration_min": "30", "intensity": "3",
         "calories": "250", "notes": "easy pace"}


def _workout(app, wid):
    with app.app_context():
        return db.session.get(Workout, wid)


@pytest.mark.parametrize("method, path", [
    ("get", "/workouts"), ("get", "/workouts/"), ("get", "/workouts/add"),
    ("get", "/workouts/1"), ("post", "/workouts/1/edit"), ("post", "/workouts/1/delete"),
])
def test_workout_routes_need_login(client, method, path):
    resp = getattr(client, method)(path)
    assert resp.status_code == 302
    assert resp.headers["Location"].startswith("/auth/login")


def test_add_and_list_workout(client, app, make_user, login):
    uid = make_user("alice")
    login("alice")
    resp = client.post("/workouts/add", data=VALID)
    assert resp.status_code == 302
    listing = client.get("/workouts")
    assert b"Workout added." in listing.data
    assert b"Running" in listing.data
    with app.app_context():
        row = db.session.query(Workout).one()
        assert (row.user_id, row.duration_min, row.calories) == (uid, 30, 250)
        assert row.date == dt.date(2024, 3, 1)


def test_owner_comes_from_session_not_form(client, app, make_user, login):
    make_user("alice")
    bob = make_user("bob")
    login("alice")
    client.post("/workouts/add", data=dict(VALID, user_id=str(bob)))
    with app.app_context():
        assert db.session.query(Workout).filter_by(user_id=bob).count() == 0


@pytest.mark.parametrize("field, value, message", [
    ("duration_min", "0", b"Duration must be a positive number."),
    ("duration_min", "-5", b"Duration must be a positive number."),
    ("intensity", "6", b"Intensity must be between 1 and 5."),
    ("calories", "-1", b"Calories cannot be negative."),
    ("type", "", b"Type is required."),
])
def test_invalid_workout_is_rejected(client, app, make_user, login, field, value, message):
    make_user("alice")
    login("alice")
    resp = client.post("/workouts/add", data=dict(VALID, **{field: value}))
    assert resp.status_code == 422
    assert message in resp.data
    with app.app_context():
        assert db.session.query(Workout).count() == 0


def test_edit_own_workout(client, app, make_user, login, add_workout):
    uid = make_user("alice")
    wid = add_workout(uid, type="Yoga")
    login("alice")
    form = client.get(f"/workouts/{wid}/edit")
    assert form.status_code == 200
    assert b"Yoga" in form.data

    resp = client.post(f"/workouts/{wid}/edit", data=dict(VALID, type="Pilates"))
    assert resp.status_code == 302
    assert _workout(app, wid).type == "Pilates"


def test_delete_own_workout(client, app, make_user, login, add_workout):
    uid = make_user("alice")
    wid = add_workout(uid)
    login("alice")
    assert client.post(f"/workouts/{wid}/delete").status_code == 302
    assert _workout(app, wid) is None
    assert client.post(f"/workouts/{wid}/delete").status_code == 404


def test_other_users_workouts_look_missing(client, app, make_user, login, add_workout):
    alice = make_user("alice")
    make_user("bob")
    wid = add_workout(alice, type="Yoga", duration_min=40)
    login("bob")

    assert client.get(f"/workouts/{wid}").status_code == 404
    assert client.get(f"/workouts/{wid}/edit").status_code == 404
    resp = client.post(f"/workouts/{wid}/edit", data=dict(VALID, type="Hacked"))
    assert resp.status_code == 404
    assert client.post(f"/workouts/{wid}/delete").status_code == 404

    row = _workout(app, wid)
    assert (row.user_id, row.type, row.duration_min) == (alice, "Yoga", 40)
    assert b"Yoga" not in client.get("/workouts").data


def test_missing_workout_is_404(client, make_user, login):
    make_user("alice")
    login("alice")
    resp = client.get("/workouts/12345")
    assert resp.status_code == 404
    assert b"Page not found" in resp.data


def test_user_text_is_escaped(client, make_user, login, add_workout):
    uid = make_user("alice")
    wid = add_workout(uid, notes="<script>alert(1)</script>")
    login("alice")
    resp = client.get(f"/workouts/{wid}")
    assert b"<script>alert(1)</script>" not in resp.data
    assert b"&lt;script&gt;" in resp.data


def test_listing_is_paginated_newest_first(client, make_user, login, add_workout):
    uid = make_user("alice")
    for day in range(1, 13):
        add_workout(uid, type=f"Session {day:02d}", date=dt.date(2024, 1, day))
    login("alice")
    first = client.get("/workouts")
    assert b"Page 1 of 2" in first.data
    assert b"Session 12" in first.data
    assert b"Session 02" not in first.data

    second = client.get("/workouts?page=2")
    assert b"Session 01" in second.data
    assert b"Session 12" not in second.data
