from urllib.parse import urlsplit

from flask import Blueprint, render_template, request, redirect, url_for, current_app
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from healthapp import db
from healthapp.errors import translate
from healthapp.results import ErrorKind
from . import limiter, current_sessions, session_token, issue_cookie, clear_cookie, push_flash
from .accounts import find_by_identifier, get_user, taken_identities, register_user, mark_logged_in, delete_account as remove_account
from .audit import record_login_attempt
from .forms import LoginForm, RegisterForm, DeleteAccountForm
from .utils import login_required

bp = Blueprint("security", __name__, url_prefix="/auth")
limiter.limit(lambda: current_app.config["AUTH_RATE_LIMIT"])(bp)

INVALID_CREDENTIALS = "Invalid username or password."


# ------------- Helpers -------------
def _safe_next(target):
    if not target or not target.startswith("/") or target.startswith("//"):
        return None
    parts = urlsplit(target)
    if parts.scheme or parts.netloc:
        return None
    return target


def _form_status(form):
    # 422 when a submitted form failed validation, 200 on first render
    return 422 if form.is_submitted() else 200


# ------------- Routes -------------

@bp.route("/register", methods=["GET", "POST"])
def register():
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))
    form = RegisterForm()
    if form.validate_on_submit():
        username = form.username.data.strip()
        email = form.email.data.strip().lower()

        taken = taken_identities(username, email)
        if not taken.ok:
            return translate(taken.error)
        if taken.value["username"]:
            form.username.errors.append("That username is already taken.")
        if taken.value["email"]:
            form.email.errors.append("That email is already registered.")

        if not (taken.value["username"] or taken.value["email"]):
            created = register_user(username, email, form.password.data)
            if created.ok:
                push_flash("success", "Account created. Please log in.")
                return redirect(url_for("security.login"))
            if created.error is not ErrorKind.CONFLICT:
                return translate(created.error)
            form.username.errors.append("That username or email is already registered.")
    return render_template("auth/register.html", form=form, title="Register"), _form_status(form)


@bp.route("/login", methods=["GET", "POST"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("main.dashboard"))
    form = LoginForm()
    if form.validate_on_submit():
        identifier = form.identifier.data
        found = find_by_identifier(identifier)
        if not found.ok:
            return translate(found.error)
        user = found.value
        user_id = user.id if user is not None else None

        def audit(success):
            record_login_attempt(identifier, user_id, success,
                                 ip_address=request.remote_addr,
                                 user_agent=request.user_agent.string)

        if not (user is not None and user.is_active and user.check_password(form.password.data)):
            audit(False)
            return render_template("auth/login.html", form=form, title="Login",
                                   error=INVALID_CREDENTIALS), 401

        # success is recorded only once a session exists
        marked = mark_logged_in(user)
        if not marked.ok:
            audit(False)
            return translate(marked.error)

        manager = current_sessions()
        try:
            token = manager.create(user)
        except SQLAlchemyError:
            db.session.rollback()
            audit(False)
            raise
        audit(True)

        stale = session_token()
        if stale:
            manager.destroy(stale)
        issue_cookie(token)
        push_flash("success", "Welcome back!")
        return redirect(_safe_next(request.args.get("next")) or url_for("main.dashboard"))
    return render_template("auth/login.html", form=form, title="Login"), _form_status(form)


@bp.route("/logout")
def logout():
    current_sessions().destroy(session_token())
    clear_cookie()
    return redirect(url_for("main.index"))


@bp.route("/delete-account", methods=["GET", "POST"])
@login_required
def delete_account(auth):
    form = DeleteAccountForm()
    if form.validate_on_submit():
        found = get_user(auth.id)
        if not found.ok:
            return translate(found.error)
        if not found.value.check_password(form.password.data):
            form.password.errors.append("Password is incorrect.")
        else:
            deleted = remove_account(auth.id)
            if not deleted.ok:
                return translate(deleted.error)
            current_sessions().destroy(auth.token)
            clear_cookie()
            push_flash("success", "Your account and all of its data have been deleted.")
            return redirect(url_for("main.index"))
    return render_template("auth/delete_account.html", form=form, title="Delete account"), _form_status(form)
