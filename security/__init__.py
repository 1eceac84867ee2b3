import os
import datetime as dt
from flask import current_app, g, request, redirect, url_for
from flask_login import LoginManager
from flask_wtf import CSRFProtect
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

from .sessions import SessionManager

# Globals initialized on init_app
login_manager = LoginManager()
csrf = CSRFProtect()
limiter = Limiter(get_remote_address, default_limits=[])


def current_sessions() -> SessionManager:
    return current_app.extensions["session_manager"]


def session_token():
    """Token issued earlier in this request, else the one the client sent."""
    return g.get("auth_token_out") or request.cookies.get(current_app.config["AUTH_COOKIE_NAME"])


def issue_cookie(token: str):
    g.auth_token_out = token
    g.auth_cookie_cleared = False


def clear_cookie():
    g.auth_token_out = None
    g.auth_cookie_cleared = True


def push_flash(kind: str, message: str):
    """Queue a one-shot message for the next page the client renders.

    Visitors without a live session get a guest session to carry it.
    """
    manager = current_sessions()
    token = None if g.get("auth_cookie_cleared") else session_token()
    if manager.set_flash(token, kind, message):
        return
    token = manager.create_guest()
    manager.set_flash(token, kind, message)
    issue_cookie(token)


def pop_flash():
    token = None if g.get("auth_cookie_cleared") else session_token()
    return current_sessions().take_flash(token)


def _write_session_cookie(response):
    name = current_app.config["AUTH_COOKIE_NAME"]
    token = g.get("auth_token_out")
    if token:
        response.set_cookie(
            name, token,
            max_age=int(current_sessions().lifetime.total_seconds()),
            httponly=True,
            secure=current_app.config["AUTH_COOKIE_SECURE"],
            samesite="Lax",
            path="/",
        )
    elif g.get("auth_cookie_cleared"):
        response.delete_cookie(name, path="/", httponly=True,
                               secure=current_app.config["AUTH_COOKIE_SECURE"], samesite="Lax")
    return response


@login_manager.request_loader
def load_session_user(req):
    return current_sessions().resolve(req.cookies.get(current_app.config["AUTH_COOKIE_NAME"]))


@login_manager.unauthorized_handler
def send_to_login():
    push_flash("error", "You must be logged in to view that page.")
    if request.method == "GET":
        return redirect(url_for("security.login", next=request.path))
    return redirect(url_for("security.login"))


def init_app(app):
    # Secrets / defaults
    app.config.setdefault("SECRET_KEY", os.environ.get("SECRET_KEY", "change-this-in-prod"))
    app.config.setdefault("AUTH_COOKIE_NAME", "health_app_sid")
    app.config.setdefault("AUTH_SESSION_LIFETIME", dt.timedelta(hours=2))  # absolute, not sliding
    # If you run behind HTTPS, set this to True
    app.config.setdefault("AUTH_COOKIE_SECURE", os.environ.get("AUTH_COOKIE_SECURE", "false").lower() == "true")
    app.config.setdefault("SESSION_COOKIE_HTTPONLY", True)
    app.config.setdefault("SESSION_COOKIE_SAMESITE", "Lax")

    # Rate limiting
    app.config.setdefault("AUTH_RATE_LIMIT", os.environ.get("AUTH_RATE_LIMIT", "100 per 15 minutes"))
    app.config.setdefault("RATELIMIT_STORAGE_URI", os.environ.get("RATELIMIT_STORAGE_URI", "memory://"))
    app.config.setdefault("RATELIMIT_HEADERS_ENABLED", True)
    limiter.init_app(app)

    # CSRF
    csrf.init_app(app)

    # Sessions
    app.config.setdefault("AUTH_SESSION_PURGE_INTERVAL", dt.timedelta(minutes=15))
    app.extensions["session_manager"] = SessionManager(app.config["AUTH_SESSION_LIFETIME"],
                                                       purge_interval=app.config["AUTH_SESSION_PURGE_INTERVAL"])
    app.after_request(_write_session_cookie)

    # Login
    login_manager.init_app(app)
    login_manager.session_protection = None

    @app.context_processor
    def inject_flash():
        return dict(pop_flash=pop_flash)

    from . import models  # noqa: F401  (tables must be known before create_all)

    # Register blueprint
    from .routes import bp as security_bp
    app.register_blueprint(security_bp)
