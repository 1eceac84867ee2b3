# /healthapp/errors.py
# Traductor único: tipo de error -> respuesta HTTP.

from flask import render_template, redirect, current_app
from sqlalchemy.exc import SQLAlchemyError

from .results import ErrorKind

_MESSAGES = {
    ErrorKind.CONFLICT: "That change conflicts with existing data.",
    ErrorKind.SELF_PROTECTED: "You cannot remove your own admin access or deactivate your own account.",
}


def translate(kind: ErrorKind, fallback: str = None):
    if kind is ErrorKind.NOT_FOUND:
        return render_template("error_404.html", title="Not found"), 404
    if kind is ErrorKind.FORBIDDEN:
        return render_template("error_403.html", title="Forbidden"), 403
    if kind in (ErrorKind.CONFLICT, ErrorKind.SELF_PROTECTED) and fallback:
        from security import push_flash
        push_flash("error", _MESSAGES[kind])
        return redirect(fallback, code=303)
    # STORE_UNAVAILABLE y cualquier caso sin destino: error genérico.
    # Sin context processors: la página no debe volver a consultar la sesión.
    page = current_app.jinja_env.get_template("error_500.html").render(title="Server error")
    return page, 500


def register_error_handlers(app):
    @app.errorhandler(403)
    def forbidden(e):
        return translate(ErrorKind.FORBIDDEN)

    @app.errorhandler(404)
    def not_found(e):
        return translate(ErrorKind.NOT_FOUND)

    @app.errorhandler(SQLAlchemyError)
    def store_failure(e):
        from . import db
        db.session.rollback()
        current_app.logger.exception("Unhandled store failure")
        return translate(ErrorKind.STORE_UNAVAILABLE)

    @app.errorhandler(500)
    def server_error(e):
        current_app.logger.error("Unhandled error: %r", getattr(e, "original_exception", e))
        return translate(ErrorKind.STORE_UNAVAILABLE)
