# /healthapp/admin/routes.py
# Panel de administración: sólo rol admin (403 para el resto).

from flask import render_template, redirect, url_for

from . import admin
from ..errors import translate
from ..services import admin_overview
from security import push_flash, current_sessions
from security.accounts import list_users, set_role, toggle_active
from security.audit import recent_login_attempts
from security.forms import RoleForm
from security.models import Role
from security.utils import admin_required


@admin.route("/", strict_slashes=False)
@admin_required
def overview(auth):
    stats = admin_overview()
    if not stats.ok:
        return translate(stats.error)
    return render_template("admin/overview.html", title="Admin Overview", **stats.value)


@admin.route("/users")
@admin_required
def users(auth):
    listed = list_users()
    if not listed.ok:
        return translate(listed.error)
    return render_template("admin/users.html", title="Manage Users", users=listed.value, roles=list(Role))


@admin.route("/users/<int:user_id>/role", methods=["POST"])
@admin_required
def change_role(auth, user_id):
    back = url_for("admin.users")
    form = RoleForm()
    role = Role.parse(form.role.data) if form.validate_on_submit() else None
    if role is None:
        push_flash("error", "Please choose a valid role.")
        return redirect(back, code=303)

    changed = set_role(auth.id, user_id, role)
    if not changed.ok:
        return translate(changed.error, fallback=back)
    push_flash("success", f"{changed.value.username} is now {role.value}.")
    return redirect(back, code=303)


@admin.route("/users/<int:user_id>/toggle-active", methods=["POST"])
@admin_required
def toggle_user_active(auth, user_id):
    back = url_for("admin.users")
    toggled = toggle_active(auth.id, user_id)
    if not toggled.ok:
        return translate(toggled.error, fallback=back)
    user = toggled.value
    if not user.is_active:
        current_sessions().revoke_user(user.id)
    push_flash("success", f"{user.username} is now {'active' if user.is_active else 'inactive'}.")
    return redirect(back, code=303)


@admin.route("/logins")
@admin_required
def logins(auth):
    attempts = recent_login_attempts()
    if not attempts.ok:
        return translate(attempts.error)
    return render_template("admin/logins.html", title="Login Audit", attempts=attempts.value)
