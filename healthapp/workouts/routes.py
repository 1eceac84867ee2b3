# /healthapp/workouts/routes.py
# CRUD de entrenamientos. El dueño siempre sale de la sesión (auth.id).

from flask import render_template, request, redirect, url_for, current_app

from . import workouts
from ..errors import translate
from ..forms import WorkoutForm
from ..models import Workout
from ..services import list_workouts, get_owned, create_owned, update_owned, delete_owned
from security import push_flash
from security.utils import login_required


def _render_form(form, title, action, submit_label, status=200):
    return render_template("workouts/form.html", title=title, form=form,
                           form_action=action, submit_label=submit_label), status


@workouts.route("/", strict_slashes=False)
@login_required
def index(auth):
    page = request.args.get("page", 1, type=int)
    listed = list_workouts(auth.id, page=max(page, 1), per_page=current_app.config["WORKOUTS_PAGE_SIZE"])
    if not listed.ok:
        return translate(listed.error)
    return render_template("workouts/list.html", title="My Workouts", pagination=listed.value)


@workouts.route("/add", methods=["GET", "POST"])
@login_required
def add(auth):
    form = WorkoutForm()
    if form.validate_on_submit():
        created = create_owned(Workout, auth.id, form.to_fields())
        if not created.ok:
            return translate(created.error)
        push_flash("success", "Workout added.")
        return redirect(url_for("workouts.index"))
    return _render_form(form, "Add Workout", url_for("workouts.add"), "Add Workout",
                        422 if form.is_submitted() else 200)


@workouts.route("/<int:workout_id>")
@login_required
def detail(auth, workout_id):
    found = get_owned(Workout, auth.id, workout_id)
    if not found.ok:
        return translate(found.error)
    return render_template("workouts/detail.html", title="Workout Details",
                           workout=found.value)


@workouts.route("/<int:workout_id>/edit", methods=["GET", "POST"])
@login_required
def edit(auth, workout_id):
    action = url_for("workouts.edit", workout_id=workout_id)
    if request.method == "GET":
        found = get_owned(Workout, auth.id, workout_id)
        if not found.ok:
            return translate(found.error)
        return _render_form(WorkoutForm(obj=found.value), "Edit Workout", action, "Save changes")

    form = WorkoutForm()
    if not form.validate_on_submit():
        return _render_form(form, "Edit Workout", action, "Save changes", 422)
    updated = update_owned(Workout, auth.id, workout_id, form.to_fields())
    if not updated.ok:
        return translate(updated.error)
    push_flash("success", "Workout updated.")
    return redirect(url_for("workouts.index"))


@workouts.route("/<int:workout_id>/delete", methods=["POST"])
@login_required
def delete(auth, workout_id):
    deleted = delete_owned(Workout, auth.id, workout_id)
    if not deleted.ok:
        return translate(deleted.error)
    push_flash("success", "Workout deleted.")
    return redirect(url_for("workouts.index"))
