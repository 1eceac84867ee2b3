# /healthapp/metrics/routes.py
# CRUD de métricas corporales, mismo patrón de dueño que entrenamientos.

from flask import render_template, request, redirect, url_for

from . import metrics
from ..errors import translate
from ..forms import MetricForm
from ..models import Metric
from ..services import list_metrics, get_owned, create_owned, update_owned, delete_owned
from security import push_flash
from security.utils import login_required


def _render_form(form, title, action, submit_label, status=200):
    return render_template("metrics/form.html", title=title, form=form,
                           form_action=action, submit_label=submit_label), status


@metrics.route("/", strict_slashes=False)
@login_required
def index(auth):
    listed = list_metrics(auth.id)
    if not listed.ok:
        return translate(listed.error)
    return render_template("metrics/list.html", title="My Health Metrics", metrics=listed.value)


@metrics.route("/add", methods=["GET", "POST"])
@login_required
def add(auth):
    form = MetricForm()
    if form.validate_on_submit():
        created = create_owned(Metric, auth.id, form.to_fields())
        if not created.ok:
            return translate(created.error)
        push_flash("success", "Metric added.")
        return redirect(url_for("metrics.index"))
    return _render_form(form, "Add Metric", url_for("metrics.add"), "Add Metric",
                        422 if form.is_submitted() else 200)


@metrics.route("/<int:metric_id>")
@login_required
def detail(auth, metric_id):
    found = get_owned(Metric, auth.id, metric_id)
    if not found.ok:
        return translate(found.error)
    return render_template("metrics/detail.html", title="Metric Details",
                           metric=found.value)


@metrics.route("/<int:metric_id>/edit", methods=["GET", "POST"])
@login_required
def edit(auth, metric_id):
    action = url_for("metrics.edit", metric_id=metric_id)
    if request.method == "GET":
        found = get_owned(Metric, auth.id, metric_id)
        if not found.ok:
            return translate(found.error)
        return _render_form(MetricForm(obj=found.value), "Edit Metric", action, "Save changes")

    form = MetricForm()
    if not form.validate_on_submit():
        return _render_form(form, "Edit Metric", action, "Save changes", 422)
    updated = update_owned(Metric, auth.id, metric_id, form.to_fields())
    if not updated.ok:
        return translate(updated.error)
    push_flash("success", "Metric updated.")
    return redirect(url_for("metrics.index"))


@metrics.route("/<int:metric_id>/delete", methods=["POST"])
@login_required
def delete(auth, metric_id):
    deleted = delete_owned(Metric, auth.id, metric_id)
    if not deleted.ok:
        return translate(deleted.error)
    push_flash("success", "Metric deleted.")
    return redirect(url_for("metrics.index"))
