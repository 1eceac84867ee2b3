from flask import Blueprint

workouts = Blueprint("workouts", __name__, url_prefix="/workouts")

from . import routes  # noqa: E402,F401
