from flask import Blueprint

metrics = Blueprint("metrics", __name__, url_prefix="/metrics")

from . import routes  # noqa: E402,F401
