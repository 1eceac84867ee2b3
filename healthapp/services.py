# /healthapp/services.py
# Acceso a datos de entrenamientos, métricas y estadísticas.
# Toda lectura/escritura de una entidad propia filtra por el id del dueño,
# que sólo viene de la sesión resuelta. "No existe" y "es de otro" dan el
# mismo resultado: NOT_FOUND.

import datetime as dt
import logging

from sqlalchemy import select, update, delete, func

from . import db
from .models import Workout, Metric
from .results import Outcome, ErrorKind, store_call
from security.models import User

log = logging.getLogger(__name__)

WORKOUT_FIELDS = ("date", "type", "duration_min", "intensity", "calories", "notes")
METRIC_FIELDS = ("date", "weight_kg", "steps", "bp_systolic", "bp_diastolic", "notes")

_FIELDS = {Workout: WORKOUT_FIELDS, Metric: METRIC_FIELDS}


def _clean(model, fields: dict) -> dict:
    """Sólo columnas editables; user_id e id nunca vienen del cliente."""
    allowed = _FIELDS[model]
    return {k: v for k, v in fields.items() if k in allowed}


def _newest_first(model):
    return (model.date.desc(), model.id.desc())


# ---------------------- Entidades propias (CRUD) ----------------------

@store_call
def get_owned(model, owner_id: int, record_id: int) -> Outcome:
    record = db.session.execute(
        select(model).where(model.id == record_id, model.user_id == owner_id)
    ).scalar_one_or_none()
    if record is None:
        return Outcome.fail(ErrorKind.NOT_FOUND)
    return Outcome.success(record)


@store_call
def create_owned(model, owner_id: int, fields: dict) -> Outcome:
    record = model(user_id=owner_id, **_clean(model, fields))
    db.session.add(record)
    db.session.commit()
    log.info("%s %s created by user id=%s", model.__name__, record.id, owner_id)
    return Outcome.success(record)


@store_call
def update_owned(model, owner_id: int, record_id: int, fields: dict) -> Outcome:
    result = db.session.execute(
        update(model)
        .where(model.id == record_id, model.user_id == owner_id)
        .values(**_clean(model, fields))
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount != 1:
        return Outcome.fail(ErrorKind.NOT_FOUND)
    return Outcome.success(record_id)


@store_call
def delete_owned(model, owner_id: int, record_id: int) -> Outcome:
    result = db.session.execute(
        delete(model)
        .where(model.id == record_id, model.user_id == owner_id)
        .execution_options(synchronize_session=False)
    )
    db.session.commit()
    if result.rowcount != 1:
        return Outcome.fail(ErrorKind.NOT_FOUND)
    return Outcome.success(record_id)


# ---------------------- Listados y búsqueda ---------------------------

@store_call
def list_workouts(owner_id: int, page: int, per_page: int) -> Outcome:
    query = select(Workout).where(Workout.user_id == owner_id).order_by(*_newest_first(Workout))
    return Outcome.success(db.paginate(query, page=page, per_page=per_page, error_out=False))


@store_call
def list_metrics(owner_id: int) -> Outcome:
    rows = db.session.execute(
        select(Metric).where(Metric.user_id == owner_id).order_by(*_newest_first(Metric))
    ).scalars().all()
    return Outcome.success(rows)


@store_call
def search_workouts(owner_id: int, workout_filter) -> Outcome:
    rows = db.session.execute(
        select(Workout).where(*workout_filter.clauses(owner_id)).order_by(*_newest_first(Workout))
    ).scalars().all()
    return Outcome.success(rows)


# ---------------------- Tablero (últimos 7 días) ----------------------

@store_call
def weekly_summary(owner_id: int, today: dt.date = None) -> Outcome:
    since = (today or dt.date.today()) - dt.timedelta(days=7)

    workouts = db.session.execute(
        select(
            func.count(Workout.id).label("workout_count"),
            func.coalesce(func.sum(Workout.duration_min), 0).label("total_minutes"),
            func.coalesce(func.avg(Workout.intensity), 0).label("avg_intensity"),
        ).where(Workout.user_id == owner_id, Workout.date >= since)
    ).one()

    metrics = db.session.execute(
        select(
            func.coalesce(func.avg(Metric.weight_kg), 0).label("avg_weight"),
            func.coalesce(func.avg(Metric.steps), 0).label("avg_steps"),
        ).where(Metric.user_id == owner_id, Metric.date >= since)
    ).one()

    return Outcome.success({
        "workout_count": workouts.workout_count,
        "total_minutes": int(workouts.total_minutes),
        "avg_intensity": float(workouts.avg_intensity),
        "avg_weight": float(metrics.avg_weight),
        "avg_steps": float(metrics.avg_steps),
    })


# ---------------------- Panel de administración -----------------------

@store_call
def admin_overview(top: int = 5) -> Outcome:
    user_count = db.session.scalar(select(func.count(User.id)))
    workout_count = db.session.scalar(select(func.count(Workout.id)))
    metric_count = db.session.scalar(select(func.count(Metric.id)))

    workouts = func.count(Workout.id).label("workouts")
    top_users = db.session.execute(
        select(User.username, workouts)
        .outerjoin(Workout, Workout.user_id == User.id)
        .group_by(User.id, User.username)
        .order_by(workouts.desc(), User.username)
        .limit(top)
    ).all()

    return Outcome.success({
        "user_count": user_count,
        "workout_count": workout_count,
        "metric_count": metric_count,
        "top_users": top_users,
    })
