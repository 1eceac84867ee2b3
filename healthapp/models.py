# /healthapp/models.py
# Entidades propias de cada usuario (SQLAlchemy). El dueño se fija al crear
# y nunca se reasigna.

from . import db
from security.models import utcnow


class Workout(db.Model):
    """Sesión de entrenamiento registrada por un usuario."""
    __tablename__ = "workouts"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    type = db.Column(db.String(50), nullable=False)
    duration_min = db.Column(db.Integer, nullable=False)
    intensity = db.Column(db.Integer, nullable=False, default=1)  # 1..5
    calories = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    owner = db.relationship("User", back_populates="workouts")


class Metric(db.Model):
    """Medición corporal diaria (peso, pasos, presión arterial)."""
    __tablename__ = "metrics"
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"),
                        nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    weight_kg = db.Column(db.Float, nullable=True)
    steps = db.Column(db.Integer, nullable=True)
    bp_systolic = db.Column(db.Integer, nullable=True)
    bp_diastolic = db.Column(db.Integer, nullable=True)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    owner = db.relationship("User", back_populates="metrics")
