# /healthapp/filters.py
# Constructor tipado de predicados para la búsqueda de entrenamientos.
# Produce expresiones SQLAlchemy parametrizadas; nunca concatena valores.

import datetime as dt
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import or_

from .models import Workout


@dataclass(frozen=True)
class WorkoutFilter:
    text: Optional[str] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    min_duration: Optional[int] = None

    @classmethod
    def from_form(cls, form):
        text = (form.q.data or "").strip() or None
        return cls(text=text, date_from=form.date_from.data,
                   date_to=form.date_to.data, min_duration=form.min_duration.data)

    @property
    def is_empty(self) -> bool:
        return not any((self.text, self.date_from, self.date_to, self.min_duration is not None))

    def clauses(self, owner_id: int) -> List:
        """Condiciones a combinar con AND; la primera siempre es el dueño."""
        conditions = [Workout.user_id == owner_id]
        if self.text:
            conditions.append(or_(Workout.type.icontains(self.text, autoescape=True),
                                  Workout.notes.icontains(self.text, autoescape=True)))
        if self.date_from:
            conditions.append(Workout.date >= self.date_from)
        if self.date_to:
            conditions.append(Workout.date <= self.date_to)
        if self.min_duration is not None:
            conditions.append(Workout.duration_min >= self.min_duration)
        return conditions
