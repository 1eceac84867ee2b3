# /healthapp/results.py
# Resultado explícito de cada llamada de acceso a datos.

import enum
import logging
from dataclasses import dataclass
from functools import wraps
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from . import db

log = logging.getLogger(__name__)


class ErrorKind(enum.Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    SELF_PROTECTED = "self_protected"
    STORE_UNAVAILABLE = "store_unavailable"


@dataclass(frozen=True)
class Outcome:
    value: Any = None
    error: Optional[ErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value=None):
        return cls(value=value)

    @classmethod
    def fail(cls, error: ErrorKind):
        return cls(error=error)


def store_call(func):
    """Convierte fallas de la base en Outcome(STORE_UNAVAILABLE), con log completo."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SQLAlchemyError:
            db.session.rollback()
            log.exception("Store failure in %s", func.__name__)
            return Outcome.fail(ErrorKind.STORE_UNAVAILABLE)
    return wrapper
