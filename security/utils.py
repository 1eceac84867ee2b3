from functools import wraps
from flask import abort
from flask_login import current_user

from . import login_manager
from .models import Role


def login_required(f):
    """Resolve the session once and pass it to the view as its first argument."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth = current_user._get_current_object()
        if not auth.is_authenticated:
            return login_manager.unauthorized()
        return f(auth, *args, **kwargs)
    return wrapper


def roles_required(role: Role):
    def decorator(f):
        @wraps(f)
        @login_required
        def wrapper(auth, *args, **kwargs):
            if not auth.role.satisfies(role):
                return abort(403)
            return f(auth, *args, **kwargs)
        return wrapper
    return decorator


admin_required = roles_required(Role.ADMIN)
