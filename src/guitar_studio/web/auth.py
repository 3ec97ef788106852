from __future__ import annotations

from functools import wraps

from flask import current_app, g, request

from ..core.constants import AUTH_COOKIE_NAME
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..users.model import User

EXTENSION_KEY = "guitar_studio"


def get_container():
    return current_app.extensions[EXTENSION_KEY]


def current_user() -> User:
    """User behind the `auth-token` cookie; raises AuthenticationError when missing or invalid."""

    if "current_user" not in g:
        token = request.cookies.get(AUTH_COOKIE_NAME)
        g.current_user = get_container().auth_service.current_user(token)
    return g.current_user


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        current_user()
        return view(*args, **kwargs)

    return wrapper


def teacher_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_user().role != Role.TEACHER:
            raise AuthorizationError("Unauthorized")
        return view(*args, **kwargs)

    return wrapper
