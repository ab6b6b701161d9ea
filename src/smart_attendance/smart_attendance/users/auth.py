from __future__ import annotations

from functools import wraps
from typing import Any, Callable

from flask import g, request

from .tokens import bearer_token


def bearer_required(authenticate: Callable[[str], Any], *, attr: str):
    """Decorator factory: resolve the bearer token to a user and store it as ``g.<attr>``.

    ``authenticate`` raises AuthenticationError, which the app's error handler
    turns into a 401.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            token = bearer_token(request.headers.get("Authorization"))
            setattr(g, attr, authenticate(token))
            return view(*args, **kwargs)

        return wrapper

    return decorator
