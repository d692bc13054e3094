"""Request-scoped authentication for the JSON controllers."""

from __future__ import annotations

from functools import wraps
from typing import Callable

from flask import g, jsonify, request

from ..core.exceptions import AuthenticationError, AuthorizationError
from ..core.permissions import Action, require
from .principal import Principal
from .tokens import AccessTokenCodec


def bearer_token() -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        return None
    token = header.split(" ", 1)[1].strip()
    return token or None


def make_guard(codec: AccessTokenCodec) -> Callable[..., Callable]:
    """Build the ``@guard(Action...)`` decorator used by every controller.

    The wrapped view receives nothing extra; it reads ``current_principal()``.
    """

    def guard(*actions: Action):
        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                token = bearer_token()
                if not token:
                    return jsonify({"success": False, "message": "Missing token"}), 401
                try:
                    principal = codec.verify(token)
                    for action in actions:
                        require(principal, action)
                except AuthenticationError as e:
                    return jsonify({"success": False, "message": str(e)}), 401
                except AuthorizationError as e:
                    return jsonify({"success": False, "message": str(e)}), 403

                g.principal = principal
                return view(*args, **kwargs)

            return wrapper

        return decorator

    return guard


def current_principal() -> Principal:
    return g.principal
