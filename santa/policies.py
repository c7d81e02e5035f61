from __future__ import annotations

from typing import Any

from flask import request
from flask.views import MethodView

from .errors import AuthError, ValidationError
from .extensions import santa


def json_body() -> dict[str, Any]:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Invalid JSON")
    return body


def supplied_admin_password() -> str | None:
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        value = body.get("password")
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def is_admin_request() -> bool:
    return santa.admin_gate.authorize(supplied_admin_password())


class AdminRequiredMixin(MethodView):
    """
    Rejects the request with AuthError unless the JSON body carries the admin password.
    Nothing beyond pass/fail is revealed.
    """
    def dispatch_request(self, *args, **kwargs):
        if not is_admin_request():
            raise AuthError()
        return super().dispatch_request(*args, **kwargs)
