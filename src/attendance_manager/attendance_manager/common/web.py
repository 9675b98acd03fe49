"""Flask glue shared by the JSON controllers."""

from __future__ import annotations

from datetime import date
from functools import wraps
from typing import Any, Optional

from flask import Flask, jsonify, request, session

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .datetime_utils import parse_iso_date, parse_month
from .logging_setup import get_logger
from .validators import require_positive_id

_logger = get_logger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (NotFoundError, 404),
    (AuthenticationError, 401),
    (AuthorizationError, 401),
    (StoreError, 503),
)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "teacher_id" not in session:
            raise AuthorizationError("Please sign in to continue")
        return view(*args, **kwargs)

    return wrapper


def current_teacher_id() -> int:
    return int(session["teacher_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def id_field(source: dict, name: str, label: str) -> int:
    return require_positive_id(source.get(name), label)


def month_field(source: dict, name: str = "month") -> date:
    value = source.get(name)
    if not value:
        raise ValidationError("Month is required")
    return parse_month(str(value))


def optional_dates(value: Optional[Any]) -> list[date]:
    """ISO dates from a JSON list or a comma separated query value."""
    if not value:
        return []
    items = value.split(",") if isinstance(value, str) else list(value)
    return [parse_iso_date(str(v).strip()) for v in items if str(v).strip()]


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = 400
        for kind, code in _STATUS_BY_ERROR:
            if isinstance(exc, kind):
                status = code
                break
        if status >= 500:
            _logger.error("request failed", extra={"path": request.path, "error": str(exc)})
        else:
            _logger.info("request rejected", extra={"path": request.path, "status": status, "error": str(exc)})
        return jsonify({"error": str(exc)}), status
