from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify, request

from ..core.exceptions import (
    AuthorizationError,
    ConsistencyError,
    DataError,
    DomainError,
    NotFoundError,
    ScheduleConflictError,
    StoreTimeoutError,
    ValidationError,
)
from ..persons.model import Person
from ..persons.repository import PersonRepository

logger = logging.getLogger(__name__)

ACTOR_HEADER = "X-Person-Id"


def status_for(exc: DomainError) -> int:
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, ScheduleConflictError):
        return 409
    if isinstance(exc, ValidationError):
        return 400
    if isinstance(exc, AuthorizationError):
        return 403
    if isinstance(exc, StoreTimeoutError):
        return 503
    if isinstance(exc, ConsistencyError):
        return 409
    if isinstance(exc, DataError):
        return 422
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        code = status_for(exc)
        if code >= 500:
            logger.warning("%s %s -> %s: %s", request.method, request.path, code, exc.message)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.path, code, exc.message)
        return jsonify(exc.to_dict()), code


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def current_actor(persons: PersonRepository) -> Person:
    """The calling person, identified by the ``X-Person-Id`` header.

    Note: session/auth handling lives in front of this service; it forwards the
    authenticated person id.
    """

    raw = request.headers.get(ACTOR_HEADER, "")
    try:
        person_id = int(raw)
    except ValueError:
        raise AuthorizationError("Missing or invalid caller identity", details={"header": ACTOR_HEADER})

    person = persons.get_by_id(person_id)
    if person is None or not person.is_active:
        raise AuthorizationError("Unknown or inactive caller", details={"person_id": person_id})
    return person


def query_arg(name: str) -> Optional[str]:
    value = request.args.get(name)
    return value.strip() if value and value.strip() else None
