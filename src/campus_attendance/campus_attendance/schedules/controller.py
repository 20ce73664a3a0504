from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, json_body, query_arg
from ..common.validators import require_positive_id
from ..core.exceptions import ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.schedule_service

    @app.route("/api/schedules", methods=["GET"], endpoint="list_schedules")
    def list_schedules():
        person_id = require_positive_id(query_arg("person_id"), "person_id")
        entries = service.list_for_person(person_id=person_id, day_of_week=query_arg("day"))
        return jsonify([e.to_dict() for e in entries])

    @app.route("/api/schedules", methods=["POST"], endpoint="create_schedule")
    def create_schedule():
        actor = current_actor(container.persons_repo)
        entry = service.create(current_role=actor.role, data=json_body())
        return jsonify(entry.to_dict()), 201

    @app.route("/api/schedules/<int:entry_id>", methods=["PUT"], endpoint="update_schedule")
    def update_schedule(entry_id: int):
        actor = current_actor(container.persons_repo)
        entry = service.update(current_role=actor.role, entry_id=entry_id, data=json_body())
        return jsonify(entry.to_dict())

    @app.route("/api/schedules/<int:entry_id>", methods=["DELETE"], endpoint="delete_schedule")
    def delete_schedule(entry_id: int):
        actor = current_actor(container.persons_repo)
        service.delete(current_role=actor.role, entry_id=entry_id)
        return "", 204

    @app.route("/api/schedules/import", methods=["POST"], endpoint="import_schedules")
    def import_schedules():
        actor = current_actor(container.persons_repo)
        payload = request.get_json(silent=True)
        rows = payload.get("rows") if isinstance(payload, dict) else payload
        if not isinstance(rows, list):
            raise ValidationError("Expected a list of rows")
        report = service.import_rows(current_role=actor.role, rows=rows)
        return jsonify(report.to_dict())
