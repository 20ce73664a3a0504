from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, query_arg
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _range():
        return parse_iso_date(query_arg("start") or ""), parse_iso_date(query_arg("end") or "")

    @app.route("/api/attendance/events", methods=["POST"], endpoint="record_attendance_event")
    def record_event():
        event, resolved = service.record_event(data=json_body())
        return jsonify({"event": event.to_dict(), "resolved": resolved.to_dict()}), 201

    @app.route("/api/attendance/events/<int:event_id>/resolved", methods=["GET"], endpoint="resolved_attendance_event")
    def resolved_event(event_id: int):
        return jsonify(service.resolve_event(event_id).to_dict())

    @app.route("/api/attendance/<int:person_id>", methods=["GET"], endpoint="attendance_period")
    def attendance_period(person_id: int):
        start, end = _range()
        rows = service.resolve_period(person_id=person_id, start=start, end=end)
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/attendance/<int:person_id>/summary", methods=["GET"], endpoint="attendance_summary")
    def attendance_summary(person_id: int):
        start, end = _range()
        return jsonify(service.summary(person_id=person_id, start=start, end=end).to_dict())
