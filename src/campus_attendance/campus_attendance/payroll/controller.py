from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_actor, json_body, query_arg
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.payroll_service

    @app.route("/api/payroll/lines", methods=["POST"], endpoint="compute_payroll_line")
    def compute_line():
        actor = current_actor(container.persons_repo)
        line = service.compute_line(current_role=actor.role, data=json_body())
        return jsonify(line.to_dict()), 201

    @app.route("/api/payroll/lines", methods=["GET"], endpoint="list_payroll_lines")
    def list_lines():
        lines = service.list_for_period(period=query_arg("period") or "")
        return jsonify([line.to_dict() for line in lines])

    @app.route("/api/payroll/lines/<int:line_id>/finalize", methods=["POST"], endpoint="finalize_payroll_line")
    def finalize_line(line_id: int):
        actor = current_actor(container.persons_repo)
        return jsonify(service.finalize(current_role=actor.role, line_id=line_id).to_dict())

    @app.route("/api/payroll/lines/<int:line_id>/paid", methods=["POST"], endpoint="pay_payroll_line")
    def pay_line(line_id: int):
        actor = current_actor(container.persons_repo)
        return jsonify(service.mark_paid(current_role=actor.role, line_id=line_id).to_dict())
