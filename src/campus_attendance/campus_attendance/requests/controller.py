from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import current_actor, json_body, query_arg
from ..common.validators import require_positive_id
from ..core.enums import RequestAction
from ..core.exceptions import NotFoundError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.request_service

    @app.route("/api/requests", methods=["POST"], endpoint="submit_request")
    def submit_request():
        actor = current_actor(container.persons_repo)
        req = service.submit(requester_id=actor.person_id, data=json_body())
        return jsonify(req.to_dict()), 201

    @app.route("/api/requests", methods=["GET"], endpoint="list_requests")
    def list_requests():
        requester_id = query_arg("requester_id")
        rows = service.list_requests(
            status=query_arg("status"),
            requester_id=require_positive_id(requester_id, "requester_id") if requester_id else None,
        )
        return jsonify([r.to_dict() for r in rows])

    @app.route("/api/requests/<int:request_id>", methods=["GET"], endpoint="get_request")
    def get_request(request_id: int):
        body = service.get(request_id).to_dict()
        body["allowed_actions"] = [a.value for a in service.allowed_actions(request_id)]
        return jsonify(body)

    @app.route("/api/requests/<int:request_id>/audit", methods=["GET"], endpoint="request_audit")
    def request_audit(request_id: int):
        return jsonify([a.to_dict() for a in service.audit(request_id)])

    @app.route("/api/requests/<int:request_id>/<action>", methods=["POST"], endpoint="act_on_request")
    def act_on_request(request_id: int, action: str):
        try:
            parsed = RequestAction(action)
        except ValueError:
            raise NotFoundError("Unknown action", details={"action": action})

        actor = current_actor(container.persons_repo)
        body = request.get_json(silent=True) or {}
        notes = body.get("notes") if isinstance(body, dict) else None
        req = service.act(request_id=request_id, action=parsed, actor_id=actor.person_id, notes=notes)
        return jsonify(req.to_dict())
