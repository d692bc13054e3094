from __future__ import annotations

from flask import Flask, jsonify, request

from ..auth.guard import current_principal
from ..common.responses import json_body
from ..container import Container
from ..core.permissions import Action
from .qr_image import render_png


def register(app: Flask, container: Container) -> None:
    guard = container.guard

    @app.route("/api/teacher/generate", methods=["POST"], endpoint="teacher_generate")
    @guard(Action.ISSUE_SESSION)
    def teacher_generate():
        data = json_body()
        issued = container.session_service.start_class(
            current_principal(),
            str(data.get("courseId") or ""),
            data.get("durationMinutes"),
        )
        return jsonify({"ok": True, "qrString": issued.token, "session": issued.session.to_dict()})

    @app.route("/api/teacher/no-class", methods=["POST"], endpoint="teacher_no_class")
    @guard(Action.ISSUE_SESSION)
    def teacher_no_class():
        data = json_body()
        container.session_service.declare_no_class(current_principal(), str(data.get("courseId") or ""))
        return jsonify({"ok": True})

    @app.route("/api/teacher/current", methods=["GET"], endpoint="teacher_current")
    @guard(Action.VIEW_CURRENT_SESSION)
    def teacher_current():
        issued = container.session_service.current_token(current_principal(), request.args.get("courseId"))
        if not issued:
            return jsonify({"qr": None})
        return jsonify({"qrString": issued.token, "session": issued.session.to_dict()})

    @app.route("/api/teacher/current.png", methods=["GET"], endpoint="teacher_current_png")
    @guard(Action.ISSUE_SESSION)
    def teacher_current_png():
        issued = container.session_service.current_token(current_principal(), request.args.get("courseId"))
        if not issued:
            return jsonify({"success": False, "message": "No active session"}), 404
        return app.response_class(render_png(issued.token), mimetype="image/png")
