from __future__ import annotations

import logging

from flask import Flask, jsonify

from ..auth.guard import current_principal
from ..common.responses import json_body
from ..container import Container
from ..core.enums import Role
from ..core.permissions import Action

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    guard = container.guard

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        user = container.auth_service.authenticate(str(data.get("username") or ""), str(data.get("password") or ""))
        token = container.token_codec.issue(container.auth_service.principal_for(user))
        logger.info("User %s logged in", user.username)
        return jsonify({"success": True, "token": token, "user": user.to_public_dict()})

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @guard()
    def auth_me():
        user = container.auth_service.refresh(current_principal())
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/api/admin/students", methods=["POST"], endpoint="admin_add_student")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_add_student():
        data = json_body()
        user = container.user_service.create_student(
            current_principal(),
            full_name=str(data.get("name") or ""),
            roll_no=str(data.get("rollNo") or ""),
        )
        return jsonify({"success": True, "user": user.to_public_dict()})

    @app.route("/api/admin/students", methods=["GET"], endpoint="admin_list_students")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_list_students():
        students = container.user_service.list_users(current_principal(), Role.STUDENT)
        return jsonify({"success": True, "students": [u.to_public_dict() for u in students]})

    @app.route("/api/admin/students/<username>", methods=["DELETE"], endpoint="admin_delete_student")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_delete_student(username: str):
        container.user_service.delete_user(current_principal(), username, role=Role.STUDENT)
        return jsonify({"success": True, "ok": True})

    @app.route("/api/admin/teachers", methods=["POST"], endpoint="admin_add_teacher")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_add_teacher():
        data = json_body()
        teacher = container.user_service.create_teacher(
            current_principal(),
            full_name=str(data.get("name") or ""),
            username=str(data.get("username") or ""),
            password=data.get("password") or None,
        )
        return jsonify({"success": True, "teacher": teacher.to_public_dict()})

    @app.route("/api/admin/teachers", methods=["GET"], endpoint="admin_list_teachers")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_list_teachers():
        teachers = container.user_service.list_users(current_principal(), Role.TEACHER)
        return jsonify({"success": True, "teachers": [u.to_public_dict() for u in teachers]})

    @app.route("/api/admin/teachers/<username>", methods=["DELETE"], endpoint="admin_delete_teacher")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_delete_teacher(username: str):
        container.user_service.delete_user(current_principal(), username, role=Role.TEACHER)
        return jsonify({"success": True, "message": "Teacher removed successfully"})

    @app.route("/api/admin/users/<username>", methods=["PATCH"], endpoint="admin_update_user")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_update_user(username: str):
        # only these fields may be changed here
        data = json_body()
        user = container.user_service.update_user(
            current_principal(),
            username,
            courses=data.get("courses"),
            full_name=data.get("name"),
            email=data.get("email"),
            roll_no=data.get("rollNo"),
        )
        return jsonify({"success": True, "user": user.to_public_dict()})
