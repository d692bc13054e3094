from __future__ import annotations

from flask import Flask, jsonify

from ..auth.guard import current_principal
from ..common.responses import json_body
from ..container import Container
from ..core.permissions import Action


def register(app: Flask, container: Container) -> None:
    guard = container.guard

    @app.route("/api/courses", methods=["GET"], endpoint="list_courses")
    def list_courses():
        return jsonify({"courses": [c.to_dict() for c in container.course_service.list_courses()]})

    @app.route("/api/admin/courses", methods=["POST"], endpoint="admin_add_course")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_add_course():
        data = json_body()
        course = container.course_service.create_course(
            current_principal(),
            code=str(data.get("code") or ""),
            name=str(data.get("name") or ""),
        )
        return jsonify({"ok": True, "course": course.to_dict()})

    @app.route("/api/admin/courses", methods=["GET"], endpoint="admin_list_courses")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_list_courses():
        return jsonify({"courses": [c.to_dict() for c in container.course_service.list_courses()]})

    @app.route("/api/admin/courses/<code>", methods=["DELETE"], endpoint="admin_delete_course")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_delete_course(code: str):
        removed = container.course_service.delete_course(current_principal(), code)
        return jsonify({"success": True, "message": "Course deleted and users updated", "unenrolled": removed})

    @app.route("/api/admin/courses/<code>/students", methods=["POST"], endpoint="admin_enroll_students")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_enroll_students(code: str):
        data = json_body()
        count = container.course_service.enroll_students(current_principal(), code, data.get("usernames"))
        return jsonify({"success": True, "modifiedCount": count})

    @app.route("/api/admin/courses/<code>/students", methods=["DELETE"], endpoint="admin_unenroll_students")
    @guard(Action.MANAGE_DIRECTORY)
    def admin_unenroll_students(code: str):
        data = json_body()
        count = container.course_service.unenroll_students(current_principal(), code, data.get("usernames"))
        return jsonify({"success": True, "modifiedCount": count})

    @app.route("/api/teacher/courses", methods=["GET"], endpoint="teacher_courses")
    @guard(Action.VIEW_ASSIGNED_COURSES)
    def teacher_courses():
        courses = container.course_service.courses_for(current_principal())
        return jsonify({"courses": [c.to_dict() for c in courses]})
