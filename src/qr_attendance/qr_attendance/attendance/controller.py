from __future__ import annotations

import csv
import io
import logging

from flask import Flask, jsonify, request

from ..auth.guard import current_principal
from ..common.datetime_utils import now_local
from ..common.responses import json_body, scan_failure
from ..container import Container
from ..core.exceptions import MalformedToken, ScanRejected
from ..core.permissions import Action
from .service import EXPORT_FIELDS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    guard = container.guard

    @app.route("/api/attendance/scan", methods=["POST"], endpoint="attendance_scan")
    @guard(Action.RECORD_ATTENDANCE)
    def attendance_scan():
        """Body: ``{"qrString": "<token exactly as scanned or pasted>"}``."""
        raw = json_body().get("qrString")
        try:
            if not isinstance(raw, str):
                raise MalformedToken("QR code is empty")
            mark = container.attendance_service.scan(current_principal(), raw)
        except ScanRejected as e:
            logger.info("Scan rejected for %s: %s", current_principal().username, e.reason)
            return scan_failure(e)
        return jsonify({"ok": True, "record": mark.to_dict()})

    @app.route("/api/attendance/scan/image", methods=["POST"], endpoint="attendance_scan_image")
    @guard(Action.RECORD_ATTENDANCE)
    def attendance_scan_image():
        try:
            if "image" not in request.files:
                raise MalformedToken("Image file is missing")
            mark = container.attendance_service.scan_image(current_principal(), request.files["image"].stream)
        except ScanRejected as e:
            logger.info("Image scan rejected for %s: %s", current_principal().username, e.reason)
            return scan_failure(e)
        return jsonify({"ok": True, "record": mark.to_dict()})

    @app.route("/api/attendance/status", methods=["GET"], endpoint="attendance_status")
    @guard(Action.RECORD_ATTENDANCE)
    def attendance_status():
        rows = container.session_service.course_statuses(current_principal())
        return jsonify({"courses": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @guard()
    def attendance_today():
        marks = container.attendance_service.list_today(current_principal(), student=request.args.get("studentId"))
        return jsonify({"date": now_local().strftime("%Y-%m-%d"), "records": [m.to_dict() for m in marks]})

    @app.route("/api/attendance/today/courses", methods=["GET"], endpoint="attendance_today_courses")
    @guard(Action.VIEW_OWN_ATTENDANCE)
    def attendance_today_courses():
        rows = container.attendance_service.today_by_course(current_principal())
        return jsonify({"courses": [r.to_dict() for r in rows]})

    @app.route("/api/attendance/month", methods=["GET"], endpoint="attendance_month")
    @guard()
    def attendance_month():
        marks = container.attendance_service.list_month(
            current_principal(),
            month=request.args.get("month"),
            year=request.args.get("year"),
            student=request.args.get("studentId"),
            course=request.args.get("courseId"),
        )
        return jsonify({"records": [m.to_dict() for m in marks]})

    @app.route("/api/attendance/month.csv", methods=["GET"], endpoint="attendance_month_csv")
    @guard(Action.EXPORT_ATTENDANCE)
    def attendance_month_csv():
        month = request.args.get("month")
        year = request.args.get("year")
        rows = container.attendance_service.export_rows(
            current_principal(),
            month=month,
            year=year,
            student=request.args.get("studentId"),
            course=request.args.get("courseId"),
        )

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=EXPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)

        filename = f"attendance_{int(year):04d}_{int(month):02d}.csv"
        return app.response_class(
            out.getvalue().encode("utf-8-sig"),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename={filename}"},
        )
