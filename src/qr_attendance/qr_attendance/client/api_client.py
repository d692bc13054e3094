"""Thin HTTP client for the attendance API.

Auth state is never stored on the client object: every call takes the
caller's ``Credential`` and ``refresh_user`` hands back a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional

import requests

DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class Credential:
    token: str
    user: dict = field(default_factory=dict)

    @property
    def username(self) -> Optional[str]:
        return self.user.get("username")


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code


class AttendanceClient:
    def __init__(self, base_url: str, *, session: requests.Session | None = None, timeout: float = DEFAULT_TIMEOUT):
        self._base_url = base_url.rstrip("/")
        self._http = session or requests.Session()
        self._timeout = timeout

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _request(self, method: str, path: str, credential: Credential | None = None, *, allow_error: bool = False, **kwargs) -> dict:
        headers = dict(kwargs.pop("headers", {}) or {})
        if credential is not None:
            headers["Authorization"] = f"Bearer {credential.token}"
        r = self._http.request(method, self._url(path), headers=headers, timeout=self._timeout, **kwargs)
        try:
            data = r.json()
        except ValueError:
            data = {}
        if r.status_code >= 400 and not allow_error:
            raise ApiError(r.status_code, str(data.get("message") or r.reason or "Request failed"))
        return data

    # Auth

    def login(self, username: str, password: str) -> Credential:
        data = self._request("POST", "/api/auth/login", json={"username": username, "password": password})
        return Credential(token=data["token"], user=data.get("user") or {})

    def refresh_user(self, credential: Credential) -> Credential:
        """Re-read the caller's record (e.g. after an admin changed their courses)."""
        data = self._request("GET", "/api/auth/me", credential)
        return replace(credential, user=data.get("user") or {})

    # Teacher

    def generate_qr(self, credential: Credential, course_id: str, duration_minutes: float = 15) -> dict:
        return self._request(
            "POST",
            "/api/teacher/generate",
            credential,
            json={"courseId": course_id, "durationMinutes": duration_minutes},
        )

    def mark_no_class(self, credential: Credential, course_id: str) -> dict:
        return self._request("POST", "/api/teacher/no-class", credential, json={"courseId": course_id})

    def current_qr(self, credential: Credential, course_id: Optional[str] = None) -> Optional[str]:
        params = {"courseId": course_id} if course_id else None
        data = self._request("GET", "/api/teacher/current", credential, params=params)
        return data.get("qrString")

    # Student

    def mark_attendance(self, credential: Credential, qr_string: str) -> dict:
        """Returns ``{"ok": True, ...}`` or ``{"ok": False, "reason": ...}``; rejections are not raised."""
        return self._request("POST", "/api/attendance/scan", credential, allow_error=True, json={"qrString": qr_string})

    def attendance_today(self, credential: Credential) -> list[dict]:
        return self._request("GET", "/api/attendance/today", credential).get("records", [])

    def attendance_month(self, credential: Credential, month: int, year: int, student_id: Optional[str] = None) -> list[dict]:
        params: dict[str, Any] = {"month": month, "year": year}
        if student_id:
            params["studentId"] = student_id
        return self._request("GET", "/api/attendance/month", credential, params=params).get("records", [])

    # Admin

    def add_student(self, credential: Credential, name: str, roll_no: str) -> dict:
        return self._request("POST", "/api/admin/students", credential, json={"name": name, "rollNo": roll_no})

    def add_course(self, credential: Credential, code: str, name: str) -> dict:
        return self._request("POST", "/api/admin/courses", credential, json={"code": code, "name": name})

    def add_teacher(self, credential: Credential, name: str, username: str, password: Optional[str] = None) -> dict:
        body = {"name": name, "username": username}
        if password:
            body["password"] = password
        return self._request("POST", "/api/admin/teachers", credential, json=body)

    def set_user_courses(self, credential: Credential, username: str, courses: list[str]) -> dict:
        return self._request("PATCH", f"/api/admin/users/{username}", credential, json={"courses": courses})

    def enroll_students(self, credential: Credential, course_code: str, usernames: list[str]) -> int:
        data = self._request("POST", f"/api/admin/courses/{course_code}/students", credential, json={"usernames": usernames})
        return int(data.get("modifiedCount", 0))

    def delete_course(self, credential: Credential, course_code: str) -> dict:
        return self._request("DELETE", f"/api/admin/courses/{course_code}", credential)

    def list_courses(self) -> list[dict]:
        return self._request("GET", "/api/courses").get("courses", [])
