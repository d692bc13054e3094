"""Example: an admin sets up a course, a teacher opens a class, a student scans.

Run the server first (``python app.py``) with AUTO_INIT_DB=1 AUTO_SEED_DB=1.
"""

import os

from src.qr_attendance.qr_attendance.client.api_client import AttendanceClient, ApiError


def main():
    client = AttendanceClient(os.environ.get("API_URL", "http://localhost:5000"))
    admin = client.login(os.environ.get("ADMIN_USERNAME", "admin"), os.environ.get("ADMIN_PASSWORD", "admin123"))

    try:
        client.add_teacher(admin, "Dr Smith", "drsmith")
        client.add_student(admin, "Alice", "R-001")
    except ApiError as e:
        if e.status_code != 409:
            raise
    client.set_user_courses(admin, "drsmith", ["CS101"])
    client.enroll_students(admin, "CS101", ["alice"])

    teacher = client.login("drsmith", "teacher123")
    issued = client.generate_qr(teacher, "CS101", duration_minutes=1)
    print("QR:", issued["qrString"])

    student = client.login("alice", "student123")
    print(client.mark_attendance(student, issued["qrString"]))
    print(client.mark_attendance(student, issued["qrString"]))  # second scan -> ALREADY_MARKED
    print(client.attendance_today(student))


if __name__ == "__main__":
    main()
