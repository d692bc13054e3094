from __future__ import annotations

import pytest

from src.qr_attendance.qr_attendance.auth.principal import Principal
from src.qr_attendance.qr_attendance.core.enums import Role
from src.qr_attendance.qr_attendance.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from src.qr_attendance.qr_attendance.users.service import AuthService, UserService, student_email, student_username


def test_authenticate_ok(users):
    user = AuthService(users).authenticate("alice", "secret123")
    assert user.role == Role.STUDENT


@pytest.mark.parametrize("username,password", [("alice", "wrong"), ("ghost", "secret123"), ("", "")])
def test_authenticate_rejects(users, username, password):
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate(username, password)


def test_refresh_sees_course_changes(users, alice):
    service = AuthService(users)
    users.set_courses("alice", {"CS101", "CS201"})
    assert service.refresh(alice).courses == {"CS101", "CS201"}


def test_principal_for_user(users):
    principal = AuthService.principal_for(users.get_by_username("drsmith"))
    assert principal == Principal("drsmith", Role.TEACHER, "Dr Smith")


def test_student_username_and_email():
    assert student_username("Mary  Jane Doe") == "maryjanedoe"
    assert student_email("maryjanedoe", "R-042") == "maryjanedoe042@students.example.com"


def test_create_student_uses_default_password(users, admin):
    service = UserService(users, default_student_password="student123")
    created = service.create_student(admin, full_name="Carol King", roll_no="7")

    assert created.username == "carolking"
    assert created.role == Role.STUDENT
    assert AuthService(users).authenticate("carolking", "student123")


def test_create_student_conflict(users, admin):
    with pytest.raises(ConflictError):
        UserService(users).create_student(admin, full_name="Alice", roll_no="1")


def test_create_teacher_short_password(users, admin):
    with pytest.raises(ValidationError):
        UserService(users).create_teacher(admin, full_name="Dr Who", username="drwho", password="123")


def test_only_admin_manages_directory(users, teacher):
    with pytest.raises(AuthorizationError):
        UserService(users).create_student(teacher, full_name="Eve", roll_no="9")


def test_delete_checks_role(users, admin):
    service = UserService(users)
    with pytest.raises(NotFoundError):
        service.delete_user(admin, "drsmith", role=Role.STUDENT)
    service.delete_user(admin, "drsmith", role=Role.TEACHER)
    assert users.get_by_username("drsmith") is None


def test_update_user_replaces_courses(users, admin):
    updated = UserService(users).update_user(admin, "bob", courses=["CS101"], full_name="Bobby")
    assert updated.courses == {"CS101"}
    assert updated.full_name == "Bobby"


def test_update_user_rejects_string_courses(users, admin):
    with pytest.raises(ValidationError):
        UserService(users).update_user(admin, "bob", courses="CS101")
