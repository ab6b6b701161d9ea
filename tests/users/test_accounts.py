from datetime import datetime, timedelta, timezone

import jwt
import pytest

from src.smart_attendance.smart_attendance.core.enums import Role
from src.smart_attendance.smart_attendance.core.exceptions import (
    AuthenticationError,
    ConflictError,
    InternalError,
    ValidationError,
)
from src.smart_attendance.smart_attendance.users.service import (
    StudentAccountService,
    TeacherAccountService,
    make_student_code,
)
from src.smart_attendance.smart_attendance.users.tokens import TokenService, bearer_token

SECRET = "unit-test-secret"


@pytest.fixture
def tokens():
    return TokenService(SECRET)


@pytest.fixture
def student_accounts(students_repo, tokens):
    return StudentAccountService(students_repo, tokens)


@pytest.fixture
def teacher_accounts(teachers_repo, tokens):
    return TeacherAccountService(teachers_repo, tokens)


def _register_student(svc, **overrides):
    data = dict(name="Sarah Khan", email="Sarah@Example.com", password="secret1", roll_number="r 001", year="3rd Year")
    data.update(overrides)
    return svc.register(**data)


def test_token_round_trip(tokens):
    claims = tokens.verify(tokens.issue(7, Role.TEACHER), expected_role=Role.TEACHER)
    assert (claims.user_id, claims.role) == (7, Role.TEACHER)


def test_token_payload_shape(tokens):
    payload = jwt.decode(tokens.issue(7, Role.STUDENT), SECRET, algorithms=["HS256"])
    assert payload["sub"] == "7"
    assert payload["role"] == "student"
    assert payload["exp"] - payload["iat"] == 24 * 3600


def test_expired_token(tokens):
    old = datetime.now(timezone.utc) - timedelta(hours=25)
    with pytest.raises(AuthenticationError, match="Token has expired"):
        tokens.verify(tokens.issue(7, Role.STUDENT, now=old))


@pytest.mark.parametrize("token", ["", "garbage", TokenService("other-secret").issue(7, Role.STUDENT)])
def test_bad_tokens(tokens, token):
    with pytest.raises(AuthenticationError):
        tokens.verify(token)


def test_role_mismatch_is_rejected(tokens):
    with pytest.raises(AuthenticationError, match="Invalid token"):
        tokens.verify(tokens.issue(7, Role.STUDENT), expected_role=Role.TEACHER)


@pytest.mark.parametrize(
    "header, expected",
    [("Bearer abc.def", "abc.def"), ("Bearer", ""), (None, ""), ("", "")],
)
def test_bearer_token(header, expected):
    assert bearer_token(header) == expected


def test_student_register_normalises_fields(student_accounts):
    session = _register_student(student_accounts)

    student = session.student
    assert student.email == "sarah@example.com"
    assert student.roll_number == "R 001"
    assert student.student_code == "STU-R001"
    assert student.course == "N/A"
    assert not student.has_face_descriptor
    assert student_accounts.authenticate(session.token) == student


def test_student_code():
    assert make_student_code(" cs 12 b ") == "STU-CS12B"


def test_student_register_validation(student_accounts):
    with pytest.raises(ValidationError, match="All fields are required"):
        _register_student(student_accounts, year="")
    with pytest.raises(ValidationError, match="at least 6"):
        _register_student(student_accounts, password="12345")


def test_student_register_duplicates(student_accounts):
    _register_student(student_accounts)

    with pytest.raises(ConflictError, match="email"):
        _register_student(student_accounts, roll_number="R999")
    with pytest.raises(ConflictError, match="roll number"):
        _register_student(student_accounts, email="other@example.com")


def test_student_login(student_accounts):
    _register_student(student_accounts)

    assert student_accounts.login("sarah@example.com", "secret1").student.name == "Sarah Khan"
    with pytest.raises(AuthenticationError, match="Invalid credentials"):
        student_accounts.login("sarah@example.com", "wrong!")
    with pytest.raises(AuthenticationError):
        student_accounts.login("nobody@example.com", "secret1")
    with pytest.raises(ValidationError):
        student_accounts.login("", "")


def test_face_descriptor_update(student_accounts, descriptor):
    session = _register_student(student_accounts)

    student_accounts.update_face_descriptor(session.student.student_id, descriptor)

    assert student_accounts.get_student(session.student.student_id).has_face_descriptor
    with pytest.raises(ValidationError):
        student_accounts.update_face_descriptor(session.student.student_id, descriptor[:-1])


def test_student_token_is_not_a_teacher_token(student_accounts, teacher_accounts):
    session = _register_student(student_accounts)
    with pytest.raises(AuthenticationError):
        teacher_accounts.authenticate(session.token)


def test_teacher_register_login_and_change_password(teacher_accounts):
    session = teacher_accounts.register(
        name="John Doe",
        email="teacher@example.com",
        password="password123",
        department="Computer Science",
        employee_id="emp001",
    )
    assert session.teacher.employee_id == "EMP001"

    with pytest.raises(ConflictError):
        teacher_accounts.register(
            name="Jane", email="jane@example.com", password="password123", department="CS", employee_id="EMP001"
        )

    with pytest.raises(AuthenticationError, match="Current password is incorrect"):
        teacher_accounts.change_password(session.teacher.teacher_id, current_password="nope!!", new_password="newpass1")
    with pytest.raises(ValidationError, match="at least 6"):
        teacher_accounts.change_password(session.teacher.teacher_id, current_password="password123", new_password="123")

    token = teacher_accounts.change_password(
        session.teacher.teacher_id, current_password="password123", new_password="newpass1"
    )

    assert teacher_accounts.authenticate(token).teacher_id == session.teacher.teacher_id
    assert teacher_accounts.login("teacher@example.com", "newpass1").teacher.name == "John Doe"
    with pytest.raises(AuthenticationError):
        teacher_accounts.login("teacher@example.com", "password123")


def test_register_rejects_values_wider_than_their_columns(student_accounts, teacher_accounts):
    with pytest.raises(ValidationError, match="Name must be at most"):
        _register_student(student_accounts, name="N" * 121)
    with pytest.raises(ValidationError, match="Email must be at most"):
        _register_student(student_accounts, email="a" * 190 + "@example.com")
    with pytest.raises(ValidationError, match="Employee ID must be at most"):
        teacher_accounts.register(
            name="Jane", email="jane@example.com", password="password123", department="CS", employee_id="E" * 65
        )


def test_created_account_that_cannot_be_read_back(student_accounts, students_repo, monkeypatch):
    monkeypatch.setattr(students_repo, "get_by_id", lambda student_id: None)
    with pytest.raises(InternalError):
        _register_student(student_accounts)
