import io

import pytest
from openpyxl import load_workbook

from src.smart_attendance.smart_attendance.container import assemble
from src.smart_attendance.smart_attendance.main import create_app
from src.smart_attendance.smart_attendance.settings import AppSettings

STUDENT = {"name": "Sarah Khan", "email": "sarah@example.com", "password": "secret1", "rollNumber": "R001", "year": "3rd Year"}
TEACHER = {
    "name": "John Doe",
    "email": "teacher@example.com",
    "password": "password123",
    "department": "Computer Science",
    "employeeId": "EMP001",
}


@pytest.fixture
def client(monkeypatch, students_repo, teachers_repo, attendance_repo, sheets_repo, fixed_now):
    monkeypatch.setenv("APP_ENV", "testing")
    container = assemble(
        settings=AppSettings(jwt_secret="api-test-secret", student_roster=("Sarah", "Mike", "Ravi")),
        students_repo=students_repo,
        teachers_repo=teachers_repo,
        attendance_repo=attendance_repo,
        mark_sheets_repo=sheets_repo,
        clock=lambda: fixed_now,
    )
    app = create_app(container)
    return app.test_client()


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def student_token(client):
    res = client.post("/api/student/register", json=STUDENT)
    assert res.status_code == 201
    return res.get_json()["token"]


@pytest.fixture
def teacher_token(client):
    res = client.post("/api/teacher/register", json=TEACHER)
    assert res.status_code == 201
    return res.get_json()["token"]


def test_health(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json() == {"status": "OK", "message": "Server is running"}


def test_unknown_route_is_json(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert "error" in res.get_json()


def test_student_register_and_login(client, student_token):
    body = client.post("/api/student/register", json=STUDENT).get_json()
    assert body == {"error": "An account with this email already exists"}

    res = client.post("/api/student/login", json={"email": "SARAH@example.com", "password": "secret1"})
    assert res.status_code == 200
    student = res.get_json()["student"]
    assert student["studentId"] == "STU-R001"
    assert student["rollNumber"] == "R001"

    res = client.post("/api/student/login", json={"email": "sarah@example.com", "password": "nope!!"})
    assert res.status_code == 401


def test_missing_and_wrong_tokens(client, student_token):
    res = client.get("/api/student/profile")
    assert res.status_code == 401
    assert res.get_json() == {"error": "No token provided"}

    assert client.get("/api/teacher/profile", headers=_auth(student_token)).status_code == 401
    assert client.get("/api/student/profile", headers=_auth("junk")).status_code == 401


def test_attendance_flow(client, student_token, teacher_token, campus_location, descriptor):
    headers = _auth(student_token)
    payload = {"location": campus_location, "faceDescriptor": descriptor}

    res = client.post("/api/student/mark-attendance", json=payload, headers=headers)
    assert res.status_code == 400
    assert "Profile" in res.get_json()["error"]

    res = client.put("/api/student/profile", json={"faceDescriptor": descriptor[:10]}, headers=headers)
    assert res.status_code == 400
    res = client.put("/api/student/profile", json={"faceDescriptor": descriptor}, headers=headers)
    assert res.status_code == 200
    assert client.get("/api/student/profile", headers=headers).get_json()["student"]["hasFaceDescriptor"]

    res = client.post("/api/student/mark-attendance", json=payload, headers=headers)
    assert res.status_code == 200
    body = res.get_json()
    assert body["message"] == "Attendance marked successfully for morning session"
    assert body["attendance"]["slot"] == "morning"
    assert body["attendance"]["location"]["address"] == "Main block"

    res = client.post("/api/student/mark-attendance", json=payload, headers=headers)
    assert res.status_code == 400
    assert "already marked" in res.get_json()["error"]

    records = client.get("/api/student/attendance", headers=headers).get_json()["records"]
    assert [r["slot"] for r in records] == ["morning"]

    teacher = _auth(teacher_token)
    summary = client.get("/api/teacher/attendance-summary?date=2024-05-06", headers=teacher).get_json()
    assert (summary["totalStudents"], summary["present"], summary["absent"]) == (1, 1, 0)

    listing = client.get("/api/teacher/attendance-list?status=present", headers=teacher).get_json()
    assert listing["total"] == 1
    assert listing["records"][0]["studentName"] == "Sarah Khan"

    assert client.get("/api/teacher/attendance-list?date=06-05-2024", headers=teacher).status_code == 400


def test_attendance_rejected_off_campus(client, student_token, descriptor):
    client.put("/api/student/profile", json={"faceDescriptor": descriptor}, headers=_auth(student_token))
    res = client.post(
        "/api/student/mark-attendance",
        json={"location": {"latitude": 12.97, "longitude": 77.59}, "faceDescriptor": descriptor},
        headers=_auth(student_token),
    )
    assert res.status_code == 400
    assert "campus" in res.get_json()["error"]

    res = client.post("/api/student/mark-attendance", json={"faceDescriptor": descriptor}, headers=_auth(student_token))
    assert res.get_json() == {"error": "Location is required"}


def test_voice_helpers(client, teacher_token):
    headers = _auth(teacher_token)

    data = client.post("/api/teacher/process-voice", json={"text": "Sarah got 85 marks"}, headers=headers).get_json()
    assert data["data"]["entries"] == [{"name": "Sarah", "mark": 85}]
    assert client.post("/api/teacher/process-voice", json={}, headers=headers).status_code == 400

    sheet = client.post(
        "/api/teacher/sheet-command", json={"text": "create a sheet of 5 rows and 3 columns"}, headers=headers
    ).get_json()["sheet"]
    assert sheet == {"rows": 5, "columns": 3, "columnNames": ["Col1", "Col2", "Col3"]}

    assert client.get("/api/teacher/roster", headers=headers).get_json()["roster"] == ["Sarah", "Mike", "Ravi"]
    corrected = client.post("/api/teacher/correct-name", json={"name": "Sara?"}, headers=headers).get_json()
    assert (corrected["name"], corrected["corrected"], corrected["changed"]) == ("Sara", "Sarah", True)


def test_mark_sheet_lifecycle(client, teacher_token):
    headers = _auth(teacher_token)
    entries = [{"name": "Sarah", "mark": 85}, {"studentName": "Ravi", "mark": 72}, {"name": "Unknown", "mark": 10}]

    res = client.post("/api/teacher/save-entries", json={"entries": entries, "subject": " "}, headers=headers)
    assert res.status_code == 400

    res = client.post("/api/teacher/save-entries", json={"entries": entries, "subject": "Maths"}, headers=headers)
    body = res.get_json()
    assert body["count"] == 2
    assert body["message"] == '2 entries saved successfully for "Maths"'
    assert body["stats"] == {"average": 78.5, "highest": 85, "lowest": 72}
    sheet_id = body["id"]

    listing = client.get("/api/teacher/mark-entries?subject=math", headers=headers).get_json()
    assert listing["total"] == 1
    assert listing["records"][0]["totalStudents"] == 2

    record = client.get(f"/api/teacher/mark-entries/{sheet_id}", headers=headers).get_json()["record"]
    assert record["entries"] == [{"studentName": "Sarah", "mark": 85}, {"studentName": "Ravi", "mark": 72}]

    other = client.post(
        "/api/teacher/register", json={**TEACHER, "email": "jane@example.com", "employeeId": "EMP002"}
    ).get_json()["token"]
    assert client.get(f"/api/teacher/mark-entries/{sheet_id}", headers=_auth(other)).status_code == 404
    assert client.delete(f"/api/teacher/mark-entries/{sheet_id}", headers=_auth(other)).status_code == 404

    assert client.delete(f"/api/teacher/mark-entries/{sheet_id}", headers=headers).status_code == 200
    assert client.get(f"/api/teacher/mark-entries/{sheet_id}", headers=headers).status_code == 404


def test_generate_excel(client, teacher_token):
    res = client.post(
        "/api/teacher/generate-excel",
        json={"entries": [{"name": "Sarah", "mark": 85}], "subject": "Maths"},
        headers=_auth(teacher_token),
    )
    assert res.status_code == 200
    assert res.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert "mark_sheet_" in res.headers["Content-Disposition"]

    ws = load_workbook(io.BytesIO(res.data)).active
    assert ws.title == "Mark Sheet"
    assert ws["A2"].value == "Sarah"

    res = client.post("/api/teacher/generate-excel", json={"entries": []}, headers=_auth(teacher_token))
    assert res.status_code == 400


def test_change_password(client, teacher_token):
    res = client.put(
        "/api/teacher/change-password",
        json={"currentPassword": "password123", "newPassword": "newpass1"},
        headers=_auth(teacher_token),
    )
    assert res.status_code == 200
    new_token = res.get_json()["token"]
    assert client.get("/api/teacher/profile", headers=_auth(new_token)).get_json()["teacher"]["employeeId"] == "EMP001"


def test_unusable_marks_are_rejected_not_crashed(client, teacher_token):
    headers = _auth(teacher_token)

    res = client.post(
        "/api/teacher/generate-excel", json={"entries": [{"name": "Sarah", "mark": "²"}]}, headers=headers
    )
    assert res.status_code == 400
    assert res.get_json() == {"error": "No valid entries to generate Excel"}

    res = client.post("/api/teacher/process-voice", json={"text": "Sarah got " + "9" * 5000 + " marks"}, headers=headers)
    assert res.status_code == 200
    assert res.get_json()["data"]["entries"] == []
