from __future__ import annotations

from flask import Flask, g, jsonify

from ..common.http import json_body
from ..container import Container
from .auth import bearer_required
from .model import Student, Teacher


def student_to_dict(s: Student, *, with_face: bool = False) -> dict:
    data = {
        "id": s.student_id,
        "name": s.name,
        "email": s.email,
        "studentId": s.student_code,
        "rollNumber": s.roll_number,
        "course": s.course,
        "year": s.year,
    }
    if with_face:
        data["hasFaceImage"] = s.face_descriptor is not None
        data["hasFaceDescriptor"] = s.has_face_descriptor
    return data


def teacher_to_dict(t: Teacher) -> dict:
    return {
        "id": t.teacher_id,
        "name": t.name,
        "email": t.email,
        "department": t.department,
        "employeeId": t.employee_id,
    }


def register(app: Flask, container: Container) -> None:
    student_required = bearer_required(container.student_service.authenticate, attr="student")
    teacher_required = bearer_required(container.teacher_service.authenticate, attr="teacher")

    # ---- students ----

    @app.route("/api/student/register", methods=["POST"], endpoint="student_register")
    def student_register():
        data = json_body()
        result = container.student_service.register(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            roll_number=data.get("rollNumber"),
            year=data.get("year"),
        )
        return (
            jsonify(
                {
                    "message": "Account created successfully",
                    "token": result.token,
                    "student": student_to_dict(result.student),
                }
            ),
            201,
        )

    @app.route("/api/student/login", methods=["POST"], endpoint="student_login")
    def student_login():
        data = json_body()
        result = container.student_service.login(data.get("email"), data.get("password"))
        return jsonify({"token": result.token, "student": student_to_dict(result.student)})

    @app.route("/api/student/profile", methods=["GET"], endpoint="student_profile")
    @student_required
    def student_profile():
        return jsonify({"student": student_to_dict(g.student, with_face=True)})

    @app.route("/api/student/profile", methods=["PUT"], endpoint="student_profile_update")
    @student_required
    def student_profile_update():
        data = json_body()
        container.student_service.update_face_descriptor(g.student.student_id, data.get("faceDescriptor"))
        return jsonify(
            {
                "message": "Face verification image saved successfully",
                "hasFaceImage": True,
                "hasFaceDescriptor": True,
            }
        )

    # ---- teachers ----

    @app.route("/api/teacher/register", methods=["POST"], endpoint="teacher_register")
    def teacher_register():
        data = json_body()
        result = container.teacher_service.register(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            department=data.get("department"),
            employee_id=data.get("employeeId"),
        )
        return (
            jsonify(
                {
                    "message": "Teacher account created successfully",
                    "token": result.token,
                    "teacher": teacher_to_dict(result.teacher),
                }
            ),
            201,
        )

    @app.route("/api/teacher/login", methods=["POST"], endpoint="teacher_login")
    def teacher_login():
        data = json_body()
        result = container.teacher_service.login(data.get("email"), data.get("password"))
        return jsonify({"token": result.token, "teacher": teacher_to_dict(result.teacher)})

    @app.route("/api/teacher/profile", methods=["GET"], endpoint="teacher_profile")
    @teacher_required
    def teacher_profile():
        return jsonify({"teacher": teacher_to_dict(g.teacher)})

    @app.route("/api/teacher/change-password", methods=["PUT"], endpoint="teacher_change_password")
    @teacher_required
    def teacher_change_password():
        data = json_body()
        token = container.teacher_service.change_password(
            g.teacher.teacher_id,
            current_password=data.get("currentPassword"),
            new_password=data.get("newPassword"),
        )
        return jsonify({"success": True, "message": "Password updated successfully", "token": token})

