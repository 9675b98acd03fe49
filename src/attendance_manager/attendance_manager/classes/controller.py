from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify

from ..common.money import to_decimal
from ..common.web import current_teacher_id, id_field, json_body, login_required
from ..container import Container
from ..students.controller import student_json
from .model import TeachingClass


def class_json(c: TeachingClass, student_count: Optional[int] = None) -> dict:
    out = {
        "id": c.class_id,
        "class_name": c.class_name,
        "subject": c.subject,
        "hourly_rate": str(to_decimal(c.hourly_rate_cents)) if c.hourly_rate_cents is not None else None,
    }
    if student_count is not None:
        out["student_count"] = student_count
    return out


def register(app: Flask, container: Container) -> None:
    @app.route("/api/classes", methods=["GET"], endpoint="classes_list")
    @login_required
    def classes_list():
        summaries = container.class_service.list_with_counts(current_teacher_id())
        return jsonify([class_json(s.teaching_class, s.student_count) for s in summaries])

    @app.route("/api/classes", methods=["POST"], endpoint="classes_create")
    @login_required
    def classes_create():
        data = json_body()
        teacher_id = current_teacher_id()
        class_id = container.class_service.create(
            teacher_id,
            class_name=data.get("class_name", ""),
            subject=data.get("subject"),
            hourly_rate=data.get("hourly_rate"),
        )
        return jsonify(class_json(container.class_service.get(teacher_id, class_id), 0)), 201

    @app.route("/api/classes/<int:class_id>", methods=["PUT"], endpoint="classes_update")
    @login_required
    def classes_update(class_id: int):
        data = json_body()
        updated = container.class_service.update(
            current_teacher_id(),
            class_id,
            class_name=data.get("class_name", ""),
            subject=data.get("subject"),
            hourly_rate=data.get("hourly_rate"),
        )
        return jsonify(class_json(updated))

    @app.route("/api/classes/<int:class_id>", methods=["DELETE"], endpoint="classes_delete")
    @login_required
    def classes_delete(class_id: int):
        container.class_service.delete(current_teacher_id(), class_id)
        return jsonify({"ok": True})

    @app.route("/api/classes/<int:class_id>/students", methods=["GET"], endpoint="classes_students")
    @login_required
    def classes_students(class_id: int):
        students = container.enrollment.enrolled_students(current_teacher_id(), class_id)
        return jsonify([student_json(s) for s in students])

    @app.route("/api/classes/<int:class_id>/enrollments", methods=["POST"], endpoint="classes_enroll")
    @login_required
    def classes_enroll(class_id: int):
        student_id = id_field(json_body(), "student_id", "Student")
        container.enrollment.enroll(current_teacher_id(), class_id, student_id)
        return jsonify({"ok": True}), 201

    @app.route(
        "/api/classes/<int:class_id>/enrollments/<int:student_id>",
        methods=["DELETE"],
        endpoint="classes_unenroll",
    )
    @login_required
    def classes_unenroll(class_id: int, student_id: int):
        container.enrollment.unenroll(current_teacher_id(), class_id, student_id)
        return jsonify({"ok": True})
