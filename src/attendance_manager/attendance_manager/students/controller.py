from __future__ import annotations

from flask import Flask, jsonify

from ..common.money import to_decimal
from ..common.web import current_teacher_id, json_body, login_required, optional_dates
from ..common.validators import require_positive_id
from ..container import Container
from .model import Student
from .service import NewStudent


def student_json(s: Student) -> dict:
    return {
        "id": s.student_id,
        "student_name": s.student_name,
        "parent_email": s.parent_email,
        "payment_status": s.payment_status.value,
        "invoice_amount": str(to_decimal(s.invoice_amount_cents)) if s.invoice_amount_cents is not None else None,
        "last_payment_date": s.last_payment_date.isoformat() if s.last_payment_date else None,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/students", methods=["GET"], endpoint="students_list")
    @login_required
    def students_list():
        return jsonify([student_json(s) for s in container.student_service.list(current_teacher_id())])

    @app.route("/api/students", methods=["POST"], endpoint="students_create")
    @login_required
    def students_create():
        data = json_body()
        teacher_id = current_teacher_id()
        class_id = data.get("class_id")
        student_id = container.student_service.create(
            teacher_id,
            NewStudent(
                student_name=data.get("student_name", ""),
                parent_email=data.get("parent_email"),
                payment_status=data.get("payment_status") or "pending",
                invoice_amount=data.get("invoice_amount"),
            ),
            class_id=require_positive_id(class_id, "Class") if class_id else None,
            planned_dates=optional_dates(data.get("planned_dates")),
        )
        return jsonify({"id": student_id}), 201

    @app.route("/api/students/<int:student_id>", methods=["PUT"], endpoint="students_update")
    @login_required
    def students_update(student_id: int):
        data = json_body()
        updated = container.student_service.update(
            current_teacher_id(),
            student_id,
            student_name=data.get("student_name"),
            parent_email=data.get("parent_email"),
            payment_status=data.get("payment_status"),
            invoice_amount=data.get("invoice_amount"),
        )
        return jsonify(student_json(updated))

    @app.route("/api/students/<int:student_id>", methods=["DELETE"], endpoint="students_delete")
    @login_required
    def students_delete(student_id: int):
        container.student_service.remove(current_teacher_id(), student_id)
        return jsonify({"ok": True})
