from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import month_key
from ..common.web import current_teacher_id, id_field, json_body, login_required, month_field, optional_dates
from ..container import Container
from ..core.exceptions import ValidationError
from ..students.controller import student_json
from .model import AttendanceGrid, GridRow


def _grid_json(grid: AttendanceGrid) -> dict:
    return {
        "month": month_key(grid.month),
        "dates": [d.isoformat() for d in grid.dates],
        "students": [student_json(s) for s in grid.students],
        "cells": {
            str(s.student_id): {d.isoformat(): grid.is_attended(s.student_id, d) for d in grid.dates}
            for s in grid.students
        },
    }


def _grid_rows(raw) -> list[GridRow]:
    """Rows arrive either as ``{student_id, marks: {...}}`` or flat, one key per column."""
    if not isinstance(raw, list):
        raise ValidationError("Rows must be a list")
    rows: list[GridRow] = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("Each row must be an object")
        marks = item.get("marks")
        if not isinstance(marks, dict):
            marks = {k: v for k, v in item.items() if isinstance(v, bool)}
        rows.append(GridRow(student_id=id_field(item, "student_id", "Student"), marks=marks))
    return rows


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_grid")
    @login_required
    def attendance_grid():
        args = request.args
        grid = container.grid_service.load(
            current_teacher_id(),
            id_field(args, "class_id", "Class"),
            month_field(args),
            custom_dates=optional_dates(args.get("dates")),
        )
        return jsonify(_grid_json(grid))

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_save")
    @login_required
    def attendance_save():
        data = json_body()
        written = container.grid_service.save(
            current_teacher_id(),
            id_field(data, "class_id", "Class"),
            month_field(data),
            _grid_rows(data.get("rows", [])),
        )
        return jsonify({"written": written})

    @app.route("/api/attendance/records", methods=["POST"], endpoint="attendance_record")
    @login_required
    def attendance_record():
        data = json_body()
        ok = container.reconciler.record(
            current_teacher_id(),
            id_field(data, "lesson_schedule_id", "Lesson"),
            id_field(data, "student_id", "Student"),
            bool(data.get("attended")),
        )
        return jsonify({"ok": ok})
