from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, session

from ..common.web import current_teacher_id, json_body, login_required
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS
from .model import Profile
from .service import SessionTeacher


def _profile_json(p: Profile) -> dict:
    return {
        "id": p.profile_id,
        "email": p.email,
        "full_name": p.full_name,
        "school_name": p.school_name,
        "display_name": p.display_name,
    }


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    def _sign_in(teacher: SessionTeacher, remember: bool) -> None:
        session.clear()
        session.permanent = bool(remember)
        session["teacher_id"] = teacher.teacher_id
        session["email"] = teacher.email
        session["name"] = teacher.display_name

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = json_body()
        teacher = container.auth_service.register(
            email=data.get("email", ""),
            password=data.get("password", ""),
            full_name=data.get("full_name"),
        )
        _sign_in(teacher, bool(data.get("remember_me")))
        return jsonify({"teacher_id": teacher.teacher_id, "name": teacher.display_name}), 201

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = json_body()
        teacher = container.auth_service.authenticate(data.get("email", ""), data.get("password", ""))
        _sign_in(teacher, bool(data.get("remember_me")))
        return jsonify({"teacher_id": teacher.teacher_id, "name": teacher.display_name})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    def auth_logout():
        session.clear()
        return jsonify({"ok": True})

    @app.route("/api/profile", methods=["GET"], endpoint="profile_get")
    @login_required
    def profile_get():
        return jsonify(_profile_json(container.profile_service.get(current_teacher_id())))

    @app.route("/api/profile", methods=["PUT"], endpoint="profile_update")
    @login_required
    def profile_update():
        data = json_body()
        profile = container.profile_service.update(
            current_teacher_id(),
            full_name=data.get("full_name"),
            school_name=data.get("school_name"),
        )
        session["name"] = profile.display_name
        return jsonify(_profile_json(profile))
