from __future__ import annotations

from flask import Flask, jsonify

from ..common.web import current_teacher_id, json_body, login_required
from ..container import Container
from ..invoicing.controller import view_json


def register(app: Flask, container: Container) -> None:
    @app.route("/api/invoices/<int:invoice_id>/payments", methods=["POST"], endpoint="payments_record")
    @login_required
    def payments_record(invoice_id: int):
        data = json_body()
        view = container.payment_ledger.record_payment(
            current_teacher_id(),
            invoice_id,
            data.get("amount"),
            data.get("method"),
            data.get("notes"),
        )
        return jsonify(view_json(view)), 201

    @app.route("/api/invoices/<int:invoice_id>/payments/undo", methods=["POST"], endpoint="payments_undo")
    @login_required
    def payments_undo(invoice_id: int):
        view = container.payment_ledger.undo_last_payment(current_teacher_id(), invoice_id)
        return jsonify(view_json(view))
