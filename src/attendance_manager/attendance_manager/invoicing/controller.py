from __future__ import annotations

import csv
import io
from datetime import date

from flask import Flask, jsonify, request

from ..common.money import format_cents
from ..common.web import current_teacher_id, id_field, json_body, login_required, month_field
from ..container import Container
from ..core.exceptions import ValidationError
from .model import Invoice, InvoiceDetail, InvoiceSummary, InvoiceView

_CSV_FIELDS = [
    "invoice_number",
    "student_name",
    "invoice_date",
    "due_date",
    "total",
    "paid",
    "due",
    "status",
]


def _invoice_json(i: Invoice) -> dict:
    return {
        "id": i.invoice_id,
        "invoice_number": i.invoice_number,
        "student_id": i.student_id,
        "student_name": i.student_name,
        "invoice_date": i.invoice_date.isoformat(),
        "due_date": i.due_date.isoformat(),
        "total_amount": format_cents(i.total_cents),
        "tax_amount": format_cents(i.tax_cents),
        "status": i.status.value,
        "notes": i.notes,
    }


def view_json(v: InvoiceView) -> dict:
    out = _invoice_json(v.invoice)
    out.update(
        {
            "paid": format_cents(v.paid_cents),
            "due": format_cents(v.due_cents),
            "effective_status": v.effective_status.value,
        }
    )
    return out


def _summary_json(s: InvoiceSummary) -> dict:
    return {
        "attended": s.attended,
        "total": s.total,
        "unit": format_cents(s.unit_cents),
        "subtotal": format_cents(s.subtotal_cents),
    }


def _detail_json(d: InvoiceDetail) -> dict:
    out = view_json(d.view)
    out["line_items"] = [
        {
            "description": li.description,
            "quantity": li.quantity,
            "unit_price": format_cents(li.unit_price_cents),
            "total_price": format_cents(li.total_price_cents),
        }
        for li in d.line_items
    ]
    out["payments"] = [
        {
            "payment_reference": p.payment_reference,
            "amount": format_cents(p.amount_cents),
            "payment_date": p.payment_date.isoformat(),
            "payment_method": p.payment_method.value,
            "notes": p.notes,
        }
        for p in d.payments
    ]
    return out


def register(app: Flask, container: Container) -> None:
    def _billing_target(source) -> tuple[int, int, date, object]:
        return (
            id_field(source, "class_id", "Class"),
            id_field(source, "student_id", "Student"),
            month_field(source),
            source.get("rate"),
        )

    @app.route("/api/invoices/summary", methods=["GET"], endpoint="invoices_summary")
    @login_required
    def invoices_summary():
        class_id, student_id, month, rate = _billing_target(request.args)
        summary = container.summary_service.compute(current_teacher_id(), class_id, student_id, month, rate)
        return jsonify(_summary_json(summary))

    @app.route("/api/invoices", methods=["GET"], endpoint="invoices_list")
    @login_required
    def invoices_list():
        return jsonify([view_json(v) for v in container.invoice_service.list_invoices(current_teacher_id())])

    @app.route("/api/invoices", methods=["POST"], endpoint="invoices_generate")
    @login_required
    def invoices_generate():
        class_id, student_id, month, rate = _billing_target(json_body())
        invoice = container.invoice_service.generate(current_teacher_id(), class_id, student_id, month, rate)
        return jsonify(_invoice_json(invoice)), 201

    @app.route("/api/invoices/email", methods=["POST"], endpoint="invoices_email")
    @login_required
    def invoices_email():
        class_id, student_id, month, rate = _billing_target(json_body())
        draft = container.invoice_service.email_parent(current_teacher_id(), class_id, student_id, month, rate)
        return jsonify(
            {
                "invoice": _invoice_json(draft.invoice),
                "to": draft.to,
                "subject": draft.subject,
                "body": draft.body,
                "mailto": draft.mailto,
            }
        ), 201

    @app.route("/api/invoices/export.csv", methods=["GET"], endpoint="invoices_export_csv")
    @login_required
    def invoices_export_csv():
        views = container.invoice_service.list_invoices(current_teacher_id())

        out = io.StringIO()
        writer = csv.DictWriter(out, fieldnames=_CSV_FIELDS)
        writer.writeheader()
        for v in views:
            writer.writerow(
                {
                    "invoice_number": v.invoice.invoice_number,
                    "student_name": v.invoice.student_name or "",
                    "invoice_date": v.invoice.invoice_date.isoformat(),
                    "due_date": v.invoice.due_date.isoformat(),
                    "total": format_cents(v.invoice.total_cents),
                    "paid": format_cents(v.paid_cents),
                    "due": format_cents(v.due_cents),
                    "status": v.effective_status.value,
                }
            )

        csv_bytes = out.getvalue().encode("utf-8-sig")
        return app.response_class(
            csv_bytes,
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=invoices_{date.today().strftime('%Y%m%d')}.csv"},
        )

    @app.route("/api/invoices/bulk-delete", methods=["POST"], endpoint="invoices_bulk_delete")
    @login_required
    def invoices_bulk_delete():
        ids = json_body().get("ids")
        if not isinstance(ids, list):
            raise ValidationError("ids must be a list")
        try:
            invoice_ids = [int(i) for i in ids]
        except (TypeError, ValueError):
            raise ValidationError("ids must be numbers")
        removed = container.invoice_service.bulk_delete(current_teacher_id(), invoice_ids)
        return jsonify({"deleted": removed})

    @app.route("/api/invoices/<int:invoice_id>", methods=["GET"], endpoint="invoices_detail")
    @login_required
    def invoices_detail(invoice_id: int):
        return jsonify(_detail_json(container.invoice_service.invoice_detail(current_teacher_id(), invoice_id)))

    @app.route("/api/invoices/<int:invoice_id>", methods=["DELETE"], endpoint="invoices_delete")
    @login_required
    def invoices_delete(invoice_id: int):
        container.invoice_service.delete_invoice(current_teacher_id(), invoice_id)
        return jsonify({"ok": True})

    @app.route("/api/invoices/<int:invoice_id>/sent", methods=["POST"], endpoint="invoices_mark_sent")
    @login_required
    def invoices_mark_sent(invoice_id: int):
        return jsonify(view_json(container.invoice_service.mark_sent(current_teacher_id(), invoice_id)))
