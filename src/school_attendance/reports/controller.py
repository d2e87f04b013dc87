from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify

from ..common.web import date_arg, head_teacher_required
from ..container import Container
from .exporters import report_filename, to_csv_bytes, to_pdf_bytes


def register(app: Flask, container: Container) -> None:
    service = container.report_service

    def _attachment(body: bytes, *, mimetype: str, filename: str, warning: Optional[str] = None):
        headers = {"Content-Disposition": f"attachment; filename={filename}"}
        if warning:
            headers["X-Report-Warning"] = warning
        return app.response_class(body, mimetype=mimetype, headers=headers)

    @app.route("/api/reports/attendance.csv", methods=["GET"], endpoint="report_csv")
    @head_teacher_required
    def report_csv():
        data = service.attendance_report(start=date_arg("start"), end=date_arg("end"))
        return _attachment(
            to_csv_bytes(data), mimetype="text/csv", filename=report_filename(data, "csv"), warning=data.warning
        )

    @app.route("/api/reports/attendance.pdf", methods=["GET"], endpoint="report_pdf")
    @head_teacher_required
    def report_pdf():
        data = service.attendance_report(start=date_arg("start"), end=date_arg("end"))
        return _attachment(
            to_pdf_bytes(data), mimetype="application/pdf", filename=report_filename(data, "pdf"), warning=data.warning
        )

    @app.route("/api/reports/analytics", methods=["GET"], endpoint="report_analytics")
    @head_teacher_required
    def report_analytics():
        summary = service.analytics(start=date_arg("start"), end=date_arg("end"))
        return jsonify({"success": True, **summary.to_dict()})
