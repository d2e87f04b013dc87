from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.validators import require_date_range
from ..common.web import current_user, date_arg, login_required
from ..core.enums import PageMode, Role
from ..core.exceptions import BackendUnavailableError, ValidationError
from ..container import Container
from .pagination import AttendanceFilter

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    def _viewer_filter(user) -> AttendanceFilter:
        # Head teachers see the whole ledger; teachers only their own records.
        if user.role == Role.HEAD_TEACHER:
            return AttendanceFilter()
        return AttendanceFilter(teacher_id=user.user_id)

    def _projection(user):
        return container.projections.for_viewer(user.user_id, _viewer_filter(user))

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="checkin")
    @login_required
    def checkin():
        user = current_user()
        record = service.attempt_check_in(user.user_id)
        _projection(user).apply_check_in(record)
        return jsonify({"success": True, "message": "Checked in successfully!", "record": record.to_dict()}), 201

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="checkout")
    @login_required
    def checkout():
        user = current_user()
        record = service.attempt_check_out(user.user_id)
        _projection(user).apply_check_out(record)
        return jsonify({"success": True, "message": "Checked out successfully!", "record": record.to_dict()})

    @app.route("/api/attendance/today", methods=["GET"], endpoint="attendance_today")
    @login_required
    def attendance_today():
        status, record = service.today_status(current_user().user_id)
        return jsonify({
            "success": True,
            "status": status.value,
            "record": record.to_dict() if record else None,
        })

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @login_required
    def attendance_list():
        try:
            mode = PageMode((request.args.get("mode") or PageMode.FIRST.value).lower())
        except ValueError:
            raise ValidationError("mode must be one of first, next, prev, all")

        start, end = date_arg("start"), date_arg("end")
        if start or end:
            start, end = require_date_range(start, end)

        projection = _projection(current_user())
        projection.set_date_range(start, end)
        try:
            projection.load(mode)
        except BackendUnavailableError as e:
            logger.warning("Attendance list served from cache: %s", e)
            payload = projection.snapshot()
            payload.update(success=False, message="You're offline. Showing the last loaded records.")
            return jsonify(payload), 503

        payload = projection.snapshot()
        payload["success"] = True
        return jsonify(payload)
