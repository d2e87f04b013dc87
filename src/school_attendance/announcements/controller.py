from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.web import current_user, head_teacher_required, json_body, login_required
from ..core.exceptions import BackendUnavailableError, ValidationError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.announcement_service
    feed = container.announcement_feed

    @app.route("/api/announcements", methods=["GET"], endpoint="announcements_board")
    @login_required
    def announcements_board():
        try:
            page = int(request.args.get("page") or 1)
        except ValueError:
            raise ValidationError("page must be a number")
        try:
            feed.refresh()
        except BackendUnavailableError as exc:
            board = feed.board(page, service.page_size)
            return jsonify({"success": False, "message": str(exc), "stale": True, **board.to_dict()}), 503
        board = feed.board(page, service.page_size)
        return jsonify({"success": True, "stale": False, **board.to_dict()})

    @app.route("/api/announcements", methods=["POST"], endpoint="announcements_post")
    @head_teacher_required
    def announcements_post():
        item = service.post(current_user(), json_body().get("text", ""))
        return jsonify({"success": True, "message": "Announcement posted.", "announcement": item.to_dict()}), 201

    @app.route("/api/announcements/<announcement_id>", methods=["PUT"], endpoint="announcements_edit")
    @login_required
    def announcements_edit(announcement_id: str):
        item = service.edit(current_user(), announcement_id, json_body().get("text", ""))
        return jsonify({"success": True, "message": "Announcement updated.", "announcement": item.to_dict()})

    @app.route("/api/announcements/<announcement_id>", methods=["DELETE"], endpoint="announcements_delete")
    @login_required
    def announcements_delete(announcement_id: str):
        service.delete(current_user(), announcement_id)
        return jsonify({"success": True, "message": "Announcement deleted."})

    @app.route("/api/announcements/<announcement_id>/pin", methods=["POST"], endpoint="announcements_pin")
    @login_required
    def announcements_pin(announcement_id: str):
        item = service.toggle_pin(current_user(), announcement_id)
        message = "Announcement pinned." if item.pinned else "Announcement unpinned."
        return jsonify({"success": True, "message": message, "announcement": item.to_dict()})
