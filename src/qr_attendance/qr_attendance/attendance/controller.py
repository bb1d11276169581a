from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..container import Container
from ..core.exceptions import DomainError, InvalidScan, StoreError
from .messages import error_code, error_message, error_status, outcome_message, outcome_status
from .model import parse_scan_request
from .qr_decoder import decode_user_id

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    def _error(e: Exception):
        return jsonify({"success": False, "error": error_code(e), "message": error_message(e)}), error_status(e)

    def _run_scan(payload: dict):
        try:
            scan = parse_scan_request(payload, container.clock)
            result = container.dispatcher.submit(scan)
        except (DomainError, StoreError) as e:
            logger.info("scan rejected (%s): %s", error_code(e), e)
            return _error(e)
        except Exception:
            logger.exception("unexpected error while reconciling a scan")
            return jsonify({"success": False, "error": "InternalError", "message": "Attendance system error"}), 500

        body = result.to_dict()
        body.update({"success": True, "message": outcome_message(result)})
        return jsonify(body), outcome_status(result)

    @app.route("/api/scan", methods=["POST"], endpoint="api_scan")
    def api_scan():
        """JSON scan: {userId, mode, timestamp?, location?, categoryHint?, eventHint?}"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            return _error(InvalidScan("JSON body is required"))
        return _run_scan(data)

    @app.route("/api/scan/image", methods=["POST"], endpoint="api_scan_image")
    def api_scan_image():
        """Multipart scan: a QR image holding the member id, plus form fields."""
        if "image" not in request.files:
            return _error(InvalidScan("image file is required"))
        try:
            user_id = decode_user_id(request.files["image"].stream)
        except InvalidScan as e:
            return _error(e)

        payload = {name: request.form.get(name) for name in ("mode", "timestamp", "location", "categoryHint", "eventHint")}
        payload["userId"] = user_id
        return _run_scan(payload)

    @app.route("/api/users/<user_id>/eligibility", methods=["GET"], endpoint="api_user_eligibility")
    def api_user_eligibility(user_id: str):
        try:
            snapshot = container.eligibility_service.rank_user(user_id)
        except (DomainError, StoreError) as e:
            return _error(e)
        body = snapshot.to_dict()
        body["success"] = True
        return jsonify(body), 200

    @app.route("/api/attendance/end-of-day", methods=["POST"], endpoint="api_end_of_day")
    def api_end_of_day():
        data = request.get_json(silent=True) or {}
        try:
            day = parse_iso_date(str(data["date"])) if data.get("date") else None
        except ValueError:
            return _error(InvalidScan("date must be YYYY-MM-DD"))
        try:
            summary = container.absence_service.process_end_of_day(day)
        except (DomainError, StoreError) as e:
            return _error(e)
        body = summary.to_dict()
        body["success"] = True
        return jsonify(body), 200
