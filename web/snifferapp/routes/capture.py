"""
Capture routes: device list, start/stop, status.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from payload_router.errors import CaptureOpenError, NoDeviceError
from snifferapp.managers.sniffer_manager import SnifferManager

bp = Blueprint("capture", __name__, url_prefix="/capture")


def _device_json(dev) -> dict:
    return {"name": dev.name, "description": dev.description, "kind": dev.kind}


@bp.route("/devices")
def get_devices():
    """Return enumerated devices and the one automatic selection would use."""
    mgr: SnifferManager = current_app.extensions["sniffer_mgr"]
    try:
        devices, selected = mgr.list_devices()
    except Exception as e:
        current_app.logger.exception("Error listing devices")
        return jsonify({"success": False, "error": str(e), "devices": []}), 500

    return jsonify({
        "success": True,
        "devices": [_device_json(d) for d in devices],
        "selected": _device_json(selected) if selected else None,
    })


@bp.route("/start", methods=["POST"])
def start_capture():
    """
    Start background capture.

    Body (JSON, optional):
      { "keyword": "Intel" }
    """
    data = request.get_json(silent=True) or {}
    mgr: SnifferManager = current_app.extensions["sniffer_mgr"]

    try:
        ok, msg = mgr.start(keyword=data.get("keyword"))
    except NoDeviceError as e:
        return jsonify({"success": False, "error": str(e)}), 404
    except CaptureOpenError as e:
        current_app.logger.error("Capture open failed: %s", e)
        return jsonify({"success": False, "error": str(e)}), 500

    current_app.logger.info("Start capture: %s", msg)
    return jsonify({"success": ok, "message": msg}), 200 if ok else 409


@bp.route("/stop", methods=["POST"])
def stop_capture():
    """Stop capture and return the pipeline counters."""
    mgr: SnifferManager = current_app.extensions["sniffer_mgr"]
    counters = mgr.stop()
    return jsonify({"success": True, "counters": counters})


@bp.route("/status")
def capture_status():
    """Return capture state and counters."""
    mgr: SnifferManager = current_app.extensions["sniffer_mgr"]
    return jsonify(mgr.status())
