"""
Detection routes: read and clear the in-memory buffer of accepted records.
"""

from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from snifferapp.sinks.recent import RecentDetections

bp = Blueprint("detections", __name__, url_prefix="/detections")


@bp.route("", methods=["GET"])
def list_detections():
    """
    Latest accepted records, newest first.

    Query params (optional):
      limit=50        max records returned (default 50)
      protocol=http   only records of this protocol
    """
    recent: RecentDetections = current_app.extensions["recent_detections"]
    limit = request.args.get("limit", default=50, type=int)
    protocol = request.args.get("protocol") or None
    items = recent.snapshot(limit=limit, protocol=protocol)
    return jsonify({"success": True, "count": len(items), "total": recent.total, "detections": items})


@bp.route("", methods=["DELETE"])
def clear_detections():
    recent: RecentDetections = current_app.extensions["recent_detections"]
    removed = recent.clear()
    return jsonify({"success": True, "removed": removed})
