"""Public JSON API for board posts."""

from __future__ import annotations

from flask import Blueprint, jsonify, request

from goguma.auth import require_session_user_id
from . import service

board_bp = Blueprint(
    "board",
    __name__,
    url_prefix="/api/posts",
)


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


@board_bp.get("")
def list_posts():
    return jsonify(service.list_posts())


@board_bp.post("/add")
def add_post():
    user_id = require_session_user_id()
    payload = _json_body()
    post = service.add_post(user_id, payload.get("title"), payload.get("content"))
    return jsonify({"post": post})


@board_bp.post("/delete")
def delete_post():
    user_id = require_session_user_id()
    payload = _json_body()
    service.delete_post(user_id, payload.get("id"))
    return jsonify({"ok": True})
