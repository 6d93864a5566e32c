from __future__ import annotations

from flask import Blueprint, current_app, jsonify, request

from . import service
from .auth import log_in, log_out, require_session_user_id, session_user_id

goguma_bp = Blueprint(
    "goguma",
    __name__,
    url_prefix="/api",
)


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _user_state(user) -> dict:
    """Apply inactivity decay, then return the user with their gogumas."""
    service.apply_inactivity_penalty(user.id)
    return {
        "user": user.to_public_dict(),
        "gogumas": service.list_gogumas(user.id),
    }


@goguma_bp.get("/me")
def me():
    user = service.get_user(session_user_id())
    if user is None:
        if session_user_id():
            current_app.logger.info("Dropping session for missing user %s", session_user_id())
            log_out()
        return jsonify({"user": None, "gogumas": []})
    return jsonify(_user_state(user))


@goguma_bp.post("/start")
def start():
    payload = _json_body()
    user = service.find_or_create_user(payload.get("userName"))
    log_in(user)
    return jsonify(_user_state(user))


@goguma_bp.post("/logout")
def logout():
    log_out()
    return jsonify({"ok": True})


@goguma_bp.post("/goguma/add")
def add_goguma():
    user_id = require_session_user_id()
    payload = _json_body()
    goguma = service.add_goguma(user_id, payload.get("name"))
    return jsonify({"goguma": goguma})


@goguma_bp.post("/goguma/grow")
def grow_goguma():
    user_id = require_session_user_id()
    payload = _json_body()
    result = service.grow_goguma(user_id, payload.get("id"), payload.get("actionType"))
    return jsonify(result)


@goguma_bp.post("/goguma/remove")
def remove_goguma():
    user_id = require_session_user_id()
    payload = _json_body()
    service.remove_goguma(user_id, payload.get("id"))
    return jsonify({"ok": True})


@goguma_bp.get("/ranking")
def ranking():
    return jsonify(service.ranking())
