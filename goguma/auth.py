"""Cookie-session helpers shared by the goguma and board blueprints."""

from __future__ import annotations

from typing import Optional

from flask import session

from models import User
from .service import login_required_error

SESSION_USER_KEY = "user_id"


def session_user_id() -> Optional[int]:
    raw = session.get(SESSION_USER_KEY)
    try:
        return int(raw) if raw is not None else None
    except (TypeError, ValueError):
        return None


def require_session_user_id() -> int:
    """Return the logged-in user id or raise the 401 service error."""
    user_id = session_user_id()
    if not user_id:
        raise login_required_error()
    return user_id


def log_in(user: User) -> None:
    session.clear()
    session[SESSION_USER_KEY] = user.id
    session.permanent = True


def log_out() -> None:
    session.clear()
