"""Goguma growth rules: daily action limits, inactivity decay, and plant bookkeeping."""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from flask import current_app, has_app_context
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError

from config import utc_today
from extensions import db
from models import MAX_HP, MIN_HP, DEFAULT_HP, Action, Goguma, User, UserActivity

ACTION_VALUES: Dict[str, int] = {
    "bible": 1,
    "prayer": 1,
    "contact": 3,
    "meeting": 5,
    "invite": 8,
}
MAX_GOGUMAS_PER_USER = 10
PENALTY_PER_DAY = 5
RANKING_LIMIT = 50
# Largest value a 64-bit INTEGER primary key can hold.
MAX_ID = 2**63 - 1

MSG_LOGIN_REQUIRED = "로그인이 필요합니다."
MSG_EMPTY_USER_NAME = "이름을 입력해 주세요."
MSG_EMPTY_GOGUMA_NAME = "고구마 이름을 입력해 주세요."
MSG_TOO_MANY_GOGUMAS = "최대 10명까지 가능합니다."
MSG_INVALID_REQUEST = "잘못된 요청입니다."
MSG_GOGUMA_NOT_FOUND = "고구마를 찾을 수 없습니다."
MSG_ALREADY_USED_TODAY = "이 버튼은 오늘 이미 사용했습니다. 내일 다시 눌러 주세요."


class GogumaServiceError(Exception):
    """Raised when a goguma or board operation is rejected."""

    def __init__(self, message: str, status_code: int = 400, code: str = "invalid_request"):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code

    @property
    def payload(self) -> Dict[str, Any]:
        return {"error": self.message, "code": self.code}


def login_required_error() -> GogumaServiceError:
    return GogumaServiceError(MSG_LOGIN_REQUIRED, status_code=401, code="login_required")


def today() -> date:
    """Today's UTC date, overridable through app.config["TODAY_PROVIDER"]."""
    if has_app_context():
        provider = current_app.config.get("TODAY_PROVIDER")
        if provider:
            return provider()
    return utc_today()


def clean_text(value: Any) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def coerce_id(raw_value: Any) -> Optional[int]:
    """Parse a positive integer id from a JSON value; None when missing or invalid."""
    if isinstance(raw_value, bool):
        return None
    try:
        value = int(str(raw_value).strip())
    except (TypeError, ValueError):
        return None
    return value if 0 < value <= MAX_ID else None


# ====== Users ======

def get_user(user_id: Optional[int]) -> Optional[User]:
    if not user_id:
        return None
    return db.session.get(User, user_id)


def find_or_create_user(raw_name: Any) -> User:
    """Return the user with this display name, creating it on first sight."""
    name = clean_text(raw_name)
    if not name:
        raise GogumaServiceError(MSG_EMPTY_USER_NAME, code="empty_name")

    user = User.query.filter_by(name=name).first()
    if user:
        return user

    user = User(name=name)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # Another request created the same name first.
        db.session.rollback()
        user = User.query.filter_by(name=name).first()
        if user is None:
            raise
        return user

    current_app.logger.info("Created user %s (%r)", user.id, user.name)
    return user


def is_exempt_user(user: Optional[User]) -> bool:
    if user is None:
        return False
    exempt_name = current_app.config.get("GOGUMA_EXEMPT_USER")
    return bool(exempt_name) and user.name == exempt_name


# ====== Gogumas ======

def list_gogumas(user_id: int) -> List[dict]:
    rows: List[Goguma] = (
        Goguma.query.filter_by(user_id=user_id).order_by(Goguma.id.asc()).all()
    )
    return [row.to_public_dict() for row in rows]


def add_goguma(user_id: int, raw_name: Any) -> dict:
    name = clean_text(raw_name)
    if not name:
        raise GogumaServiceError(MSG_EMPTY_GOGUMA_NAME, code="empty_name")

    count = (
        db.session.query(func.count(Goguma.id))
        .filter(Goguma.user_id == user_id)
        .scalar()
    )
    if count >= MAX_GOGUMAS_PER_USER:
        raise GogumaServiceError(MSG_TOO_MANY_GOGUMAS, code="too_many_gogumas")

    goguma = Goguma(user_id=user_id, name=name, hp=DEFAULT_HP)
    db.session.add(goguma)
    db.session.commit()
    current_app.logger.info("User %s planted goguma %s (%r)", user_id, goguma.id, name)
    return goguma.to_public_dict()


def remove_goguma(user_id: int, raw_goguma_id: Any) -> None:
    goguma_id = coerce_id(raw_goguma_id)
    goguma = _owned_goguma(user_id, goguma_id) if goguma_id else None
    if goguma is None:
        raise GogumaServiceError(MSG_GOGUMA_NOT_FOUND, status_code=404, code="goguma_not_found")

    db.session.delete(goguma)
    db.session.commit()
    current_app.logger.info("User %s removed goguma %s", user_id, goguma_id)


def grow_goguma(
    user_id: int,
    raw_goguma_id: Any,
    raw_action_type: Any,
    on_date: Optional[date] = None,
) -> dict:
    """Grant an action's points to a goguma, at most once per action type per day.

    The action row and the HP update commit together; a duplicate row (already
    present or inserted concurrently) leaves HP untouched.
    """
    goguma_id = coerce_id(raw_goguma_id)
    action_type = clean_text(raw_action_type)
    points = ACTION_VALUES.get(action_type)
    if not goguma_id or points is None:
        raise GogumaServiceError(MSG_INVALID_REQUEST, code="invalid_request")

    goguma = _owned_goguma(user_id, goguma_id)
    if goguma is None:
        raise GogumaServiceError(MSG_GOGUMA_NOT_FOUND, status_code=404, code="goguma_not_found")

    if is_exempt_user(get_user(user_id)):
        _grant_points(goguma_id, points)
        db.session.commit()
        return {"id": goguma_id, "hp": goguma.hp}

    action_date = on_date or today()
    if _action_recorded(user_id, goguma_id, action_type, action_date):
        raise _already_used_today()

    db.session.add(
        Action(
            user_id=user_id,
            goguma_id=goguma_id,
            action_type=action_type,
            action_date=action_date,
        )
    )
    try:
        db.session.flush()
        _grant_points(goguma_id, points)
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(
            "Duplicate %s action for goguma %s on %s rejected by constraint",
            action_type,
            goguma_id,
            action_date,
        )
        raise _already_used_today()
    except Exception:
        db.session.rollback()
        raise

    return {"id": goguma_id, "hp": goguma.hp}


def ranking(limit: int = RANKING_LIMIT) -> List[dict]:
    rows = (
        db.session.query(
            User.name.label("userName"),
            Goguma.name.label("gogumaName"),
            Goguma.hp.label("hp"),
        )
        .select_from(Goguma)
        .join(User, Goguma.user_id == User.id)
        .order_by(Goguma.hp.desc(), Goguma.name.asc())
        .limit(limit)
        .all()
    )
    return [
        {"userName": row.userName, "gogumaName": row.gogumaName, "hp": row.hp}
        for row in rows
    ]


# ====== Inactivity decay ======

def apply_inactivity_penalty(user_id: int, on_date: Optional[date] = None) -> int:
    """Charge PENALTY_PER_DAY for each whole day since the user's last visit.

    Returns the penalty applied to each goguma (0 when nothing was charged). The
    marker moves with a compare-and-set on the value read, so two overlapping
    calls for the same user charge the elapsed days only once.
    """
    visit_date = on_date or today()

    try:
        activity = _load_marker(user_id)
        if activity is None:
            db.session.add(UserActivity(user_id=user_id, last_visit_date=visit_date))
            db.session.commit()
            return 0

        last_visit = activity.last_visit_date
        days = (visit_date - last_visit).days
        if days < 0:
            # Clock moved backwards; pull the marker back to today without charging.
            _advance_marker(user_id, last_visit, visit_date)
            db.session.commit()
            return 0
        if days == 0:
            return 0

        if not _advance_marker(user_id, last_visit, visit_date):
            db.session.rollback()
            current_app.logger.info(
                "Decay for user %s already applied by a concurrent request", user_id
            )
            return 0

        penalty = PENALTY_PER_DAY * days
        decayed = Goguma.hp - penalty
        (
            db.session.query(Goguma)
            .filter(Goguma.user_id == user_id)
            .update(
                {Goguma.hp: case((decayed < MIN_HP, MIN_HP), else_=decayed)},
                synchronize_session=False,
            )
        )
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.warning(
            "Visit marker for user %s was created concurrently; skipping decay", user_id
        )
        return 0
    except Exception:
        db.session.rollback()
        raise

    current_app.logger.info(
        "Applied inactivity penalty %s to user %s (%s idle days)", penalty, user_id, days
    )
    return penalty


def _load_marker(user_id: int) -> Optional[UserActivity]:
    return db.session.get(UserActivity, user_id)


def _advance_marker(user_id: int, expected: date, new_value: date) -> bool:
    updated = (
        db.session.query(UserActivity)
        .filter(
            UserActivity.user_id == user_id,
            UserActivity.last_visit_date == expected,
        )
        .update({UserActivity.last_visit_date: new_value}, synchronize_session=False)
    )
    return updated > 0


def _owned_goguma(user_id: int, goguma_id: int) -> Optional[Goguma]:
    return Goguma.query.filter_by(id=goguma_id, user_id=user_id).first()


def _action_recorded(user_id: int, goguma_id: int, action_type: str, action_date: date) -> bool:
    existing = Action.query.filter_by(
        user_id=user_id,
        goguma_id=goguma_id,
        action_type=action_type,
        action_date=action_date,
    ).first()
    return existing is not None


def _grant_points(goguma_id: int, points: int) -> None:
    grown = Goguma.hp + points
    (
        db.session.query(Goguma)
        .filter(Goguma.id == goguma_id)
        .update(
            {Goguma.hp: case((grown > MAX_HP, MAX_HP), else_=grown)},
            synchronize_session=False,
        )
    )


def _already_used_today() -> GogumaServiceError:
    return GogumaServiceError(MSG_ALREADY_USED_TODAY, status_code=400, code="already_used_today")
