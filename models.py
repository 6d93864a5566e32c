"""Database models for the goguma server."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import func

from extensions import db

MAX_HP = 100
MIN_HP = 0
DEFAULT_HP = 10
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class User(db.Model):
    """A player identified only by a unique display name."""

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, unique=True, nullable=False)
    created_at = db.Column(db.DateTime, server_default=func.now(), nullable=False)

    gogumas = db.relationship(
        "Goguma",
        back_populates="owner",
        order_by="Goguma.id",
        cascade="all, delete-orphan",
    )
    posts = db.relationship("Post", back_populates="author", cascade="all, delete-orphan")

    def to_public_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    def __repr__(self) -> str:  # pragma: no cover - helper for shell debugging
        return f"<User id={self.id} name={self.name!r}>"


class Goguma(db.Model):
    """A user's virtual sweet potato; HP stays within [0, 100]."""

    __tablename__ = "gogumas"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    name = db.Column(db.Text, nullable=False)
    hp = db.Column(db.Integer, default=DEFAULT_HP, server_default=str(DEFAULT_HP), nullable=False)
    created_at = db.Column(db.DateTime, server_default=func.now(), nullable=False)

    owner = db.relationship("User", back_populates="gogumas")
    actions = db.relationship(
        "Action",
        back_populates="goguma",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        db.CheckConstraint(f"hp >= {MIN_HP} AND hp <= {MAX_HP}", name="ck_gogumas_hp_range"),
    )

    def to_public_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "hp": self.hp}

    def __repr__(self) -> str:  # pragma: no cover - helper for shell debugging
        return f"<Goguma id={self.id} name={self.name!r} hp={self.hp}>"


class Action(db.Model):
    """Tracks which action type a user spent on a goguma on a given date (unique per day)."""

    __tablename__ = "actions"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    goguma_id = db.Column(
        db.Integer,
        db.ForeignKey("gogumas.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    action_type = db.Column(db.String(20), nullable=False)
    action_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, server_default=func.now(), nullable=False)

    goguma = db.relationship("Goguma", back_populates="actions")

    __table_args__ = (
        db.UniqueConstraint(
            "user_id",
            "goguma_id",
            "action_type",
            "action_date",
            name="uq_actions_user_goguma_type_date",
        ),
    )


class UserActivity(db.Model):
    """Last calendar date on which inactivity decay was evaluated for a user."""

    __tablename__ = "user_activity"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    last_visit_date = db.Column(db.Date, nullable=False)


class Post(db.Model):
    """Short message on the shared board."""

    __tablename__ = "posts"

    TITLE_MAX_LENGTH = 100
    CONTENT_MAX_LENGTH = 1000

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    title = db.Column(db.String(TITLE_MAX_LENGTH), nullable=False)
    content = db.Column(db.Text, nullable=False)
    created_at = db.Column(db.DateTime, server_default=func.now(), nullable=False)

    author = db.relationship("User", back_populates="posts")

    def to_public_dict(self) -> dict:
        """Serialize the post in the board API schema."""
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "content": self.content,
            "created_at": _format_timestamp(self.created_at),
            "userName": self.author.name if self.author else None,
        }

    def __repr__(self) -> str:  # pragma: no cover - helper for shell debugging
        return f"<Post id={self.id} user_id={self.user_id} title={self.title!r}>"


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime(TIMESTAMP_FORMAT)
