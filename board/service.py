"""Board posts: listing, length-validated creation, and owner-only deletion."""

from __future__ import annotations

from typing import Any, List

from flask import current_app
from sqlalchemy.orm import joinedload

from extensions import db
from goguma.service import GogumaServiceError, clean_text, coerce_id
from models import Post

POSTS_LIMIT = 50

MSG_EMPTY_TITLE = "제목을 입력해 주세요."
MSG_EMPTY_CONTENT = "내용을 입력해 주세요."
MSG_TITLE_TOO_LONG = "제목은 100자 이내로 작성해 주세요."
MSG_CONTENT_TOO_LONG = "내용은 1000자 이내로 작성해 주세요."
MSG_INVALID_REQUEST = "잘못된 요청입니다."
MSG_POST_NOT_FOUND = "게시글을 찾을 수 없거나 권한이 없습니다."


def list_posts(limit: int = POSTS_LIMIT) -> List[dict]:
    rows: List[Post] = (
        Post.query.options(joinedload(Post.author))
        .order_by(Post.id.desc())
        .limit(limit)
        .all()
    )
    return [row.to_public_dict() for row in rows]


def add_post(user_id: int, raw_title: Any, raw_content: Any) -> dict:
    title = clean_text(raw_title)
    content = clean_text(raw_content)

    if not title:
        raise GogumaServiceError(MSG_EMPTY_TITLE, code="empty_title")
    if not content:
        raise GogumaServiceError(MSG_EMPTY_CONTENT, code="empty_content")
    if len(title) > Post.TITLE_MAX_LENGTH:
        raise GogumaServiceError(MSG_TITLE_TOO_LONG, code="title_too_long")
    if len(content) > Post.CONTENT_MAX_LENGTH:
        raise GogumaServiceError(MSG_CONTENT_TOO_LONG, code="content_too_long")

    post = Post(user_id=user_id, title=title, content=content)
    db.session.add(post)
    db.session.commit()
    current_app.logger.info("User %s posted %s", user_id, post.id)
    return post.to_public_dict()


def delete_post(user_id: int, raw_post_id: Any) -> None:
    post_id = coerce_id(raw_post_id)
    if not post_id:
        raise GogumaServiceError(MSG_INVALID_REQUEST, code="invalid_request")

    deleted = (
        db.session.query(Post)
        .filter(Post.id == post_id, Post.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if not deleted:
        db.session.rollback()
        raise GogumaServiceError(MSG_POST_NOT_FOUND, status_code=404, code="post_not_found")

    db.session.commit()
    current_app.logger.info("User %s deleted post %s", user_id, post_id)
