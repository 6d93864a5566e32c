import pytest

from conftest import seed_user, start
from extensions import db
from models import Post


def add_post(client, title="hello", content="world"):
    return client.post("/api/posts/add", json={"title": title, "content": content})


def test_add_post__returns_post_with_author(client):
    user = start(client)["user"]

    resp = add_post(client, " 제목 ", " 내용 ")

    post = resp.get_json()["post"]
    assert post["title"] == "제목"
    assert post["content"] == "내용"
    assert post["userId"] == user["id"]
    assert post["userName"] == "alice"
    assert post["created_at"]


def test_add_post_without_session__is_unauthorized(client):
    assert add_post(client).status_code == 401


@pytest.mark.parametrize(
    "title, content, code",
    [
        ("", "body", "empty_title"),
        ("title", "  ", "empty_content"),
        ("t" * 101, "body", "title_too_long"),
        ("title", "c" * 1001, "content_too_long"),
        ("", "", "empty_title"),
    ],
)
def test_add_post_invalid__is_bad_request(client, title, content, code):
    start(client)

    resp = add_post(client, title, content)

    assert resp.status_code == 400
    assert resp.get_json()["code"] == code


def test_add_post_at_length_limits__is_accepted(client):
    start(client)
    assert add_post(client, "t" * 100, "c" * 1000).status_code == 200


def test_list_posts__newest_first_with_author_names(client):
    start(client, "alice")
    add_post(client, "first")
    client.post("/api/logout")
    start(client, "bob")
    add_post(client, "second")
    client.post("/api/logout")

    rows = client.get("/api/posts").get_json()

    assert [(row["title"], row["userName"]) for row in rows] == [
        ("second", "bob"),
        ("first", "alice"),
    ]


def test_list_posts__is_limited_to_fifty(app, client):
    user_id = seed_user(app, "writer")
    with app.app_context():
        db.session.add_all(
            [Post(user_id=user_id, title=f"t{n}", content="c") for n in range(55)]
        )
        db.session.commit()

    rows = client.get("/api/posts").get_json()

    assert len(rows) == 50
    assert rows[0]["title"] == "t54"


def test_delete_own_post(app, client):
    start(client)
    post = add_post(client).get_json()["post"]

    resp = client.post("/api/posts/delete", json={"id": post["id"]})

    assert resp.get_json() == {"ok": True}
    with app.app_context():
        assert db.session.get(Post, post["id"]) is None


def test_delete_someone_elses_post__is_not_found_and_row_survives(app, client):
    start(client, "alice")
    post = add_post(client).get_json()["post"]
    client.post("/api/logout")
    start(client, "bob")

    resp = client.post("/api/posts/delete", json={"id": post["id"]})

    assert resp.status_code == 404
    assert resp.get_json()["code"] == "post_not_found"
    with app.app_context():
        assert db.session.get(Post, post["id"]) is not None


@pytest.mark.parametrize("raw_id", [None, "", "abc", 0, -3, 10**20, "100000000000000000000"])
def test_delete_post_with_bad_id__is_bad_request(client, raw_id):
    start(client)
    resp = client.post("/api/posts/delete", json={"id": raw_id})
    assert resp.status_code == 400


def test_delete_post_without_session__is_unauthorized(client):
    assert client.post("/api/posts/delete", json={"id": 1}).status_code == 401


def test_add_post_with_non_string_fields__is_bad_request(client):
    start(client)
    resp = client.post("/api/posts/add", json={"title": 5, "content": {"x": 1}})
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "empty_title"
