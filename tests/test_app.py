from app import APP_PAGE


def test_root__redirects_to_app_page(client):
    resp = client.get("/")
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith(f"/{APP_PAGE}")


def test_app_page__is_served_statically(client):
    resp = client.get(f"/{APP_PAGE}")
    assert resp.status_code == 200
    assert b"/api/goguma/grow" in resp.data
    resp.close()


def test_healthz(client):
    assert client.get("/healthz").get_json() == {"status": "ok"}


def test_unknown_api_path__returns_json_not_found(client):
    resp = client.get("/api/nope")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "not_found"


def test_wrong_method__returns_json_error(client):
    resp = client.post("/api/ranking")
    assert resp.status_code == 405
    assert resp.get_json()["code"] == "method_not_allowed"


def test_unhandled_error__returns_json_500(app):
    @app.get("/api/explode")
    def explode():
        raise RuntimeError("boom")

    resp = app.test_client().get("/api/explode")

    assert resp.status_code == 500
    assert resp.get_json()["code"] == "internal_error"


def test_session_cookie__is_permanent_for_a_week(app, client):
    client.post("/api/start", json={"userName": "alice"})

    with client.session_transaction() as sess:
        assert sess.permanent is True
    assert app.permanent_session_lifetime.days == 7


def test_non_json_body__is_treated_as_empty(client):
    resp = client.post("/api/start", data="userName=alice")
    assert resp.status_code == 400
