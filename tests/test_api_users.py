def test_list_users_excludes_caller(http, make_user, auth_headers):
    alice = make_user("Alice")
    make_user("Zed")
    make_user("Bob")

    response = http.get("/api/users", headers=auth_headers(alice))

    assert response.status_code == 200
    assert [user["name"] for user in response.get_json()] == ["Bob", "Zed"]
    assert all("email" not in user for user in response.get_json())


def test_get_user_reports_presence(http, make_user, auth_headers, connect):
    alice = make_user("Alice")
    bob = make_user("Bob")
    connect(bob)

    user = http.get(f"/api/users/{bob}", headers=auth_headers(alice)).get_json()
    assert user["isOnline"] is True
    assert user["lastSeen"] is None

    assert http.get("/api/users/9999", headers=auth_headers(alice)).status_code == 404


def test_bearer_token_must_be_valid(http, make_user):
    make_user("Alice")
    response = http.get("/api/users", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
