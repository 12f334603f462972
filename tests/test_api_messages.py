def _post(http, headers, chat_id, text):
    response = http.post("/api/messages", json={"chatId": chat_id, "text": text}, headers=headers)
    assert response.status_code == 201
    return response.get_json()


def test_history_is_ordered_and_marks_read(http, make_user, make_chat, auth_headers):
    alice = make_user("Alice")
    bob = make_user("Bob")
    chat_id = make_chat([alice, bob])
    first = _post(http, auth_headers(alice), chat_id, "first")
    second = _post(http, auth_headers(alice), chat_id, "second")

    history = http.get(f"/api/messages/{chat_id}", headers=auth_headers(bob)).get_json()
    assert [m["id"] for m in history] == [first["id"], second["id"]]
    assert history[0]["createdAt"] <= history[1]["createdAt"]

    # The second fetch shows what the first one marked
    again = http.get(f"/api/messages/{chat_id}", headers=auth_headers(bob)).get_json()
    assert all(m["read"] for m in again)


def test_history_requires_membership(http, make_user, make_chat, auth_headers):
    alice = make_user("Alice")
    bob = make_user("Bob")
    carol = make_user("Carol")
    chat_id = make_chat([alice, bob])

    assert http.get(f"/api/messages/{chat_id}", headers=auth_headers(carol)).status_code == 403
    assert http.get("/api/messages/9999", headers=auth_headers(carol)).status_code == 404


def test_send_message_validation(http, make_user, make_chat, auth_headers):
    alice = make_user("Alice")
    bob = make_user("Bob")
    carol = make_user("Carol")
    chat_id = make_chat([alice, bob])

    assert http.post("/api/messages", json={"text": "x"}, headers=auth_headers(alice)).status_code == 400
    assert http.post("/api/messages", json={"chatId": chat_id, "text": " "}, headers=auth_headers(alice)).status_code == 400
    outsider = http.post("/api/messages", json={"chatId": chat_id, "text": "hi"}, headers=auth_headers(carol))
    assert outsider.status_code == 403
    assert outsider.get_json()["error"] == "You are not a participant in this chat"


def test_send_updates_chat_last_message(http, make_user, make_chat, auth_headers):
    alice = make_user("Alice")
    bob = make_user("Bob")
    chat_id = make_chat([alice, bob])
    sent = _post(http, auth_headers(alice), chat_id, "latest")

    (chat,) = http.get("/api/chats", headers=auth_headers(bob)).get_json()
    assert chat["lastMessageId"] == sent["id"]
    assert chat["lastMessageAt"] == sent["createdAt"]
    assert chat["lastMessage"]["text"] == "latest"


def test_edit_and_delete_own_message(http, make_user, make_chat, auth_headers):
    alice = make_user("Alice")
    bob = make_user("Bob")
    chat_id = make_chat([alice, bob])
    sent = _post(http, auth_headers(alice), chat_id, "typo")

    not_mine = http.put(f"/api/messages/{sent['id']}", json={"text": "hijack"}, headers=auth_headers(bob))
    assert not_mine.status_code == 403
    assert not_mine.get_json()["error"] == "You can only edit your own messages"

    edited = http.put(f"/api/messages/{sent['id']}", json={"text": "fixed"}, headers=auth_headers(alice))
    assert edited.status_code == 200
    assert edited.get_json()["text"] == "fixed"
    assert edited.get_json()["edited"] is True

    deleted = http.delete(f"/api/messages/{sent['id']}", headers=auth_headers(alice))
    assert deleted.get_json() == {"message": "Message deleted", "messageId": sent["id"]}

    (message,) = http.get(f"/api/messages/{chat_id}", headers=auth_headers(bob)).get_json()
    assert message["deleted"] is True
    assert message["text"] == "[Message deleted]"

    (chat,) = http.get("/api/chats", headers=auth_headers(bob)).get_json()
    assert chat["lastMessageId"] is None

    assert http.delete(f"/api/messages/{sent['id']}", headers=auth_headers(alice)).status_code == 404
