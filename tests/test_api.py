from rsvp.app.services import responses as responses_service


def login(client, login, password="secret1"):
    res = client.post("/api/auth/login", json={"login": login, "password": password})
    assert res.status_code == 200, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


def event_body(**overrides):
    body = {
        "title": "Spring meetup",
        "event_date": "2026-05-01",
        "start_datetime": "2026-05-01T18:00:00+00:00",
        "end_datetime": "2026-05-01T21:00:00+00:00",
        "status": "active",
        "questions": [
            {"text": "Your name", "type": "short_text", "required": True},
            {"text": "Colour", "type": "single_choice", "options": ["Red", "Blue"]},
        ],
    }
    body.update(overrides)
    return body


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_login_me_logout(client, make_user):
    make_user(login="ann", name="Ann")
    headers = login(client, " ANN ")

    me = client.get("/api/auth/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["name"] == "Ann"
    assert "password_hash" not in me.json()

    assert client.post("/api/auth/logout", headers=headers).json() == {"state": "cleared"}
    assert client.get("/api/auth/me", headers=headers).status_code == 401


def test_bad_credentials(client, make_user):
    make_user(login="ann")
    res = client.post("/api/auth/login", json={"login": "ann", "password": "wrong"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid credentials or inactive user."


def test_requests_without_token_are_rejected(client):
    assert client.get("/api/events").status_code == 401
    assert client.get("/api/events", headers={"Authorization": "Token abc"}).status_code == 401


def test_forced_password_change_blocks_other_routes(client, make_user):
    make_user(login="ann", password_change_required=True)
    headers = login(client, "ann")

    assert client.get("/api/events", headers=headers).status_code == 403

    res = client.post(
        "/api/auth/password",
        json={"new_password": "newsecret", "confirmation": "newsecret"},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json()["password_change_required"] is False
    assert client.get("/api/events", headers=headers).status_code == 200


def test_password_change_validation_errors(client, make_user):
    make_user(login="ann")
    headers = login(client, "ann")
    res = client.post("/api/auth/password", json={"new_password": "abc", "confirmation": "abc"}, headers=headers)
    assert res.status_code == 400
    assert "new_password" in res.json()["errors"]


def test_user_admin_is_admin_only(client, make_user):
    make_user(login="boss", role="admin")
    make_user(login="org", role="organizer")

    assert client.get("/api/users", headers=login(client, "org")).status_code == 403

    admin = login(client, "boss")
    created = client.post(
        "/api/users",
        json={"login": "Newbie", "name": "New Person", "password": "secret1", "role": "participant"},
        headers=admin,
    )
    assert created.status_code == 201
    user = created.json()
    assert user["login"] == "newbie"
    assert user["password_change_required"] is True

    dup = client.post("/api/users", json={"login": "newbie", "name": "X", "password": "secret1"}, headers=admin)
    assert dup.status_code == 409

    updated = client.put(f"/api/users/{user['id']}", json={"status": "inactive"}, headers=admin)
    assert updated.json()["status"] == "inactive"

    assert client.delete(f"/api/users/{user['id']}", headers=admin).status_code == 204
    assert len(client.get("/api/users", headers=admin).json()) == 2


def test_admin_cannot_delete_self(client, make_user):
    boss = make_user(login="boss", role="admin")
    res = client.delete(f"/api/users/{boss.id}", headers=login(client, "boss"))
    assert res.status_code == 400


def test_event_lifecycle(client, make_user):
    make_user(login="org", role="organizer")
    headers = login(client, "org")

    created = client.post("/api/events", json=event_body(), headers=headers)
    assert created.status_code == 201
    event_id = created.json()["id"]

    event = client.get(f"/api/events/{event_id}", headers=headers).json()
    assert [q["sort_order"] for q in event["questions"]] == [0, 1]
    assert event["questions"][1]["options"] == ["Red", "Blue"]

    questions = [event["questions"][1], {"text": "Notes", "type": "long_text"}]
    updated = client.put(f"/api/events/{event_id}", json=event_body(title="Renamed", questions=questions), headers=headers)
    assert updated.status_code == 200
    assert updated.json()["title"] == "Renamed"
    assert [q["text"] for q in updated.json()["questions"]] == ["Colour", "Notes"]

    assert client.delete(f"/api/events/{event_id}", headers=headers).status_code == 204
    assert client.get(f"/api/events/{event_id}", headers=headers).status_code == 404


def test_invalid_question_draft_is_a_field_error(client, make_user):
    make_user(login="org")
    body = event_body(questions=[{"text": "Pick", "type": "single_choice", "options": ["Only"]}])
    res = client.post("/api/events", json=body, headers=login(client, "org"))
    assert res.status_code == 400
    assert "options" in res.json()["errors"]


def test_participants_only_see_active_events_and_cannot_manage(client, make_user, make_event):
    make_user(login="pat", role="participant")
    active = make_event(title="Open")
    hidden = make_event(title="Draft", status="awaiting")
    headers = login(client, "pat")

    listed = client.get("/api/events", headers=headers).json()
    assert [e["id"] for e in listed] == [active.id]
    assert client.get(f"/api/events/{hidden.id}", headers=headers).status_code == 404
    assert client.post("/api/events", json=event_body(), headers=headers).status_code == 403
    assert client.get(f"/api/events/{active.id}/responses", headers=headers).status_code == 403


def test_authenticated_submit_and_report(client, make_user, make_event):
    make_user(login="org", role="organizer")
    pat = make_user(login="pat", name="Pat", role="participant")
    event = make_event()
    name_q, colour_q, _, _ = event.questions

    submitted = client.post(
        f"/api/events/{event.id}/responses",
        json={"answers": {name_q.id: "Pat", colour_q.id: ["Red", "Blue"]}},
        headers=login(client, "pat"),
    )
    assert submitted.status_code == 201

    org = login(client, "org")
    [record] = client.get(f"/api/events/{event.id}/responses", headers=org).json()
    assert record["user"]["id"] == pat.id

    report = client.post(f"/api/events/{event.id}/report", json={"filters": {}}, headers=org).json()
    assert report["metrics"]["total"] == 1
    colour = next(q for q in report["questions"] if q["question_id"] == colour_q.id)
    assert {t["label"]: t["percentage"] for t in colour["tallies"]} == {"Blue": 100.0, "Red": 100.0}

    deleted = client.request(
        "DELETE", f"/api/events/{event.id}/responses", json={"response_ids": [record["id"]]}, headers=org
    )
    assert deleted.json() == {"deleted": 1}


def test_event_with_responses_cannot_be_deleted(client, store, make_user, make_event):
    make_user(login="org")
    event = make_event()
    responses_service.submit(store, event.id, {})

    res = client.delete(f"/api/events/{event.id}", headers=login(client, "org"))
    assert res.status_code == 409


def test_public_preview_and_submit(client, store, make_event):
    event = make_event()
    preview = client.get(f"/public/events/{event.id}")
    assert preview.status_code == 200
    assert preview.json()["title"] == "Spring meetup"

    res = client.post(f"/public/events/{event.id}/responses", json={"answers": {event.questions[0].id: "Guest"}})
    assert res.status_code == 201
    [header] = store.select("event_responses", {"event_id": event.id})
    assert header["submitted_by"] is None


def test_public_submit_validation(client, store, make_event):
    event = make_event()
    res = client.post(f"/public/events/{event.id}/responses", json={"answers": {}})
    assert res.status_code == 400
    assert event.questions[0].id in res.json()["errors"]
    assert store.count("event_responses") == 0


def test_public_preview_of_inactive_event_is_read_only(client, store, make_event):
    event = make_event(status="awaiting")
    preview = client.get(f"/public/events/{event.id}")
    assert preview.status_code == 200
    assert preview.json()["status"] == "awaiting"
    assert len(preview.json()["questions"]) == 4
    assert client.post(f"/public/events/{event.id}/responses", json={"answers": {}}).status_code == 400
    assert store.count("event_responses") == 0
    assert client.get("/public/events/unknown").status_code == 404


def test_put_cannot_leave_an_active_event_without_questions(client, store, make_user, make_event):
    make_user(login="org")
    event = make_event()

    res = client.put(f"/api/events/{event.id}", json=event_body(questions=[]), headers=login(client, "org"))
    assert res.status_code == 400
    assert "status" in res.json()["errors"]
    assert store.count("event_questions", {"event_id": event.id}) == 4
