from fastapi.testclient import TestClient

from tests.fakes import FakeKeyValueStore


def login_user(
    client: TestClient, username: str = "alice", vault_id: str = "team"
) -> TestClient:
    """Helper function to log in a user and return a client with session cookies."""
    response = client.post("/login", data={"username": username, "vault_id": vault_id})
    assert response.status_code == 200, (
        f"Unexpected status: {response.status_code}, content: {response.text}"
    )
    return client


def test_health(test_client: TestClient) -> None:
    response = test_client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_login_opens_empty_vault(test_client: TestClient) -> None:
    response = test_client.post("/login", data={"username": "alice", "vault_id": "team"})

    assert response.status_code == 200
    assert response.json()["logged_in"] is True
    assert response.json()["save_status"] == "idle"

    vault = test_client.get("/api/vault")
    assert vault.status_code == 200
    assert vault.json() == {"folders": [], "notes": []}


def test_login_requires_username(test_client: TestClient) -> None:
    response = test_client.post("/login", data={"username": " ", "vault_id": "team"})

    assert response.status_code == 400
    assert test_client.get("/api/session").json() == {"logged_in": False}


def test_login_on_corrupt_vault(
    test_client: TestClient, fake_kv_store: FakeKeyValueStore
) -> None:
    fake_kv_store.entries["vault_team"] = "{oops"

    response = test_client.post("/login", data={"username": "alice", "vault_id": "team"})

    assert response.status_code == 500
    assert "corrupt" in response.json()["detail"]
    assert test_client.get("/api/vault").status_code == 401


def test_failed_logins_do_not_register_sessions(
    test_client: TestClient, fake_kv_store: FakeKeyValueStore
) -> None:
    for _ in range(5):
        response = test_client.post("/login", data={"username": " ", "vault_id": "team"})
        assert response.status_code == 400

    fake_kv_store.entries["vault_broken"] = "{oops"
    response = test_client.post("/login", data={"username": "alice", "vault_id": "broken"})
    assert response.status_code == 500

    assert len(test_client.app.state.sessions) == 0


def test_failed_relogin_keeps_existing_session(test_client: TestClient) -> None:
    login_user(test_client)

    response = test_client.post("/login", data={"username": "alice", "vault_id": " "})

    assert response.status_code == 400
    assert len(test_client.app.state.sessions) == 1
    assert test_client.get("/api/vault").status_code == 200


def test_unauthorized_access(test_client: TestClient) -> None:
    assert test_client.get("/api/vault").status_code == 401
    assert test_client.post("/api/folders", json={"name": "Research"}).status_code == 401
    assert test_client.post("/api/vault/save").status_code == 401


def test_create_and_save_vault(
    test_client: TestClient, fake_kv_store: FakeKeyValueStore
) -> None:
    login_user(test_client)

    folder = test_client.post("/api/folders", json={"name": "Research"})
    assert folder.status_code == 201
    folder_id = folder.json()["id"]

    note = test_client.post("/api/notes", json={"title": "Plan", "folder_id": folder_id})
    assert note.status_code == 201
    assert note.json()["folderId"] == folder_id
    note_id = note.json()["id"]

    selection = test_client.get("/api/selection").json()
    assert selection["note"]["id"] == note_id, "A new note becomes the selection"

    save = test_client.post("/api/vault/save")
    assert save.status_code == 200
    assert save.json() == {"save_status": "succeeded"}
    assert "vault_team" in fake_kv_store.entries

    vault = test_client.get("/api/vault").json()
    assert vault["folders"][0]["notes"] == [note_id]


def test_create_note_in_missing_folder(test_client: TestClient) -> None:
    login_user(test_client)

    response = test_client.post("/api/notes", json={"title": "Orphan", "folder_id": "missing"})

    assert response.status_code == 400
    assert test_client.get("/api/vault").json()["notes"] == []


def test_note_attachments_and_selection(test_client: TestClient) -> None:
    login_user(test_client)
    note_id = test_client.post("/api/notes", json={"title": "Plan"}).json()["id"]

    content = test_client.put(f"/api/notes/{note_id}/content", json={"content": "Draft"})
    assert content.json()["content"] == "Draft"

    comment = test_client.post(f"/api/notes/{note_id}/comments", json={"text": "Nice"})
    assert comment.status_code == 201
    assert comment.json()["author"] == "alice"

    image = test_client.post(f"/api/notes/{note_id}/images", json={"url": "https://x/a.png"})
    assert image.status_code == 201

    link = test_client.post(f"/api/notes/{note_id}/links", json={"url": "https://x.org"})
    assert link.json()["title"] == "https://x.org"

    selected = test_client.get("/api/selection").json()["note"]
    assert selected["content"] == "Draft"
    assert [c["text"] for c in selected["comments"]] == ["Nice"]
    assert len(selected["images"]) == 1
    assert len(selected["links"]) == 1


def test_empty_comment_rejected(test_client: TestClient) -> None:
    login_user(test_client)
    note_id = test_client.post("/api/notes", json={"title": "Plan"}).json()["id"]

    response = test_client.post(f"/api/notes/{note_id}/comments", json={"text": ""})

    assert response.status_code == 400


def test_delete_note(test_client: TestClient) -> None:
    login_user(test_client)
    folder_id = test_client.post("/api/folders", json={"name": "Research"}).json()["id"]
    note_id = test_client.post(
        "/api/notes", json={"title": "Plan", "folder_id": folder_id}
    ).json()["id"]

    response = test_client.delete(f"/api/notes/{note_id}")

    assert response.status_code == 200
    assert response.json()["notes"] == []
    assert response.json()["folders"][0]["notes"] == []
    assert test_client.get("/api/selection").json() == {"note": None}
    assert test_client.delete(f"/api/notes/{note_id}").status_code == 404
    assert (
        test_client.post(f"/api/notes/{note_id}/comments", json={"text": "hi"}).status_code
        == 404
    )


def test_delete_folder_keeps_or_cascades(test_client: TestClient) -> None:
    login_user(test_client)
    keep_id = test_client.post("/api/folders", json={"name": "Keep"}).json()["id"]
    test_client.post("/api/notes", json={"title": "Survivor", "folder_id": keep_id})
    drop_id = test_client.post("/api/folders", json={"name": "Drop"}).json()["id"]
    test_client.post("/api/notes", json={"title": "Casualty", "folder_id": drop_id})

    kept = test_client.delete(f"/api/folders/{keep_id}")
    assert kept.status_code == 200
    dropped = test_client.delete(f"/api/folders/{drop_id}?cascade=true")
    assert dropped.status_code == 200

    vault = dropped.json()
    assert vault["folders"] == []
    assert [n["title"] for n in vault["notes"]] == ["Survivor"]
    assert vault["notes"][0]["folderId"] is None
    assert test_client.delete(f"/api/folders/{drop_id}").status_code == 404


def test_toggle_folder(test_client: TestClient) -> None:
    login_user(test_client)
    folder_id = test_client.post("/api/folders", json={"name": "Research"}).json()["id"]

    assert test_client.post(f"/api/folders/{folder_id}/toggle").json()["expanded"] is True
    assert test_client.get("/api/session").json()["expanded_folders"] == [folder_id]
    assert test_client.post(f"/api/folders/{folder_id}/toggle").json()["expanded"] is False
    assert test_client.post("/api/folders/missing/toggle").status_code == 404


def test_save_failure_reports_unavailable(
    test_client: TestClient, fake_kv_store: FakeKeyValueStore
) -> None:
    login_user(test_client)
    test_client.post("/api/folders", json={"name": "Research"})
    fake_kv_store.fail_set = True

    response = test_client.post("/api/vault/save")

    assert response.status_code == 503
    assert test_client.get("/api/session").json()["save_status"] == "failed"
    assert len(test_client.get("/api/vault").json()["folders"]) == 1


def test_refresh_picks_up_other_collaborator(
    test_client: TestClient, fake_kv_store: FakeKeyValueStore
) -> None:
    login_user(test_client)
    other = TestClient(test_client.app)
    login_user(other, username="bob")
    other.post("/api/folders", json={"name": "Bob's"})
    other.post("/api/vault/save")

    assert test_client.get("/api/vault").json()["folders"] == []
    refreshed = test_client.post("/api/vault/refresh")

    assert [f["name"] for f in refreshed.json()["folders"]] == ["Bob's"]


def test_logout(test_client: TestClient) -> None:
    login_user(test_client)

    response = test_client.post("/logout")

    assert response.json() == {"logged_in": False}
    assert test_client.get("/api/vault").status_code == 401
    assert len(test_client.app.state.sessions) == 0


def test_select_note(test_client: TestClient) -> None:
    login_user(test_client)
    first_id = test_client.post("/api/notes", json={"title": "First"}).json()["id"]
    test_client.post("/api/notes", json={"title": "Second"})

    response = test_client.post(f"/api/notes/{first_id}/select")

    assert response.status_code == 200
    assert response.json()["title"] == "First"
    assert test_client.get("/api/selection").json()["note"]["id"] == first_id
    assert test_client.post("/api/notes/missing/select").status_code == 404
