import pytest
from starlette.websockets import WebSocketDisconnect

from auth.application.services import create_token


def create(sync_client, headers, **body):
    body.setdefault("title", "Chapter One")
    resp = sync_client.post("/api/drafts/", json=body, headers=headers)
    assert resp.status_code == 201
    return resp.json()["draft"]


def follow(sync_client, draft_id, actor_id=None):
    path = f"/ws/drafts/{draft_id}"
    if actor_id:
        path += f"?token={create_token(actor_id)}"
    return sync_client.websocket_connect(path)


def test_follow_sends_ready_then_workspace(sync_client, auth_headers):
    draft = create(sync_client, auth_headers("u1"), content="<p>Hello</p>")

    with follow(sync_client, draft["id"], "u1") as ws:
        ready = ws.receive_json()
        assert ready == {"event": "ready", "draft_id": draft["id"], "data": {"ok": True}}

        initial = ws.receive_json()
        assert initial["event"] == "draft-updated"
        assert initial["data"]["draft"]["content"] == "<p>Hello</p>"
        assert len(initial["data"]["revisions"]) == 1


def test_updates_and_comments_are_forwarded(sync_client, auth_headers):
    draft = create(sync_client, auth_headers("u1"), visibility="shared", shared_with=["u2"])

    with follow(sync_client, draft["id"], "u1") as ws:
        ws.receive_json()
        ws.receive_json()

        resp = sync_client.patch(
            f"/api/drafts/{draft['id']}", json={"content": "from u2"}, headers=auth_headers("u2")
        )
        assert resp.status_code == 200
        updated = ws.receive_json()
        assert updated["event"] == "draft-updated"
        assert updated["data"]["draft"]["content"] == "from u2"
        assert updated["data"]["revisions"][-1]["author_id"] == "u2"

        resp = sync_client.post(
            f"/api/drafts/{draft['id']}/comments", json={"body": "Nice"}, headers=auth_headers("u2")
        )
        assert resp.status_code == 201
        commented = ws.receive_json()
        assert commented["event"] == "draft-commented"
        assert commented["draft_id"] == draft["id"]
        assert commented["data"]["body"] == "Nice"


def test_public_draft_can_be_followed_anonymously(sync_client, auth_headers):
    draft = create(sync_client, auth_headers("u1"), visibility="public")

    with follow(sync_client, draft["id"]) as ws:
        assert ws.receive_json()["event"] == "ready"
        assert ws.receive_json()["data"]["draft"]["id"] == draft["id"]


def test_invalid_token_is_rejected(sync_client, auth_headers):
    draft = create(sync_client, auth_headers("u1"), visibility="public")

    with pytest.raises(WebSocketDisconnect) as exc:
        with sync_client.websocket_connect(f"/ws/drafts/{draft['id']}?token=nope"):
            pass
    assert exc.value.code == 4001


def test_viewer_without_access_is_rejected(sync_client, auth_headers):
    draft = create(sync_client, auth_headers("u1"))

    with pytest.raises(WebSocketDisconnect) as exc:
        with follow(sync_client, draft["id"], "u2"):
            pass
    assert exc.value.code == 4003

    with pytest.raises(WebSocketDisconnect) as exc:
        with follow(sync_client, draft["id"]):
            pass
    assert exc.value.code == 4003


def test_viewer_is_disconnected_when_draft_turns_private(sync_client, auth_headers):
    draft = create(sync_client, auth_headers("u1"), visibility="public", content="secret plans")

    with follow(sync_client, draft["id"]) as ws:
        ws.receive_json()
        ws.receive_json()

        resp = sync_client.patch(
            f"/api/drafts/{draft['id']}",
            json={"visibility": "private", "content": "more secret plans"},
            headers=auth_headers("u1"),
        )
        assert resp.status_code == 200

        with pytest.raises(WebSocketDisconnect) as exc:
            ws.receive_json()
        assert exc.value.code == 4003
