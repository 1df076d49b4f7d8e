"""Profiles, follows and blocks under /api/users."""

from fastapi.testclient import TestClient

from tertulia.tests.conftest import auth_headers, me


def setup_pair(client):
    auth_headers(client, username="founder", email="founder@example.com")
    alice = auth_headers(client, username="alice", email="alice@example.com")
    bob = auth_headers(client, username="bob", email="bob@example.com")
    return alice, me(client, alice)["id"], bob, me(client, bob)["id"]


class TestProfile:
    def test_update_me(self, client: TestClient):
        headers = auth_headers(client)
        resp = client.patch(
            "/api/users/me",
            json={"username": "renamed", "avatar_url": "https://img.example.com/a.png"},
            headers=headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["username"] == "renamed"
        assert data["avatar_url"] == "https://img.example.com/a.png"

    def test_null_username_rejected(self, client: TestClient):
        headers = auth_headers(client)
        resp = client.patch("/api/users/me", json={"username": None}, headers=headers)
        assert resp.status_code == 422
        assert me(client, headers)["username"] == "testuser"

    def test_username_taken(self, client: TestClient):
        alice, _, bob, _ = setup_pair(client)
        resp = client.patch("/api/users/me", json={"username": "alice"}, headers=bob)
        assert resp.status_code == 409

    def test_rename_needs_capability(self, client: TestClient):
        admin = auth_headers(client, username="founder", email="founder@example.com")
        alice = auth_headers(client, username="alice", email="alice@example.com")
        client.patch(
            f"/api/admin/users/{me(client, alice)['id']}",
            json={"capabilities": ["post", "comment", "react", "update_avatar"]},
            headers=admin,
        )
        assert client.patch("/api/users/me", json={"username": "newname"}, headers=alice).status_code == 403
        assert client.patch("/api/users/me", json={"avatar_url": None}, headers=alice).status_code == 200

    def test_public_profile(self, client: TestClient):
        alice, alice_id, bob, _ = setup_pair(client)
        resp = client.get(f"/api/users/{alice_id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["username"] == "alice"
        assert data["email"] == ""
        assert data["followers_count"] == 0

    def test_missing_user(self, client: TestClient):
        assert client.get("/api/users/999").status_code == 404


class TestFollow:
    def test_toggle(self, client: TestClient):
        alice, alice_id, bob, bob_id = setup_pair(client)

        resp = client.post(f"/api/users/{alice_id}/follow", headers=bob)
        assert resp.json() == {"status": "follow_created", "id": alice_id}

        profile = client.get(f"/api/users/{alice_id}", headers=bob).json()
        assert profile["is_followed"] is True
        assert profile["followers_count"] == 1

        followers = client.get(f"/api/users/{alice_id}/followers").json()
        assert [u["id"] for u in followers] == [bob_id]
        following = client.get(f"/api/users/{bob_id}/following").json()
        assert [u["id"] for u in following] == [alice_id]

        resp = client.post(f"/api/users/{alice_id}/follow", headers=bob)
        assert resp.json()["status"] == "follow_deleted"
        assert client.get(f"/api/users/{alice_id}/followers").json() == []

    def test_cannot_follow_self(self, client: TestClient):
        alice, alice_id, _, _ = setup_pair(client)
        resp = client.post(f"/api/users/{alice_id}/follow", headers=alice)
        assert resp.status_code == 422

    def test_cannot_follow_when_blocked(self, client: TestClient):
        alice, alice_id, bob, bob_id = setup_pair(client)
        client.post(f"/api/users/{bob_id}/block", headers=alice)
        resp = client.post(f"/api/users/{alice_id}/follow", headers=bob)
        assert resp.status_code == 403


class TestBlock:
    def test_toggle_and_flags(self, client: TestClient):
        alice, alice_id, bob, bob_id = setup_pair(client)

        resp = client.post(f"/api/users/{bob_id}/block", headers=alice)
        assert resp.json() == {"status": "block_created", "id": bob_id}

        assert client.get(f"/api/users/{bob_id}", headers=alice).json()["is_blocked"] is True
        assert client.get(f"/api/users/{alice_id}", headers=bob).json()["blocked_me"] is True

        resp = client.post(f"/api/users/{bob_id}/block", headers=alice)
        assert resp.json()["status"] == "block_deleted"
        assert client.get(f"/api/users/{bob_id}", headers=alice).json()["is_blocked"] is False

    def test_block_drops_follows_both_ways(self, client: TestClient):
        alice, alice_id, bob, bob_id = setup_pair(client)
        client.post(f"/api/users/{bob_id}/follow", headers=alice)
        client.post(f"/api/users/{alice_id}/follow", headers=bob)

        client.post(f"/api/users/{bob_id}/block", headers=alice)

        assert client.get(f"/api/users/{alice_id}/followers").json() == []
        assert client.get(f"/api/users/{bob_id}/followers").json() == []

    def test_cannot_block_self(self, client: TestClient):
        alice, alice_id, _, _ = setup_pair(client)
        assert client.post(f"/api/users/{alice_id}/block", headers=alice).status_code == 422
