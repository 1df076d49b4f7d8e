"""Tests for /api/posts: publishing, visibility and the home feed."""

from fastapi.testclient import TestClient

from tertulia.config import settings
from tertulia.tests.conftest import auth_headers, create_post, me


def two_users(client):
    """The founder is the admin; return headers for two ordinary accounts."""
    auth_headers(client, username="founder", email="founder@example.com")
    alice = auth_headers(client, username="alice", email="alice@example.com")
    bob = auth_headers(client, username="bob", email="bob@example.com")
    return alice, bob


class TestCreatePost:
    def test_create(self, client: TestClient):
        headers = auth_headers(client)
        post = create_post(client, headers, content="First!")
        assert post["type"] == "post"
        assert post["content"] == "First!"
        assert post["visibility"] == "public"
        assert post["is_closed"] is False
        assert post["comments_count"] == 0
        assert post["reactions"] == []
        assert post["user"]["username"] == "testuser"

    def test_empty_content_rejected(self, client: TestClient):
        headers = auth_headers(client)
        resp = client.post("/api/posts", json={"content": ""}, headers=headers)
        assert resp.status_code == 422

    def test_unknown_visibility_rejected(self, client: TestClient):
        headers = auth_headers(client)
        resp = client.post("/api/posts", json={"content": "x", "visibility": "friends"}, headers=headers)
        assert resp.status_code == 422

    def test_needs_post_capability(self, client: TestClient):
        admin = auth_headers(client, username="founder", email="founder@example.com")
        headers = auth_headers(client, username="quiet", email="quiet@example.com")
        user_id = me(client, headers)["id"]
        client.patch(f"/api/admin/users/{user_id}", json={"capabilities": ["comment", "react"]}, headers=admin)

        resp = client.post("/api/posts", json={"content": "hello"}, headers=headers)
        assert resp.status_code == 403


class TestVisibility:
    def test_public_post_visible_anonymously(self, client: TestClient):
        post = create_post(client, auth_headers(client))
        resp = client.get(f"/api/posts/{post['id']}")
        assert resp.status_code == 200

    def test_private_post_hidden_from_others(self, client: TestClient):
        alice, bob = two_users(client)
        post = create_post(client, alice, visibility="private")

        assert client.get(f"/api/posts/{post['id']}", headers=alice).status_code == 200
        assert client.get(f"/api/posts/{post['id']}", headers=bob).status_code == 404
        assert client.get(f"/api/posts/{post['id']}").status_code == 404

    def test_following_post_needs_follow(self, client: TestClient):
        alice, bob = two_users(client)
        post = create_post(client, alice, visibility="following")
        assert client.get(f"/api/posts/{post['id']}", headers=bob).status_code == 404

        client.post(f"/api/users/{me(client, alice)['id']}/follow", headers=bob)
        assert client.get(f"/api/posts/{post['id']}", headers=bob).status_code == 200

    def test_block_hides_public_post(self, client: TestClient):
        alice, bob = two_users(client)
        post = create_post(client, alice)
        client.post(f"/api/users/{me(client, bob)['id']}/block", headers=alice)
        assert client.get(f"/api/posts/{post['id']}", headers=bob).status_code == 404

    def test_admin_sees_private_posts(self, client: TestClient):
        admin = auth_headers(client, username="founder", email="founder@example.com")
        alice = auth_headers(client, username="alice", email="alice@example.com")
        post = create_post(client, alice, visibility="private")
        assert client.get(f"/api/posts/{post['id']}", headers=admin).status_code == 200

    def test_missing_post(self, client: TestClient):
        resp = client.get("/api/posts/12345")
        assert resp.status_code == 404
        assert resp.json()["code"] == "not_found"


class TestUpdateDelete:
    def test_author_updates(self, client: TestClient):
        headers = auth_headers(client)
        post = create_post(client, headers)
        resp = client.patch(
            f"/api/posts/{post['id']}",
            json={"content": "edited", "is_closed": True, "visibility": "following"},
            headers=headers,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["content"] == "edited"
        assert data["is_closed"] is True
        assert data["visibility"] == "following"

    def test_author_deletes(self, client: TestClient):
        headers = auth_headers(client)
        post = create_post(client, headers)
        resp = client.delete(f"/api/posts/{post['id']}", headers=headers)
        assert resp.status_code == 200
        assert resp.json() == {"status": "post_deleted", "id": post["id"]}
        assert client.get(f"/api/posts/{post['id']}").status_code == 404

    def test_moderator_deletes_others_post(self, client: TestClient):
        admin = auth_headers(client, username="founder", email="founder@example.com")
        alice = auth_headers(client, username="alice", email="alice@example.com")
        post = create_post(client, alice)
        assert client.delete(f"/api/posts/{post['id']}", headers=admin).status_code == 200

    def test_moderator_cannot_edit_others_post(self, client: TestClient):
        admin = auth_headers(client, username="founder", email="founder@example.com")
        alice = auth_headers(client, username="alice", email="alice@example.com")
        post = create_post(client, alice)
        resp = client.patch(f"/api/posts/{post['id']}", json={"content": "nope"}, headers=admin)
        assert resp.status_code == 403


class TestFeed:
    def test_own_and_followed_posts(self, client: TestClient):
        alice, bob = two_users(client)
        carol = auth_headers(client, username="carol", email="carol@example.com")

        create_post(client, alice, content="alice public")
        create_post(client, alice, content="alice following", visibility="following")
        create_post(client, alice, content="alice private", visibility="private")
        create_post(client, carol, content="carol public")
        create_post(client, bob, content="bob own")

        client.post(f"/api/users/{me(client, alice)['id']}/follow", headers=bob)

        resp = client.get("/api/posts", headers=bob)
        assert resp.status_code == 200
        contents = [p["content"] for p in resp.json()["posts"]]
        assert contents == ["bob own", "alice following", "alice public"]

    def test_feed_pages(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "FEED_PAGE_SIZE", 2)
        headers = auth_headers(client)
        for i in range(3):
            create_post(client, headers, content=f"post {i}")

        first = client.get("/api/posts", headers=headers).json()
        assert [p["content"] for p in first["posts"]] == ["post 2", "post 1"]

        second = client.get("/api/posts", params={"cursor": first["next_cursor"]}, headers=headers).json()
        assert [p["content"] for p in second["posts"]] == ["post 0"]
        assert second["next_cursor"] is None

    def test_feed_requires_auth(self, client: TestClient):
        assert client.get("/api/posts").status_code in (401, 403)
