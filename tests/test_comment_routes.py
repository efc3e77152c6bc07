"""Tests for the comment endpoints.

Seed data (see conftest): alice=u1, bob=u2, carol=u3; post p1 is bob's and
post p2 is alice's.
"""

import pytest
from fastapi.testclient import TestClient

from app.core.config import settings
from app.models import Comment, Notification, NotificationType

COMMENTS_URL = "/api/posts/{post_id}/comments"
COMMENT_URL = "/api/comments/{comment_id}"


def _submit(client: TestClient, headers: dict[str, str], post_id: str = "p1", content: str = "Great post!"):
    return client.post(COMMENTS_URL.format(post_id=post_id), json={"content": content}, headers=headers)


class TestSubmitComment:
    def test_returns_comment_with_author(self, client: TestClient, auth_headers) -> None:
        response = _submit(client, auth_headers("u1"), content="  Great post!  ")

        assert response.status_code == 201
        data = response.json()
        assert data["id"]
        assert data["content"] == "Great post!"
        assert data["postId"] == "p1"
        assert data["createdAt"]
        assert data["user"] == {
            "id": "u1",
            "username": "alice",
            "displayName": "Alice",
            "avatarUrl": None,
        }

    def test_notifies_post_owner(self, client: TestClient, auth_headers, count_rows) -> None:
        response = _submit(client, auth_headers("u1"))
        comment_id = response.json()["id"]

        assert count_rows(Comment, id=comment_id) == 1
        assert (
            count_rows(
                Notification,
                issuer_id="u1",
                recipient_id="u2",
                post_id="p1",
                comment_id=comment_id,
                type=NotificationType.COMMENT,
            )
            == 1
        )

    def test_own_post_does_not_notify(self, client: TestClient, auth_headers, count_rows) -> None:
        response = _submit(client, auth_headers("u1"), post_id="p2")

        assert response.status_code == 201
        assert count_rows(Comment) == 1
        assert count_rows(Notification) == 0

    def test_requires_session(self, client: TestClient, count_rows) -> None:
        response = client.post(COMMENTS_URL.format(post_id="p1"), json={"content": "hi"})

        assert response.status_code == 401
        assert count_rows(Comment) == 0

    @pytest.mark.parametrize("content", ["", "   ", "\n\t"])
    def test_blank_content_rejected(self, client: TestClient, auth_headers, count_rows, content: str) -> None:
        response = _submit(client, auth_headers("u1"), content=content)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid_comment_content"
        assert count_rows(Comment) == 0

    def test_oversized_content_rejected(
        self, client: TestClient, auth_headers, count_rows, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(settings.app, "comment_max_chars", 10)

        response = _submit(client, auth_headers("u1"), content="x" * 11)

        assert response.status_code == 400
        assert response.json()["error"]["details"]["max_value"] == 10
        assert count_rows(Comment) == 0

    def test_unknown_post_returns_404(self, client: TestClient, auth_headers, count_rows) -> None:
        response = _submit(client, auth_headers("u1"), post_id="missing")

        assert response.status_code == 404
        assert count_rows(Comment) == 0
        assert count_rows(Notification) == 0

    def test_missing_content_field_is_422(self, client: TestClient, auth_headers) -> None:
        response = client.post(COMMENTS_URL.format(post_id="p1"), json={}, headers=auth_headers("u1"))
        assert response.status_code == 422


class TestDeleteComment:
    def test_author_deletes_comment_and_notification(self, client: TestClient, auth_headers, count_rows) -> None:
        comment_id = _submit(client, auth_headers("u1")).json()["id"]

        response = client.delete(COMMENT_URL.format(comment_id=comment_id), headers=auth_headers("u1"))

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == comment_id
        assert data["content"] == "Great post!"
        assert data["user"]["username"] == "alice"
        assert count_rows(Comment) == 0
        assert count_rows(Notification) == 0

    def test_only_that_comments_notification_is_removed(self, client: TestClient, auth_headers, count_rows) -> None:
        first = _submit(client, auth_headers("u1"), content="first").json()["id"]
        _submit(client, auth_headers("u1"), content="second")

        client.delete(COMMENT_URL.format(comment_id=first), headers=auth_headers("u1"))

        assert count_rows(Comment) == 1
        assert count_rows(Notification, type=NotificationType.COMMENT) == 1

    def test_non_author_is_forbidden(self, client: TestClient, auth_headers, count_rows) -> None:
        comment_id = _submit(client, auth_headers("u1")).json()["id"]

        # Even the post owner cannot delete someone else's comment.
        response = client.delete(COMMENT_URL.format(comment_id=comment_id), headers=auth_headers("u2"))

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "forbidden"
        assert count_rows(Comment) == 1
        assert count_rows(Notification) == 1

    def test_unknown_comment_returns_404(self, client: TestClient, auth_headers) -> None:
        response = client.delete(COMMENT_URL.format(comment_id="missing"), headers=auth_headers("u1"))

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "comment_not_found"

    def test_requires_session(self, client: TestClient, auth_headers, count_rows) -> None:
        comment_id = _submit(client, auth_headers("u1")).json()["id"]

        response = client.delete(COMMENT_URL.format(comment_id=comment_id))

        assert response.status_code == 401
        assert count_rows(Comment) == 1
