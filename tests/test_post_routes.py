"""Route-level tests: each handler validates, delegates once, maps the result.

The posts service is patched so the tests observe exactly which domain
call a request reaches and with which arguments.
"""

from unittest.mock import ANY, patch

import pytest
from conftest import MASTER_TOKEN, Forum, auth
from fastapi.testclient import TestClient

BASE = "/api/v2/posts"


# ---------------------------------------------------------------------------
# Edit
# ---------------------------------------------------------------------------


class TestEditRoute:
    def test_edit_payload_for_master_token_uid(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.edit", return_value={"pid": 123}) as edit:
            resp = client.put(
                f"{BASE}/123", params={"_uid": 5}, json={"content": "hi"}, headers=auth(MASTER_TOKEN),
            )
        assert resp.status_code == 200
        assert resp.json() == {"code": "ok", "payload": {"pid": 123}}
        edit.assert_called_once()
        payload = edit.call_args.args[1]
        assert payload.model_dump(exclude_none=True) == {
            "uid": 5, "pid": "123", "content": "hi", "options": {},
        }

    def test_optional_fields_copied_when_present(self, client: TestClient, forum: Forum) -> None:
        body = {
            "content": "updated text",
            "title": "New title",
            "tags": ["python", "forum"],
            "topic_thumb": "/thumbs/1.png",
            "handle": "",
        }
        with patch("backend.app.services.posts.edit", return_value=None) as edit:
            resp = client.put(f"{BASE}/{forum.main_post}", json=body, headers=auth("alice-token"))
        assert resp.status_code == 200
        payload = edit.call_args.args[1]
        assert payload.uid == forum.alice
        assert payload.title == "New title"
        assert payload.tags == ["python", "forum"]
        assert payload.topic_thumb == "/thumbs/1.png"
        assert payload.handle is None

    def test_empty_tags_reach_domain(self, client: TestClient, forum: Forum) -> None:
        body = {"content": "long enough text", "tags": []}
        with patch("backend.app.services.posts.edit", return_value=None) as edit:
            resp = client.put(f"{BASE}/{forum.main_post}", json=body, headers=auth("alice-token"))
        assert resp.status_code == 200
        assert edit.call_args.args[1].tags == []

    def test_missing_content_never_reaches_domain(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.edit") as edit:
            resp = client.put(f"{BASE}/123", json={"title": "x"}, headers=auth("alice-token"))
        assert resp.status_code == 400
        data = resp.json()
        assert data["code"] == "params-missing"
        assert data["params"] == ["content"]
        edit.assert_not_called()

    def test_missing_body_is_client_error(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.edit") as edit:
            resp = client.put(f"{BASE}/123", headers=auth("alice-token"))
        assert resp.status_code == 400
        edit.assert_not_called()

    def test_edit_requires_user(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.edit") as edit:
            resp = client.put(f"{BASE}/123", json={"content": "hi"})
        assert resp.status_code == 401
        assert resp.json()["code"] == "not-authorised"
        edit.assert_not_called()


# ---------------------------------------------------------------------------
# Purge / delete / restore
# ---------------------------------------------------------------------------


class TestStateRoutes:
    @pytest.mark.parametrize(
        ("method", "path", "target"),
        [
            ("DELETE", "", "purge"),
            ("PUT", "/state", "restore"),
            ("DELETE", "/state", "delete"),
        ],
    )
    def test_delegates_with_path_pid_and_uid(
        self, client: TestClient, forum: Forum, method: str, path: str, target: str,
    ) -> None:
        with patch(f"backend.app.services.posts.{target}", return_value=None) as fn:
            resp = client.request(
                method, f"{BASE}/{forum.reply}{path}", headers=auth("bob-token"),
            )
        assert resp.status_code == 200
        assert resp.json() == {"code": "ok", "payload": {}}
        fn.assert_called_once_with(ANY, str(forum.reply), forum.bob)

    @pytest.mark.parametrize(
        ("method", "path", "target"),
        [
            ("DELETE", "", "purge"),
            ("PUT", "/state", "restore"),
            ("DELETE", "/state", "delete"),
        ],
    )
    def test_unknown_pid_is_404_before_domain(
        self, client: TestClient, forum: Forum, method: str, path: str, target: str,
    ) -> None:
        with patch(f"backend.app.services.posts.{target}") as fn:
            resp = client.request(method, f"{BASE}/99999{path}", headers=auth("bob-token"))
        assert resp.status_code == 404
        assert resp.json()["code"] == "not-found"
        fn.assert_not_called()

    def test_authentication_checked_before_pid(self, client: TestClient, forum: Forum) -> None:
        resp = client.delete(f"{BASE}/99999/state")
        assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Voting
# ---------------------------------------------------------------------------


class TestVoteRoute:
    @pytest.mark.parametrize(
        ("delta", "target"),
        [
            (1, "upvote"),
            (5, "upvote"),
            (0.5, "upvote"),
            (-1, "downvote"),
            (-3, "downvote"),
            (0, "unvote"),
        ],
    )
    def test_delta_sign_selects_operation(
        self, client: TestClient, forum: Forum, delta: float, target: str,
    ) -> None:
        with (
            patch("backend.app.services.posts.upvote", return_value={"v": "up"}) as up,
            patch("backend.app.services.posts.downvote", return_value={"v": "down"}) as down,
            patch("backend.app.services.posts.unvote", return_value={"v": "none"}) as un,
        ):
            resp = client.post(
                f"{BASE}/123/vote", json={"delta": delta}, headers=auth("alice-token"),
            )
        assert resp.status_code == 200
        called = {"upvote": up, "downvote": down, "unvote": un}
        for name, mock in called.items():
            if name == target:
                mock.assert_called_once_with(ANY, "123", forum.alice)
            else:
                mock.assert_not_called()
        assert resp.json()["payload"] == called[target].return_value

    def test_negative_delta_downvotes(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.downvote", return_value={}) as down:
            client.post(f"{BASE}/123/vote", json={"delta": -1}, headers=auth("bob-token"))
        down.assert_called_once_with(ANY, "123", forum.bob)

    def test_missing_delta_is_client_error(self, client: TestClient, forum: Forum) -> None:
        with (
            patch("backend.app.services.posts.upvote") as up,
            patch("backend.app.services.posts.downvote") as down,
            patch("backend.app.services.posts.unvote") as un,
        ):
            resp = client.post(f"{BASE}/123/vote", json={}, headers=auth("alice-token"))
        assert resp.status_code == 400
        assert resp.json()["params"] == ["delta"]
        up.assert_not_called()
        down.assert_not_called()
        un.assert_not_called()

    def test_non_numeric_delta_is_client_error(self, client: TestClient, forum: Forum) -> None:
        resp = client.post(f"{BASE}/123/vote", json={"delta": "lots"}, headers=auth("alice-token"))
        assert resp.status_code == 400

    def test_delete_always_unvotes(self, client: TestClient, forum: Forum) -> None:
        with (
            patch("backend.app.services.posts.upvote") as up,
            patch("backend.app.services.posts.unvote", return_value={"ok": 1}) as un,
        ):
            resp = client.request(
                "DELETE", f"{BASE}/123/vote", json={"delta": 1}, headers=auth("alice-token"),
            )
        assert resp.status_code == 200
        un.assert_called_once_with(ANY, "123", forum.alice)
        up.assert_not_called()

    def test_delete_without_identity_is_rejected_by_domain(
        self, client: TestClient, forum: Forum,
    ) -> None:
        resp = client.delete(f"{BASE}/{forum.reply}/vote")
        assert resp.status_code == 401
        assert resp.json()["message"] == "You must be logged in to do this"


# ---------------------------------------------------------------------------
# Bookmarks
# ---------------------------------------------------------------------------


class TestBookmarkRoute:
    def test_success_body_is_exact(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.bookmark") as bookmark:
            resp = client.post(f"{BASE}/{forum.reply}/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "bookmarked": True}
        bookmark.assert_called_once_with(ANY, str(forum.reply), forum.alice)

    def test_unbookmark_body_is_exact(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.unbookmark") as unbookmark:
            resp = client.delete(f"{BASE}/{forum.reply}/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "bookmarked": False}
        unbookmark.assert_called_once_with(ANY, str(forum.reply), forum.alice)

    @pytest.mark.parametrize("uid", [0, -4])
    def test_non_positive_uid_is_401(self, client: TestClient, forum: Forum, uid: int) -> None:
        with patch("backend.app.services.posts.bookmark") as bookmark:
            resp = client.post(
                f"{BASE}/{forum.reply}/bookmark", params={"_uid": uid}, headers=auth(MASTER_TOKEN),
            )
        assert resp.status_code == 401
        bookmark.assert_not_called()

    def test_absent_uid_is_401(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.bookmark") as bookmark:
            resp = client.post(f"{BASE}/{forum.reply}/bookmark", headers=auth(MASTER_TOKEN))
        assert resp.status_code == 401
        bookmark.assert_not_called()

    def test_fallback_uid_is_used_without_attached_user(
        self, client: TestClient, forum: Forum,
    ) -> None:
        with patch("backend.app.services.posts.bookmark") as bookmark:
            resp = client.post(
                f"{BASE}/{forum.reply}/bookmark", params={"_uid": forum.bob}, headers=auth(MASTER_TOKEN),
            )
        assert resp.status_code == 200
        bookmark.assert_called_once_with(ANY, str(forum.reply), forum.bob)

    def test_missing_post_is_404_without_privilege_check(
        self, client: TestClient, forum: Forum,
    ) -> None:
        with (
            patch("backend.app.services.privileges.categories_can") as can,
            patch("backend.app.services.posts.bookmark") as bookmark,
        ):
            resp = client.post(f"{BASE}/123456/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 404
        can.assert_not_called()
        bookmark.assert_not_called()

    def test_post_fields_without_pid_is_404(self, client: TestClient, forum: Forum) -> None:
        with (
            patch("backend.app.services.posts.get_post_fields", return_value={"pid": None, "tid": 1}),
            patch("backend.app.services.privileges.categories_can") as can,
        ):
            resp = client.post(f"{BASE}/123/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 404
        can.assert_not_called()

    def test_unreadable_category_is_403(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.bookmark") as bookmark:
            resp = client.post(f"{BASE}/{forum.staff_post}/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 403
        assert resp.json()["code"] == "forbidden"
        bookmark.assert_not_called()

    def test_read_privilege_checked_for_owning_category(
        self, client: TestClient, forum: Forum,
    ) -> None:
        with (
            patch("backend.app.services.privileges.categories_can", return_value=False) as can,
            patch("backend.app.services.posts.bookmark") as bookmark,
        ):
            resp = client.post(f"{BASE}/{forum.reply}/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 403
        can.assert_called_once_with(ANY, "topics:read", forum.general, forum.alice)
        bookmark.assert_not_called()

    def test_unbookmark_skips_existence_and_privilege_checks(
        self, client: TestClient, forum: Forum,
    ) -> None:
        with (
            patch("backend.app.services.posts.get_post_fields") as fields,
            patch("backend.app.services.privileges.categories_can") as can,
            patch("backend.app.services.posts.unbookmark") as unbookmark,
        ):
            resp = client.delete(f"{BASE}/{forum.staff_post}/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 200
        fields.assert_not_called()
        can.assert_not_called()
        unbookmark.assert_called_once()

    def test_unbookmark_without_identity_is_401(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.unbookmark") as unbookmark:
            resp = client.delete(f"{BASE}/{forum.reply}/bookmark")
        assert resp.status_code == 401
        unbookmark.assert_not_called()

    def test_unexpected_failure_goes_to_generic_responder(
        self, client: TestClient, forum: Forum,
    ) -> None:
        with patch("backend.app.services.posts.bookmark", side_effect=RuntimeError("disk on fire")):
            resp = client.post(f"{BASE}/{forum.reply}/bookmark", headers=auth("alice-token"))
        assert resp.status_code == 500
        data = resp.json()
        assert data["code"] == "internal-server-error"
        assert "disk on fire" not in data["message"]


# ---------------------------------------------------------------------------
# Generic error mapping for non-bookmark routes
# ---------------------------------------------------------------------------


class TestDomainErrorMapping:
    def test_unexpected_error_is_500(self, client: TestClient, forum: Forum) -> None:
        with patch("backend.app.services.posts.upvote", side_effect=RuntimeError("boom")):
            resp = client.post(f"{BASE}/123/vote", json={"delta": 1}, headers=auth("alice-token"))
        assert resp.status_code == 500
        assert resp.json()["code"] == "internal-server-error"
