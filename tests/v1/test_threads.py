# mypy: ignore-errors
# tests/v1/test_threads.py
"""Tests for thread endpoints."""

import pytest
from fastapi import status


@pytest.fixture()
def thread(client, auth_token, community, cancer_community):
    response = client.post(
        "/api/threads",
        json={
            "title": "  我的故事 ",
            "content": "确诊三年了",
            "community_ids": [community.id],
            "community_links": [{"id": cancer_community.id, "stage": "I期", "type": "三阴性"}],
        },
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    return response.json()["data"]


def test_create_thread(thread, test_user, community, cancer_community) -> None:
    assert thread["title"] == "我的故事"
    assert thread["author"] == test_user.username
    assert thread["community_ids"] == sorted([community.id, cancer_community.id])
    paths = {c["display_path"] for c in thread["communities"]}
    assert paths == {"糖尿病", "乳腺癌 > I期 · 三阴性"}
    assert thread["reply_count"] == 0


def test_create_thread_requires_login(client) -> None:
    response = client.post("/api/threads", json={"title": "t", "content": "c"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.parametrize(
    ("payload", "error"),
    [
        ({"title": " ", "content": "c"}, "标题不能为空"),
        ({"title": "t" * 201, "content": "c"}, "标题不能超过200个字符"),
        ({"title": "t", "content": ""}, "内容不能为空"),
    ],
)
def test_create_thread_validation(client, auth_token, payload, error) -> None:
    response = client.post("/api/threads", json=payload, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == error


@pytest.mark.parametrize("payload", [{}, {"title": "t"}, {"content": "c"}])
def test_create_thread_missing_fields(client, auth_token, payload) -> None:
    response = client.post("/api/threads", json=payload, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["errors"]
    assert client.get("/api/threads", headers=auth_token).json()["count"] == 0


def test_create_thread_unknown_community(client, auth_token) -> None:
    response = client.post(
        "/api/threads",
        json={"title": "t", "content": "c", "community_ids": [777]},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "关联的社区不存在"


def test_list_own_threads(client, auth_token, thread) -> None:
    response = client.get("/api/threads", headers=auth_token)
    assert response.json()["count"] == 1
    assert response.json()["data"][0]["id"] == thread["id"]


def test_list_user_threads(client, other_auth_token, test_user, thread) -> None:
    response = client.get(f"/api/threads/user/{test_user.username}", headers=other_auth_token)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["user"]["username"] == test_user.username
    assert [t["id"] for t in body["data"]] == [thread["id"]]

    missing = client.get("/api/threads/user/nobody", headers=other_auth_token)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_get_thread_owner_only(client, auth_token, other_auth_token, thread) -> None:
    assert client.get(f"/api/threads/{thread['id']}", headers=auth_token).status_code == 200

    response = client.get(f"/api/threads/{thread['id']}", headers=other_auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"] == "无权访问此分享"

    response = client.get("/api/threads/9999", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "分享不存在"


def test_public_thread_needs_no_session(client, thread) -> None:
    response = client.get(f"/api/threads/{thread['id']}/public")
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["content"] == "确诊三年了"


def test_update_thread_replaces_links(client, auth_token, thread, cancer_community) -> None:
    response = client.put(
        f"/api/threads/{thread['id']}",
        json={
            "title": "新标题",
            "content": "新内容",
            "community_links": [{"id": cancer_community.id, "stage": "II期"}],
        },
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "分享更新成功"
    assert body["data"]["title"] == "新标题"
    assert [c["display_path"] for c in body["data"]["communities"]] == ["乳腺癌 > II期"]
    assert body["data"]["updated_at"] is not None


def test_update_thread_not_owner(client, other_auth_token, thread) -> None:
    response = client.put(
        f"/api/threads/{thread['id']}",
        json={"title": "x", "content": "y"},
        headers=other_auth_token,
    )
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "分享不存在或无权修改"


def test_delete_thread(client, auth_token, other_auth_token, thread) -> None:
    response = client.delete(f"/api/threads/{thread['id']}", headers=other_auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "分享不存在或无权删除"

    client.post(
        f"/api/threads/{thread['id']}/replies", json={"content": "加油"}, headers=other_auth_token
    )
    response = client.delete(f"/api/threads/{thread['id']}", headers=auth_token)
    assert response.json()["message"] == "分享已删除"
    assert client.get(f"/api/threads/{thread['id']}/public").status_code == 404
    assert client.get(f"/api/threads/{thread['id']}/replies").status_code == 404
