# mypy: ignore-errors
# tests/v1/test_gurus.py
"""Tests for the guru directory and Q&A."""

import pytest
from fastapi import status


@pytest.fixture()
def guru(make_user):
    return make_user("doctor", is_guru=True, guru_intro="肿瘤科医生")


@pytest.fixture()
def guru_headers(guru, auth_headers_for):
    return auth_headers_for(guru)


@pytest.fixture()
def question_id(client, guru, auth_token):
    response = client.post(
        f"/api/gurus/{guru.username}/questions",
        json={"title": "化疗副作用", "content": "如何缓解恶心？"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["message"] == "问题发布成功"
    return response.json()["data"]["id"]


def test_list_gurus(client, guru, test_user) -> None:
    response = client.get("/api/gurus")
    body = response.json()
    assert body["count"] == 1
    assert body["data"][0]["username"] == guru.username
    assert body["data"][0]["guru_intro"] == "肿瘤科医生"


def test_guru_detail(client, guru, test_user) -> None:
    response = client.get(f"/api/gurus/{guru.username}")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["username"] == guru.username
    assert data["threads"] == []

    response = client.get(f"/api/gurus/{test_user.username}")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "明星不存在"


def test_update_intro(client, guru_headers, auth_token) -> None:
    response = client.put("/api/gurus/intro", json={"intro": "新的简介"}, headers=guru_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "简介更新成功"
    assert response.json()["data"]["guru_intro"] == "新的简介"

    response = client.put("/api/gurus/intro", json={"intro": "x"}, headers=auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"] == "只有明星可以编辑简介"


def test_cannot_ask_yourself(client, guru, guru_headers) -> None:
    response = client.post(
        f"/api/gurus/{guru.username}/questions",
        json={"title": "t", "content": "c"},
        headers=guru_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "不能向自己提问"


def test_question_listing_and_detail(client, guru, test_user, question_id) -> None:
    listing = client.get(f"/api/gurus/{guru.username}/questions").json()
    assert listing["count"] == 1
    assert listing["data"][0]["asker_username"] == test_user.username

    detail = client.get(f"/api/gurus/questions/{question_id}")
    assert detail.status_code == status.HTTP_200_OK
    data = detail.json()["data"]
    assert data["guru_username"] == guru.username
    assert data["replies"] == []

    missing = client.get("/api/gurus/questions/9999")
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert missing.json()["error"] == "问题不存在"


def test_replies_maintain_count(client, guru, guru_headers, auth_token, question_id) -> None:
    first = client.post(
        f"/api/gurus/questions/{question_id}/replies",
        json={"content": "多喝水"},
        headers=guru_headers,
    )
    assert first.status_code == status.HTTP_201_CREATED
    assert first.json()["message"] == "回复发布成功"
    first_id = first.json()["data"]["id"]

    nested = client.post(
        f"/api/gurus/questions/{question_id}/replies",
        json={"content": "谢谢", "parent_reply_id": first_id},
        headers=auth_token,
    )
    assert nested.status_code == status.HTTP_201_CREATED

    detail = client.get(f"/api/gurus/questions/{question_id}").json()["data"]
    assert detail["reply_count"] == 2
    assert [r["username"] for r in detail["replies"]] == [guru.username, "alice"]

    forbidden = client.delete(f"/api/gurus/questions/replies/{first_id}", headers=auth_token)
    assert forbidden.status_code == status.HTTP_403_FORBIDDEN

    deleted = client.delete(f"/api/gurus/questions/replies/{first_id}", headers=guru_headers)
    assert deleted.json()["message"] == "回复已删除"
    assert client.get(f"/api/gurus/questions/{question_id}").json()["data"]["reply_count"] == 1

    missing = client.delete("/api/gurus/questions/replies/9999", headers=guru_headers)
    assert missing.status_code == status.HTTP_404_NOT_FOUND


def test_reply_parent_must_belong_to_question(client, guru, guru_headers, auth_token, question_id):
    response = client.post(
        f"/api/gurus/questions/{question_id}/replies",
        json={"content": "x", "parent_reply_id": 12345},
        headers=guru_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "父回复不存在"


def test_delete_question_permissions(
    client, guru_headers, other_auth_token, auth_token, question_id
) -> None:
    response = client.delete(f"/api/gurus/questions/{question_id}", headers=other_auth_token)
    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json()["error"] == "没有权限删除此问题"

    client.post(
        f"/api/gurus/questions/{question_id}/replies", json={"content": "r"}, headers=guru_headers
    )
    response = client.delete(f"/api/gurus/questions/{question_id}", headers=guru_headers)
    assert response.json()["message"] == "问题已删除"
    assert client.get(f"/api/gurus/questions/{question_id}").status_code == 404


@pytest.mark.parametrize("payload", [{}, {"title": "t"}, {"content": "c"}])
def test_question_missing_fields(client, guru, auth_token, payload) -> None:
    response = client.post(f"/api/gurus/{guru.username}/questions", json=payload, headers=auth_token)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False
    assert client.get(f"/api/gurus/{guru.username}/questions").json()["count"] == 0


def test_question_reply_missing_content(client, guru_headers, question_id) -> None:
    response = client.post(
        f"/api/gurus/questions/{question_id}/replies", json={}, headers=guru_headers
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["success"] is False
    assert client.get(f"/api/gurus/questions/{question_id}").json()["data"]["reply_count"] == 0
