# mypy: ignore-errors
# tests/v1/test_user_communities.py
"""Tests for the signed-in user's membership listing."""

from fastapi import status


def _join(client, headers, community_id, **body):
    return client.post(f"/api/communities/{community_id}/join", json=body or None, headers=headers)


def test_requires_login(client) -> None:
    response = client.get("/api/user/communities")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_lists_joined_ids(client, auth_token, community, cancer_community) -> None:
    _join(client, auth_token, cancer_community.id, stage="I期")
    _join(client, auth_token, community.id)

    response = client.get("/api/user/communities", headers=auth_token)

    assert response.json()["data"] == sorted([community.id, cancer_community.id])


def test_lists_details(client, auth_token, community) -> None:
    _join(client, auth_token, community.id)

    response = client.get("/api/user/communities", params={"details": "true"}, headers=auth_token)

    [item] = response.json()["data"]
    assert item["id"] == community.id
    assert item["name"] == "糖尿病"


def test_membership_in_one_community(client, auth_token, cancer_community) -> None:
    _join(client, auth_token, cancer_community.id, stage="I期", type="三阴性")

    response = client.get(
        "/api/user/communities",
        params={"community_id": cancer_community.id},
        headers=auth_token,
    )

    data = response.json()["data"]
    assert data["is_level_one_member"] is True
    assert {"stage": "I期", "type": "三阴性"} in data["sub_communities"]
    assert {"stage": "I期", "type": None} in data["sub_communities"]
    assert {"stage": None, "type": "三阴性"} in data["sub_communities"]
