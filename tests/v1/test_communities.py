# mypy: ignore-errors
# tests/v1/test_communities.py
"""Tests for community-related endpoints."""

from fastapi import status

from plikeme.services.membership import is_user_in_community


def test_list_communities(client, community, cancer_community) -> None:
    """Test listing all communities."""
    response = client.get("/api/communities")
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 2
    assert {c["id"] for c in body["data"]} == {community.id, cancer_community.id}
    cancer = next(c for c in body["data"] if c["id"] == cancer_community.id)
    assert cancer["dimensions"]["stage"]["values"] == ["I期", "II期", "III期"]


def test_search_communities_by_keyword(client, community, cancer_community) -> None:
    response = client.get("/api/communities", params={"q": "血糖"})
    assert [c["id"] for c in response.json()["data"]] == [community.id]


def test_search_communities_by_dimension_value(client, community, cancer_community) -> None:
    """Communities matching only through a stage/type value carry a hint."""
    response = client.get("/api/communities", params={"q": "her2"})
    data = response.json()["data"]
    assert [c["id"] for c in data] == [cancer_community.id]
    assert data[0]["sub_community_hint"] == "HER2阳性"


def test_get_community_detail(client, test_user, auth_token, cancer_community) -> None:
    client.post(
        f"/api/communities/{cancer_community.id}/join",
        json={"stage": "I期", "type": "三阴性"},
        headers=auth_token,
    )

    response = client.get(
        f"/api/communities/{cancer_community.id}", params={"stage": "I期", "type": " "}
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"]
    assert data["member_count"] == 1
    assert data["current_stage"] == "I期"
    assert data["current_type"] is None
    assert {"stage": "I期", "type": "三阴性", "member_count": 1} in data["sub_community_members"]


def test_get_nonexistent_community(client) -> None:
    """Test getting a non-existent community."""
    response = client.get("/api/communities/99999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"success": False, "error": "社区不存在"}


def test_join_requires_login(client, community) -> None:
    response = client.post(f"/api/communities/{community.id}/join")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_join_community(client, test_user, auth_token, community, db_session) -> None:
    """Test joining a community without a body."""
    response = client.post(f"/api/communities/{community.id}/join", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "加入成功"
    assert body["data"]["joined"] is True
    assert is_user_in_community(db_session, test_user.id, community.id)


def test_join_same_community_twice(client, test_user, auth_token, community) -> None:
    client.post(f"/api/communities/{community.id}/join", headers=auth_token)
    response = client.post(f"/api/communities/{community.id}/join", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "您已经是该社区成员"
    assert response.json()["data"]["joined"] is False


def test_join_sub_community(client, test_user, auth_token, cancer_community, db_session) -> None:
    response = client.post(
        f"/api/communities/{cancer_community.id}/join",
        json={"stage": "II期"},
        headers=auth_token,
    )
    assert response.json()["message"] == "加入细分社区成功"
    assert is_user_in_community(db_session, test_user.id, cancer_community.id)
    assert is_user_in_community(db_session, test_user.id, cancer_community.id, "II期")

    again = client.post(
        f"/api/communities/{cancer_community.id}/join",
        json={"stage": "II期"},
        headers=auth_token,
    )
    assert again.json()["message"] == "您已经是该细分社区成员"


def test_join_rejects_unknown_dimension_value(client, auth_token, cancer_community) -> None:
    response = client.post(
        f"/api/communities/{cancer_community.id}/join",
        json={"stage": "V期"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "无效的细分社区"


def test_join_rejects_undeclared_dimension(client, auth_token, db_session, cancer_community) -> None:
    cancer_community.dimensions = {"stage": {"label": "分期", "values": ["I期"]}}
    db_session.commit()

    response = client.post(
        f"/api/communities/{cancer_community.id}/join",
        json={"type": "三阴性"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "该社区没有此细分维度"


def test_join_unchecked_without_dimensions(client, test_user, auth_token, community) -> None:
    """Communities that declare no dimensions accept any value."""
    response = client.post(
        f"/api/communities/{community.id}/join",
        json={"stage": "早期"},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["joined"] is True


def test_join_missing_community(client, auth_token) -> None:
    response = client.post("/api/communities/4242/join", headers=auth_token)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_leave_community(client, test_user, auth_token, cancer_community, db_session) -> None:
    client.post(
        f"/api/communities/{cancer_community.id}/join",
        json={"stage": "I期", "type": "三阴性"},
        headers=auth_token,
    )

    response = client.delete(
        f"/api/communities/{cancer_community.id}/leave",
        params={"stage": "I期"},
        headers=auth_token,
    )
    assert response.json()["message"] == "已退出细分社区"
    assert response.json()["data"]["left"] is True
    assert not is_user_in_community(db_session, test_user.id, cancer_community.id, "I期", "三阴性")
    assert is_user_in_community(db_session, test_user.id, cancer_community.id, None, "三阴性")

    response = client.delete(f"/api/communities/{cancer_community.id}/leave", headers=auth_token)
    assert response.json()["message"] == "已退出社区"
    assert not is_user_in_community(db_session, test_user.id, cancer_community.id, None, "三阴性")


def test_leave_when_not_member(client, test_user, auth_token, community) -> None:
    response = client.delete(f"/api/communities/{community.id}/leave", headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "您尚未加入该社区"
    assert response.json()["data"]["left"] is False

    response = client.delete(
        f"/api/communities/{community.id}/leave", params={"type": "x"}, headers=auth_token
    )
    assert response.json()["message"] == "您尚未加入该细分社区"


def test_community_threads_bubble_up(client, test_user, auth_token, cancer_community) -> None:
    """Threads linked at a sub-community show at every enclosing level."""
    for title, link in [
        ("deep", {"id": cancer_community.id, "stage": "I期", "type": "三阴性"}),
        ("stage", {"id": cancer_community.id, "stage": "I期"}),
        ("other", {"id": cancer_community.id, "stage": "II期"}),
    ]:
        client.post(
            "/api/threads",
            json={"title": title, "content": "正文", "community_links": [link]},
            headers=auth_token,
        )

    def titles(**params):
        body = client.get(f"/api/communities/{cancer_community.id}/threads", params=params).json()
        return {t["title"] for t in body["data"]}, body

    assert titles()[0] == {"deep", "stage", "other"}
    assert titles(stage="I期")[0] == {"deep", "stage"}
    assert titles(type="三阴性")[0] == {"deep"}
    assert titles(stage="I期", type="三阴性")[0] == {"deep"}

    _, page = titles(limit=2, offset=0)
    assert page["count"] == 2
    assert page["total"] == 3
    assert page["has_more"] is True
