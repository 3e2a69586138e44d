# mypy: ignore-errors
# tests/v1/test_auth.py
"""Tests for signup, login, sessions and profiles."""

from fastapi import status

from plikeme.api.v1.endpoints import auth as auth_endpoints
from plikeme.core.security import create_access_token
from plikeme.core.settings import settings

STRONG_PASSWORD = "Str0ng!pass"


def test_signup_sets_session_cookie(client) -> None:
    """Signing up creates the account and logs the user in."""
    response = client.post(
        "/api/auth/signup", json={"username": "  newbie ", "password": STRONG_PASSWORD}
    )
    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "注册成功"
    assert body["data"]["user"]["username"] == "newbie"
    assert "password_hash" not in body["data"]["user"]
    assert settings.session_cookie_name in response.cookies

    me = client.get("/api/auth/me")
    assert me.status_code == status.HTTP_200_OK
    assert me.json()["data"]["username"] == "newbie"


def test_signup_requires_credentials(client) -> None:
    response = client.post("/api/auth/signup", json={"username": "", "password": ""})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"success": False, "error": "用户名和密码不能为空"}


def test_signup_username_length(client) -> None:
    response = client.post("/api/auth/signup", json={"username": "a", "password": STRONG_PASSWORD})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "用户名需要 2-20 个字符"


def test_signup_duplicate_username(client, test_user) -> None:
    response = client.post(
        "/api/auth/signup", json={"username": test_user.username, "password": STRONG_PASSWORD}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "用户名已被使用"


def test_signup_weak_password_lists_every_problem(client) -> None:
    response = client.post("/api/auth/signup", json={"username": "weakling", "password": "abc"})
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["error"] == body["errors"][0]
    assert len(body["errors"]) == 4


def test_login_and_logout(client, test_user) -> None:
    response = client.post("/api/auth/login", json={"username": "alice", "password": "Passw0rd!"})
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["message"] == "登录成功"
    assert response.json()["data"]["token"]

    assert client.get("/api/auth/me").status_code == status.HTTP_200_OK

    logout = client.post("/api/auth/logout")
    assert logout.json()["message"] == "已退出登录"
    client.cookies.clear()
    assert client.get("/api/auth/me").status_code == status.HTTP_401_UNAUTHORIZED


def test_login_wrong_password(client, test_user) -> None:
    response = client.post("/api/auth/login", json={"username": "alice", "password": "nope"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "用户名或密码错误"


def test_me_requires_session(client) -> None:
    response = client.get("/api/auth/me")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"success": False, "error": "未登录"}


def test_invalid_token_is_rejected(client) -> None:
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "登录已过期，请重新登录"


def test_token_for_deleted_user(client) -> None:
    token = create_access_token(987654, "ghost")
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json()["error"] == "用户不存在"


def test_profile_update_and_public_view(client, test_user, auth_token, cancer_community) -> None:
    payload = {
        "gender": "女",
        "age": "42",
        "location_living": "上海市",
        "disease_history": [
            {
                "community_id": cancer_community.id,
                "stage": "II期",
                "type": "",
                "disease": "乳腺癌",
                "onset_date": "2022-05",
            }
        ],
        "hospitals": ["肿瘤医院"],
    }
    response = client.put("/api/auth/profile", json=payload, headers=auth_token)
    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["message"] == "资料更新成功"
    assert body["data"]["age"] == 42
    assert body["data"]["disease_history"][0]["stage"] == "II期"
    assert body["data"]["disease_history"][0]["type"] is None

    own = client.get("/api/auth/profile", headers=auth_token).json()["data"]
    assert own["hospitals"] == ["肿瘤医院"]

    public = client.get(f"/api/auth/profile/{test_user.username}")
    assert public.status_code == status.HTTP_200_OK
    assert public.json()["data"]["gender"] == "女"
    assert "password_hash" not in public.json()["data"]


def test_profile_validation_errors_are_400(client, test_user, auth_token) -> None:
    response = client.put(
        "/api/auth/profile",
        json={"disease_history": [{"disease": "x", "onset_date": "2022/05"}]},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "发病时间格式应为 YYYY-MM"
    assert body["errors"]


def test_profile_unknown_community_is_400(client, test_user, auth_token) -> None:
    response = client.put(
        "/api/auth/profile",
        json={"disease_history": [{"community_id": 999, "disease": "x"}]},
        headers=auth_token,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == "疾病史中的社区不存在"


def test_public_profile_missing_user(client) -> None:
    response = client.get("/api/auth/profile/nobody")
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"] == "用户不存在"


def test_signup_race_on_username_is_400(client, test_user, monkeypatch) -> None:
    """A unique-constraint hit at commit reads as a taken username."""
    monkeypatch.setattr(auth_endpoints, "_username_taken", lambda db, username: False)

    response = client.post(
        "/api/auth/signup", json={"username": test_user.username, "password": STRONG_PASSWORD}
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"success": False, "error": "用户名已被使用"}
