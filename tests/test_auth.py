from datetime import timedelta

from bson import ObjectId

from inventory_api.security import TokenService

from .conftest import USER


def test_missing_token(client, user):
    response = client.get("/v1/user/me")
    assert response.status_code == 402
    assert response.json() == {"success": False, "message": "Not Authorized"}


def test_bearer_header_is_not_the_auth_header(client, token):
    response = client.get("/v1/user/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 402
    assert response.json()["message"] == "Not Authorized"


def test_invalid_token(client, user):
    response = client.get("/v1/user/me", headers={"auth": "not-a-token"})
    assert response.status_code == 402
    assert response.json() == {"success": False, "message": "Not Authorized to view this page"}


def test_expired_token(client, user, settings):
    token = TokenService(settings.jwt_secret).issue(user["id"], expires_delta=timedelta(seconds=-10))
    response = client.get("/v1/user/me", headers={"auth": token})
    assert response.status_code == 402
    assert response.json()["message"] == "Not Authorized to view this page"


def test_token_for_deleted_user(client, auth, user, db):
    db["users"].delete_one({"_id": ObjectId(user["id"])})
    response = client.get("/v1/user/me", headers=auth)
    assert response.status_code == 402
    assert response.json() == {
        "success": False,
        "message": "Not authorized to access this route, wrong user",
    }


def test_token_with_malformed_user_id(client, user, settings):
    token = TokenService(settings.jwt_secret).issue("not-an-object-id")
    response = client.get("/v1/user/me", headers={"auth": token})
    assert response.status_code == 402
    assert response.json()["message"] == "Not authorized to access this route, wrong user"


def test_valid_token_resolves_user(client, auth, user):
    response = client.get("/v1/user/me", headers=auth)
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["id"] == user["id"]
    assert body["data"]["email"] == USER["email"]
    assert "passwordHash" not in body["data"]


def test_public_routes_need_no_token(client):
    assert client.post("/v1/user", json=USER).status_code == 200
    response = client.post("/v1/login", json={"email": USER["email"], "password": USER["password"]})
    assert response.status_code == 200


def test_every_protected_route_requires_a_token(client):
    product_id = str(ObjectId())
    routes = [
        ("GET", "/v1/products"),
        ("GET", f"/v1/product/{product_id}"),
        ("POST", "/v1/product"),
        ("PUT", f"/v1/product/update/{product_id}"),
        ("DELETE", f"/v1/product/delete/{product_id}"),
        ("GET", "/v1/stocks"),
        ("GET", f"/v1/product/stocks/{product_id}"),
        ("POST", "/v1/product/stock"),
        ("DELETE", "/v1/product/stock/delete/"),
        ("GET", "/v1/users"),
        ("GET", "/v1/user/me"),
        ("GET", f"/v1/user/{product_id}"),
        ("PUT", f"/v1/user/update/{product_id}"),
        ("PUT", "/v1/user/password"),
        ("DELETE", f"/v1/user/delete/{product_id}"),
    ]
    for method, url in routes:
        response = client.request(method, url, json={})
        assert response.status_code == 402, (method, url)
        assert response.json()["success"] is False
