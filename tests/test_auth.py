from src.jangatub.core.security import decode_session_token
from src.jangatub.models import User
from tests.utils import auth_headers, session


def register(client, email="fatou@example.com", password="secret123", name="Fatou"):
    return client.post("/api/auth/register", json={"name": name, "email": email, "password": password})


def test_register_and_login(client):
    response = register(client, email="Fatou@Example.com")
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["email"] == "fatou@example.com"
    assert body["user"]["name"] == "Fatou"

    response = client.post("/api/auth/login", data={"username": "fatou@example.com", "password": "secret123"})
    assert response.status_code == 200
    token = response.json()["access_token"]
    assert "jangatub_session" in response.cookies

    session = decode_session_token(token)
    assert session.user_id == body["user"]["id"]
    assert session.is_premium is False


def test_register_duplicate_email(client):
    assert register(client).status_code == 201
    response = register(client, email="FATOU@example.com")
    assert response.status_code == 409
    assert "error" in response.json()


def test_register_validation(client):
    response = register(client, password="123")
    assert response.status_code == 400
    assert "error" in response.json()


def test_login_with_wrong_password(client):
    register(client)
    response = client.post("/api/auth/login", data={"username": "fatou@example.com", "password": "wrong-pass"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


def test_me_returns_entitlement(client, student):
    response = client.get("/api/users/me", headers=auth_headers(student))
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "student@example.com"
    assert body["role"] == "USER"
    assert body["entitlement"] == {"isPremium": False, "plan": None, "endAt": None}


def test_me_for_deleted_account(client, student):
    headers = auth_headers(student)
    with session() as db:
        db.delete(db.get(User, student.id))
        db.commit()
    assert client.get("/api/users/me", headers=headers).status_code == 401


def test_logout_clears_cookie(client):
    response = client.post("/api/auth/logout")
    assert response.status_code == 204
