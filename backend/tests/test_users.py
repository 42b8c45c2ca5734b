import jwt
from fastapi.testclient import TestClient

from easyticket.core.config import settings
from easyticket.main import app

client = TestClient(app)


def test_login_upsert(auth):
    headers = auth("New.Rider@example.com")
    r = client.post("/users", json={"name": "New Rider", "photoURL": "https://img.example.com/me.png"}, headers=headers)
    assert r.status_code == 200, r.text
    first = r.json()
    assert first["created"] is True
    assert first["email"] == "new.rider@example.com"
    assert first["role"] == "user"

    r = client.post("/users", json={"name": "Renamed"}, headers=headers)
    second = r.json()
    assert second["created"] is False
    assert second["id"] == first["id"]
    assert second["name"] == "New Rider"
    assert second["lastLoggedIn"] >= first["lastLoggedIn"]

    assert client.get("/users/role", headers=headers).json() == {"role": "user"}


def test_role_lookup_needs_known_user(auth):
    r = client.get("/users/role", headers=auth("stranger@example.com"))
    assert r.status_code == 401
    assert r.json()["detail"] == "Unknown user"


def test_tokens_are_verified():
    forged = jwt.encode({"email": "admin@example.com"}, "wrong-secret", algorithm=settings.algorithm)
    r = client.post("/users", json={}, headers={"Authorization": f"Bearer {forged}"})
    assert r.status_code == 401

    no_email = jwt.encode({"uid": "123"}, settings.secret_key, algorithm=settings.algorithm)
    r = client.post("/users", json={}, headers={"Authorization": f"Bearer {no_email}"})
    assert r.status_code == 401


def test_health():
    r = client.get("/health/")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
