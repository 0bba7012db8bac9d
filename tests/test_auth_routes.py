"""Registration, login and access control gate tests."""

import time

from jose import jwt

from models.user import ParticipantModel, TutorModel, UserModel
from schemas.user import Role
from conftest import API, auth_header, build_client, register


def test_register_tutor_returns_token_and_linked_id(client):
    response = client.post(
        f"{API}/register",
        json={"name": "A", "email": "a@x.com", "password": "p", "role": "tutor"},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["status_code"] == 201
    assert body["status"] == "success"
    data = body["data"]
    assert data["token"]
    assert data["expires_at"]
    assert data["user"]["role"] == "tutor"
    assert data["user"]["tutor_id"] is not None
    assert data["user"]["participant_id"] is None
    assert "password" not in data["user"]
    assert "password_hash" not in data["user"]


def test_register_participant_links_participant_record(client, db_session):
    data = register(client, "p@x.com", "participant")

    assert data["user"]["participant_id"] is not None
    assert data["user"]["tutor_id"] is None
    assert db_session.query(ParticipantModel).count() == 1
    assert db_session.query(TutorModel).count() == 0


def test_register_then_login_token_carries_role(client):
    register(client, "a@x.com", "tutor", password="pw-123")

    response = client.post(f"{API}/login", json={"email": "a@x.com", "password": "pw-123"})

    assert response.status_code == 200
    token = response.json()["data"]["token"]
    claims = client.app.state.token_service.verify(token)
    assert claims.role == Role.TUTOR


def test_registered_tutor_sees_only_tutor_features(client, admin):
    client.post(
        f"{API}/features",
        json={"name": "Tutor Tools", "roles": "admin,tutor"},
        headers=admin["headers"],
    )
    client.post(
        f"{API}/features",
        json={"name": "Participant Area", "roles": "participant"},
        headers=admin["headers"],
    )
    reg = client.post(
        f"{API}/register",
        json={"name": "A", "email": "a@x.com", "password": "p", "role": "tutor"},
    )
    assert reg.status_code == 201

    response = client.get(f"{API}/features", headers=auth_header(reg.json()["data"]["token"]))

    assert response.status_code == 200
    names = [f["name"] for f in response.json()["data"]]
    assert names == ["Tutor Tools"]


def test_duplicate_email_rejected_without_second_row(client, db_session):
    register(client, "dup@x.com", "tutor")

    response = client.post(
        f"{API}/register",
        json={"name": "B", "email": "dup@x.com", "password": "p", "role": "participant"},
    )

    assert response.status_code == 400
    assert response.json()["status"] == "error"
    assert response.json()["message"] == "email already registered"
    assert db_session.query(UserModel).filter(UserModel.email == "dup@x.com").count() == 1
    assert db_session.query(ParticipantModel).count() == 0


def test_register_requires_all_fields(client):
    response = client.post(f"{API}/register", json={"email": "x@x.com", "password": "p"})

    assert response.status_code == 400


def test_register_rejects_unknown_role(client):
    response = client.post(
        f"{API}/register",
        json={"name": "A", "email": "a@x.com", "password": "p", "role": "superuser"},
    )

    assert response.status_code == 400


def test_login_failures_share_one_message(client):
    register(client, "a@x.com", "tutor", password="right")

    wrong_password = client.post(f"{API}/login", json={"email": "a@x.com", "password": "nope"})
    unknown_email = client.post(f"{API}/login", json={"email": "b@x.com", "password": "right"})

    assert wrong_password.status_code == 401
    assert unknown_email.status_code == 401
    assert wrong_password.json()["message"] == unknown_email.json()["message"]
    assert wrong_password.json()["message"] == "invalid email or password"


def test_login_rejects_inactive_account(client, db_session):
    register(client, "a@x.com", "tutor", password="right")
    user = db_session.query(UserModel).filter(UserModel.email == "a@x.com").one()
    user.is_active = False
    db_session.commit()

    response = client.post(f"{API}/login", json={"email": "a@x.com", "password": "right"})

    assert response.status_code == 401
    assert response.json()["message"] == "invalid email or password"


def test_gate_rejects_missing_token(client):
    response = client.get(f"{API}/features")

    assert response.status_code == 401
    assert response.json() == {
        "status_code": 401,
        "status": "error",
        "message": "unauthorized: missing or invalid token",
    }


def test_gate_rejects_non_bearer_scheme(client):
    response = client.get(f"{API}/features", headers={"Authorization": "Basic abc"})

    assert response.status_code == 401


def test_gate_rejects_invalid_token(client):
    response = client.get(f"{API}/features", headers=auth_header("garbage"))

    assert response.status_code == 401
    assert response.json()["message"] == "unauthorized: invalid or expired token"


def test_gate_rejects_token_signed_with_other_secret(client, admin):
    forged = jwt.encode(
        {"user_id": admin["user"]["id"], "role": "admin", "exp": int(time.time()) + 600},
        "not-the-secret",
        algorithm="HS256",
    )

    response = client.get(f"{API}/features", headers=auth_header(forged))

    assert response.status_code == 401


def test_gate_rejects_expired_token(client, settings):
    expired = jwt.encode(
        {"user_id": 1, "role": "admin", "exp": int(time.time()) - 10},
        settings.jwt_secret,
        algorithm="HS256",
    )

    response = client.get(f"{API}/features", headers=auth_header(expired))

    assert response.status_code == 401
    assert response.json()["message"] == "token expired"


def test_me_returns_public_projection(client, tutor):
    response = client.get(f"{API}/me", headers=tutor["headers"])

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["email"] == "tutor@x.com"
    assert data["tutor_id"] == tutor["user"]["tutor_id"]
    assert "password_hash" not in data


def test_admin_registration_gated_when_token_configured(settings, SessionTest):
    gated = settings.__class__(**{**settings.__dict__, "admin_registration_token": "s3cret"})
    client = build_client(gated, SessionTest)
    payload = {"name": "Root", "email": "root@x.com", "password": "p", "role": "admin"}

    denied = client.post(f"{API}/register", json=payload)
    allowed = client.post(f"{API}/register", json={**payload, "admin_token": "s3cret"})

    assert denied.status_code == 403
    assert allowed.status_code == 201
    assert allowed.json()["data"]["user"]["role"] == "admin"


def test_health_is_public(client):
    assert client.get("/api/health").json() == {"status": "ok"}
