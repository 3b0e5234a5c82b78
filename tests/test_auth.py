import time
from datetime import datetime, timedelta, timezone

from storefront.data.models import PasswordResetModel, UserModel
from storefront.services import notification_service
from storefront.utils.security import create_access_token, verify_password

from conftest import PASSWORD


def test_health(client):
    assert client.get("/").json() == {"success": True, "message": "Backend is running well"}


def test_register_and_login(client):
    resp = client.post(
        "/auth/register",
        json={"fullName": "Siti Aminah", "email": "Siti@Mail.com", "password": "Kopi#2024"},
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["data"]["email"] == "siti@mail.com"
    assert resp.json()["data"]["role"] == "customer"

    resp = client.post("/auth/login", json={"email": "siti@mail.com", "password": "Kopi#2024"})
    assert resp.status_code == 200
    token = resp.json()["data"]["token"]

    profile = client.get("/profiles", headers={"Authorization": f"Bearer {token}"}).json()["data"]
    assert profile["fullName"] == "Siti Aminah"


def test_register_duplicate_email(client, make_user):
    make_user(email="taken@mail.com")

    resp = client.post(
        "/auth/register",
        json={"fullName": "Other", "email": "TAKEN@mail.com", "password": "Kopi#2024"},
    )

    assert resp.status_code == 409


def test_register_weak_password(client):
    resp = client.post("/auth/register", json={"fullName": "Weak", "email": "weak@mail.com", "password": "password"})

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert "Password must contain" in resp.json()["message"]


def test_login_wrong_password(client, make_user):
    make_user(email="budi@mail.com")

    resp = client.post("/auth/login", json={"email": "budi@mail.com", "password": "Wrong#123"})

    assert resp.status_code == 401
    assert resp.json() == {"success": False, "message": "Wrong email or password"}


def test_login_existing_user(client, make_user):
    make_user(email="budi@mail.com")

    resp = client.post("/auth/login", json={"email": "budi@mail.com", "password": PASSWORD})

    assert resp.status_code == 200


def test_missing_header(client):
    resp = client.get("/profiles")

    assert resp.status_code == 401
    assert resp.json()["success"] is False


def test_malformed_token(client):
    resp = client.get("/profiles", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_expired_token(client, make_user):
    token = create_access_token(make_user(), "customer", expires_delta=timedelta(seconds=-10))

    resp = client.get("/profiles", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401
    assert resp.json()["message"].startswith("Failed to verify token")


def test_logout_blacklists_token(client, make_user, fake_redis):
    token = create_access_token(make_user(), "customer", expires_delta=timedelta(minutes=5))
    headers = {"Authorization": f"Bearer {token}"}
    assert client.get("/profiles", headers=headers).status_code == 200

    resp = client.post("/auth/logout", headers=headers)

    assert resp.status_code == 200
    # key lives exactly as long as the token
    ttl = fake_redis.ttl(f"blacklist:{token}")
    assert 295 <= ttl <= 300

    resp = client.get("/profiles", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token has been revoked, please login again"


def test_logout_other_tokens_still_work(client, make_user):
    user_id = make_user()
    revoked = create_access_token(user_id, "customer")
    other = create_access_token(user_id, "customer", expires_delta=timedelta(minutes=5))

    client.post("/auth/logout", headers={"Authorization": f"Bearer {revoked}"})

    assert client.get("/profiles", headers={"Authorization": f"Bearer {other}"}).status_code == 200


def test_logout_expired_token(client, make_user):
    token = create_access_token(make_user(), "customer", expires_delta=timedelta(seconds=-10))

    resp = client.post("/auth/logout", headers={"Authorization": f"Bearer {token}"})

    assert resp.status_code == 401


def test_logout_without_token(client):
    assert client.post("/auth/logout").status_code == 401


def test_profile_update(client, make_user, auth_header):
    make_user(email="taken@mail.com")
    headers = auth_header(make_user(email="me@mail.com"))

    resp = client.patch("/profiles", json={"fullName": "New Name", "address": "Jl. Baru"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["data"]["fullName"] == "New Name"
    assert resp.json()["data"]["address"] == "Jl. Baru"

    resp = client.patch("/profiles", json={"email": "taken@mail.com"}, headers=headers)
    assert resp.status_code == 409


def test_blacklist_entry_expires_with_token(client, make_user, fake_redis):
    token = create_access_token(make_user(), "customer", expires_delta=timedelta(seconds=3))
    headers = {"Authorization": f"Bearer {token}"}

    assert client.post("/auth/logout", headers=headers).status_code == 200
    assert fake_redis.exists(f"blacklist:{token}")

    time.sleep(3.5)

    assert not fake_redis.exists(f"blacklist:{token}")
    resp = client.get("/profiles", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["message"].startswith("Failed to verify token")


def test_logout_twice_rejected(client, make_user):
    headers = {"Authorization": f"Bearer {create_access_token(make_user(), 'customer')}"}

    assert client.post("/auth/logout", headers=headers).status_code == 200

    resp = client.post("/auth/logout", headers=headers)
    assert resp.status_code == 401
    assert resp.json()["message"] == "Token has been revoked, please login again"


# =====================================================
# PASSWORD RESET
# =====================================================
NEW_PASSWORD = "Fresh#2025"


def reset_tokens(database, user_id):
    with database.session() as s:
        return [r.token_reset for r in s.query(PasswordResetModel).filter_by(user_id=user_id).all()]


def test_forgot_password_unknown_email(client):
    resp = client.post("/auth/forgot-password", json={"email": "nobody@mail.com"})

    assert resp.status_code == 404
    assert resp.json()["message"] == "Email not found"


def test_forgot_password_emails_token(client, make_user, database, monkeypatch):
    sent = []
    monkeypatch.setattr(
        notification_service.send_password_reset_email_task,
        "delay",
        lambda email, token: sent.append((email, token)),
    )
    user_id = make_user(email="lupa@mail.com")

    resp = client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})

    assert resp.status_code == 200
    assert resp.json()["data"] == {"email": "lupa@mail.com"}
    tokens = reset_tokens(database, user_id)
    assert len(tokens) == 1
    assert len(tokens[0]) == 12
    assert sent == [("lupa@mail.com", tokens[0])]

    with database.session() as s:
        expired_at = s.query(PasswordResetModel).filter_by(user_id=user_id).one().expired_at
    expired_at = expired_at.replace(tzinfo=expired_at.tzinfo or timezone.utc)
    remaining = expired_at - datetime.now(timezone.utc)
    assert timedelta(minutes=59) < remaining <= timedelta(hours=1)


def test_forgot_password_replaces_old_token(client, make_user, database):
    user_id = make_user(email="lupa@mail.com")

    client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})
    first = reset_tokens(database, user_id)
    client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})
    second = reset_tokens(database, user_id)

    assert len(second) == 1
    assert second != first


def test_forgot_password_enqueue_failure(client, make_user, monkeypatch):
    def broken_delay(*args, **kwargs):
        raise ConnectionError("broker down")

    monkeypatch.setattr(notification_service.send_password_reset_email_task, "delay", broken_delay)
    make_user(email="lupa@mail.com")

    resp = client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})

    assert resp.status_code == 500
    assert resp.json()["message"] == "Failed to send token via email"


def test_reset_password_wrong_token(client, make_user, database):
    user_id = make_user(email="lupa@mail.com")
    client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})

    resp = client.post(
        "/auth/reset-password",
        json={"email": "lupa@mail.com", "token": "WRONGTOKEN12", "newPassword": NEW_PASSWORD},
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "Invalid token"
    assert len(reset_tokens(database, user_id)) == 1


def test_reset_password_token_of_other_user(client, make_user, database):
    owner = make_user(email="lupa@mail.com")
    make_user(email="other@mail.com")
    client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})
    token = reset_tokens(database, owner)[0]

    resp = client.post(
        "/auth/reset-password",
        json={"email": "other@mail.com", "token": token, "newPassword": NEW_PASSWORD},
    )

    assert resp.status_code == 404


def test_reset_password_expired_token(client, make_user, database):
    user_id = make_user(email="lupa@mail.com")
    client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})
    token = reset_tokens(database, user_id)[0]
    with database.session() as s:
        s.query(PasswordResetModel).filter_by(user_id=user_id).update(
            {"expired_at": datetime.now(timezone.utc) - timedelta(minutes=1)}
        )
        s.commit()

    resp = client.post(
        "/auth/reset-password",
        json={"email": "lupa@mail.com", "token": token, "newPassword": NEW_PASSWORD},
    )

    assert resp.status_code == 404
    assert resp.json()["message"] == "Token has expired"
    assert reset_tokens(database, user_id) == []


def test_reset_password_weak_password(client, make_user, database):
    user_id = make_user(email="lupa@mail.com")
    client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})

    resp = client.post(
        "/auth/reset-password",
        json={"email": "lupa@mail.com", "token": reset_tokens(database, user_id)[0], "newPassword": "short"},
    )

    assert resp.status_code == 400


def test_reset_password_success(client, make_user, database, fake_redis):
    user_id = make_user(email="lupa@mail.com")
    session_token = create_access_token(user_id, "customer")
    client.post("/auth/forgot-password", json={"email": "lupa@mail.com"})
    token = reset_tokens(database, user_id)[0]

    resp = client.post(
        "/auth/reset-password",
        json={"email": "lupa@mail.com", "token": token, "newPassword": NEW_PASSWORD},
        headers={"Authorization": f"Bearer {session_token}"},
    )

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Password has been reset successfully"}
    assert reset_tokens(database, user_id) == []
    with database.session() as s:
        assert verify_password(NEW_PASSWORD, s.get(UserModel, user_id).password)
    assert fake_redis.exists(f"blacklist:{session_token}")

    assert client.post("/auth/login", json={"email": "lupa@mail.com", "password": NEW_PASSWORD}).status_code == 200
    assert client.post("/auth/login", json={"email": "lupa@mail.com", "password": PASSWORD}).status_code == 401

    # a used token cannot be replayed
    resp = client.post(
        "/auth/reset-password",
        json={"email": "lupa@mail.com", "token": token, "newPassword": "Other#2025"},
    )
    assert resp.status_code == 404
