# =============================================================================
# /auth endpoints
# =============================================================================

from app.models.user import User


def signup(client, email="ada@example.com", password="secret123", name="Ada"):
    return client.post("/auth/signup", json={"email": email, "password": password, "name": name})


class TestSignupAndLogin:
    def test_signup_returns_token(self, client):
        response = signup(client)

        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"]["last_difficulty"] == "easy"

    def test_duplicate_email(self, client):
        signup(client)
        assert signup(client).status_code == 409

    def test_short_password(self, client):
        assert signup(client, password="123").status_code == 400

    def test_login(self, client):
        signup(client)

        ok = client.post("/auth/login", json={"email": "ada@example.com", "password": "secret123"})
        bad = client.post("/auth/login", json={"email": "ada@example.com", "password": "wrong-one"})

        assert ok.status_code == 200
        assert ok.json()["user"]["name"] == "Ada"
        assert bad.status_code == 400

    def test_token_opens_profile(self, client):
        token = signup(client).json()["token"]
        response = client.get("/users/profile", headers={"Authorization": f"Bearer {token}"})
        assert response.json()["user"]["email"] == "ada@example.com"


class TestPasswordReset:
    def test_reset_flow(self, client, fake_email_service, session_factory):
        signup(client)

        response = client.post("/auth/forgot-password", json={"email": "ada@example.com"})
        assert response.status_code == 200

        email, link = fake_email_service.sent[0]
        assert email == "ada@example.com"
        token = link.split("resetToken=", 1)[1]

        reset = client.post("/auth/reset-password", json={"token": token, "new_password": "newsecret"})
        assert reset.status_code == 200

        login = client.post("/auth/login", json={"email": "ada@example.com", "password": "newsecret"})
        assert login.status_code == 200

        session = session_factory()
        try:
            assert session.query(User).filter_by(email="ada@example.com").one().reset_token is None
        finally:
            session.close()

    def test_unknown_email(self, client):
        assert client.post("/auth/forgot-password", json={"email": "nobody@example.com"}).status_code == 404

    def test_invalid_token(self, client):
        response = client.post("/auth/reset-password", json={"token": "bogus", "new_password": "newsecret"})
        assert response.status_code == 400
