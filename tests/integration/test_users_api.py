"""HTTP-level tests for the /users endpoints."""

from datetime import date
from unittest.mock import patch

import pytest
from loguru import logger

from src.user_service.api.http.routers.users import MAX_USER_ID
from src.user_service.entities.core.user import UserRepository
from src.user_service.runtime.config.config_data import AppConfig, ConfigData

USER_FIELDS = {
    "user_id",
    "username",
    "password",
    "first_name",
    "last_name",
    "phone",
    "email",
    "birthday",
    "is_active",
}


def _create(client, payload):
    response = client.post("/users", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreateUser:
    def test_create_returns_201_with_persisted_id(self, client, user_payload):
        response = client.post("/users", json=user_payload())

        assert response.status_code == 201
        body = response.json()
        assert set(body) == USER_FIELDS
        assert isinstance(body["user_id"], int)
        assert body["password"] != "s3cret-pass"
        assert body["is_active"] is False
        assert response.headers["X-Request-ID"]

    def test_birthday_round_trip(self, client, user_payload):
        body = _create(client, user_payload(birthday="2000-01-01"))

        assert body["birthday"] == "2000-01-01"
        fetched = client.get(f"/users/{body['user_id']}").json()
        assert date.fromisoformat(fetched["birthday"]) == date(2000, 1, 1)

    def test_birthday_optional(self, client, user_payload):
        payload = user_payload()
        del payload["birthday"]

        assert _create(client, payload)["birthday"] is None

    def test_missing_required_fields_is_422(self, client):
        response = client.post("/users", json={"first_name": "Only"})

        assert response.status_code == 422
        body = response.json()
        assert [e["field"] for e in body["errors"]] == [
            "username",
            "password",
            "phone",
            "email",
        ]
        assert "username" in body["detail"]

    def test_bad_email_is_422(self, client, user_payload):
        response = client.post("/users", json=user_payload(email="not-an-email"))

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "email"

    def test_bad_birthday_is_422(self, client, user_payload):
        response = client.post("/users", json=user_payload(birthday="01/01/2000"))

        assert response.status_code == 422
        assert response.json()["errors"][0]["field"] == "birthday"

    def test_malformed_body_is_400(self, client):
        response = client.post(
            "/users",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400

    def test_wrong_field_type_is_400(self, client, user_payload):
        response = client.post("/users", json=user_payload(username=["a", "b"]))

        assert response.status_code == 400

    def test_duplicate_username_fails(self, client, user_payload):
        _create(client, user_payload())

        response = client.post(
            "/users",
            json=user_payload(phone="+1-555-0199", email="other@example.com"),
        )

        assert response.status_code == 500
        assert response.json()["detail"]
        assert len(client.get("/users").json()) == 1

    def test_error_details_can_be_hidden(self, client, user_payload, monkeypatch):
        _create(client, user_payload())
        hidden = ConfigData(app=AppConfig(expose_error_details=False))
        monkeypatch.setattr("src.user_service.api.http.app.get_config", lambda: hidden)

        response = client.post(
            "/users",
            json=user_payload(phone="+1-555-0199", email="other@example.com"),
        )

        assert response.status_code == 500
        assert response.json()["detail"] == "Internal Server Error"


class TestReadUsers:
    def test_list_empty(self, client):
        response = client.get("/users")

        assert response.status_code == 200
        assert response.json() == []

    def test_list_users(self, client, user_payload):
        first = _create(client, user_payload())
        second = _create(
            client,
            user_payload(username="asmith", phone="555-0101", email="a@example.com"),
        )

        response = client.get("/users")

        assert response.status_code == 200
        assert response.json() == [first, second]

    def test_get_user(self, client, user_payload):
        created = _create(client, user_payload())

        response = client.get(f"/users/{created['user_id']}")

        assert response.status_code == 200
        assert response.json() == created

    def test_get_missing_user_is_204_empty(self, client):
        response = client.get("/users/12345")

        assert response.status_code == 204
        assert response.content == b""

    def test_non_integer_id_is_400(self, client):
        assert client.get("/users/abc").status_code == 400

    @pytest.mark.parametrize("method", ["get", "patch", "delete"])
    def test_id_outside_64_bit_range_is_400(self, client, method):
        kwargs = {"json": {"first_name": "X"}} if method == "patch" else {}

        response = getattr(client, method)(f"/users/{2**64}", **kwargs)

        assert response.status_code == 400
        assert response.json()["detail"] == "Malformed request"

    def test_largest_64_bit_id_is_just_missing(self, client):
        response = client.get(f"/users/{MAX_USER_ID}")

        assert response.status_code == 204


class TestUpdateUser:
    def test_patch_email_changes_only_email(self, client, user_payload):
        created = _create(client, user_payload())

        response = client.patch(
            f"/users/{created['user_id']}", json={"email": "new@example.com"}
        )

        assert response.status_code == 200
        updated = response.json()
        assert updated["email"] == "new@example.com"
        assert {k: v for k, v in updated.items() if k != "email"} == {
            k: v for k, v in created.items() if k != "email"
        }

    def test_patch_empty_object_changes_nothing(self, client, user_payload):
        created = _create(client, user_payload())

        response = client.patch(f"/users/{created['user_id']}", json={})

        assert response.status_code == 200
        assert response.json() == created
        assert client.get(f"/users/{created['user_id']}").json() == created

    def test_patch_empty_strings_ignored(self, client, user_payload):
        created = _create(client, user_payload())

        response = client.patch(
            f"/users/{created['user_id']}",
            json={"first_name": "", "last_name": None, "phone": "555-0777"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["first_name"] == created["first_name"]
        assert body["last_name"] == created["last_name"]
        assert body["phone"] == "555-0777"

    def test_patch_password_rehashes(self, client, user_payload):
        created = _create(client, user_payload())

        body = client.patch(
            f"/users/{created['user_id']}", json={"password": "another-pass"}
        ).json()

        assert body["password"] not in (created["password"], "another-pass")

    def test_patch_birthday(self, client, user_payload):
        created = _create(client, user_payload())

        body = client.patch(
            f"/users/{created['user_id']}", json={"birthday": "1990-06-15"}
        ).json()

        assert body["birthday"] == "1990-06-15"

    def test_patch_invalid_email_is_422(self, client, user_payload):
        created = _create(client, user_payload())

        response = client.patch(f"/users/{created['user_id']}", json={"email": "x"})

        assert response.status_code == 422
        assert client.get(f"/users/{created['user_id']}").json() == created

    def test_patch_is_active_not_settable(self, client, user_payload):
        created = _create(client, user_payload())

        body = client.patch(
            f"/users/{created['user_id']}", json={"is_active": True, "user_id": 99}
        ).json()

        assert body["is_active"] is False
        assert body["user_id"] == created["user_id"]

    def test_patch_missing_user_is_204(self, client):
        response = client.patch("/users/404", json={"first_name": "Ghost"})

        assert response.status_code == 204
        assert response.content == b""


class TestDeleteUser:
    def test_delete_returns_snapshot_then_gone(self, client, user_payload):
        created = _create(client, user_payload())

        response = client.delete(f"/users/{created['user_id']}")

        assert response.status_code == 200
        assert response.json() == created

        after = client.get(f"/users/{created['user_id']}")
        assert after.status_code == 204
        assert after.content == b""

    def test_delete_missing_user_is_204(self, client):
        response = client.delete("/users/9")

        assert response.status_code == 204
        assert response.content == b""

    def test_deleted_unique_values_reusable(self, client, user_payload):
        created = _create(client, user_payload())
        client.delete(f"/users/{created['user_id']}")

        recreated = _create(client, user_payload())

        assert recreated["username"] == created["username"]

    def test_row_vanishing_before_delete_is_204(self, client, user_payload):
        created = _create(client, user_payload())

        with patch.object(UserRepository, "delete", return_value=False):
            response = client.delete(f"/users/{created['user_id']}")

        assert response.status_code == 204
        assert response.content == b""


class TestPasswordNeverLogged:
    PLAINTEXT = "Sup3rSecretPlain"

    @pytest.fixture
    def captured_logs(self, client):
        messages: list[str] = []
        # Most verbose settings, so locals would show up if anything raised
        handler_id = logger.add(
            messages.append, level="DEBUG", backtrace=True, diagnose=True
        )
        try:
            yield messages
        finally:
            logger.remove(handler_id)

    def test_error_paths_do_not_log_plaintext(
        self, client, user_payload, captured_logs
    ):
        created = _create(client, user_payload(password=self.PLAINTEXT))
        update = {"password": self.PLAINTEXT}

        responses = [
            client.patch(f"/users/{2**64}", json=update),
            client.patch("/users/404", json=update),
            client.patch(
                f"/users/{created['user_id']}",
                json={**update, "birthday": "2000-02-30"},
            ),
            client.post(
                "/users", json=user_payload(password=self.PLAINTEXT, email="nope")
            ),
            client.post("/users", json=user_payload(password=self.PLAINTEXT)),
        ]

        assert [r.status_code for r in responses] == [400, 204, 422, 422, 500]
        assert captured_logs
        assert not any(self.PLAINTEXT in message for message in captured_logs)
        assert not any(self.PLAINTEXT in r.text for r in responses)
