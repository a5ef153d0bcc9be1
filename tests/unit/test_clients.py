"""
Megaplan Client Unit Tests
"""

import io
from typing import List
from unittest.mock import MagicMock

import pytest
import requests

from megaplan_api import LegacyClient, MegaplanClient
from megaplan_api.client import CredentialExchange, HttpClient, hash_password
from megaplan_api.config import ClientConfig
from megaplan_api.exceptions import ApiError, AuthError, ConfigError, ValidationError


def ok_envelope(data) -> dict:
    return {"data": data, "meta": {"status": 200, "errors": [], "pagination": []}}


def legacy_ok(data) -> dict:
    return {"status": {"code": "ok", "message": None}, "data": data}


def sent_requests(session_send: MagicMock) -> List[requests.PreparedRequest]:
    return [call.args[0] for call in session_send.call_args_list]


class TestMegaplanClient:
    """Tests for the bearer token client"""

    @pytest.fixture
    def client(self, bearer_config: ClientConfig) -> MegaplanClient:
        client = MegaplanClient(bearer_config)
        yield client
        client.close()

    def test_requires_token(self):
        """Should refuse to build without a token"""
        with pytest.raises(ConfigError) as exc_info:
            MegaplanClient(ClientConfig(domain="example.megaplan.ru"))
        assert exc_info.value.code == "CONFIG_CREDENTIALS"

    def test_from_config_wrong_scheme(self, legacy_config: ClientConfig):
        """Should reject a legacy configuration"""
        with pytest.raises(ConfigError) as exc_info:
            MegaplanClient.from_config(legacy_config)
        assert exc_info.value.code == "CONFIG_SCHEME"

    def test_get(self, client: MegaplanClient, json_response):
        """Should send a bearer GET and decode the envelope"""
        client.http.session.send = MagicMock(return_value=json_response(ok_envelope([{"id": "1"}])))

        envelope = client.get("/api/v3/task", {"limit": 10})

        prepared = sent_requests(client.http.session.send)[0]
        assert prepared.url == "https://example.megaplan.ru/api/v3/task?%7B%22limit%22%3A10%7D"
        assert prepared.headers["Authorization"] == "Bearer test-token"
        assert envelope.data == [{"id": "1"}]

    def test_post_json(self, client: MegaplanClient, json_response):
        """Should send mapping bodies as JSON"""
        client.http.session.send = MagicMock(return_value=json_response(ok_envelope({"id": "7"})))

        client.post("/api/v3/task", {"name": "Report"})

        prepared = sent_requests(client.http.session.send)[0]
        assert prepared.method == "POST"
        assert prepared.body == b'{"name":"Report"}'
        assert prepared.headers["Content-Type"] == "application/json"

    def test_put_patch_delete(self, client: MegaplanClient, json_response):
        """Should use the matching HTTP method"""
        client.http.session.send = MagicMock(side_effect=[
            json_response(ok_envelope(None)) for _ in range(3)
        ])

        client.put("/api/v3/task/1", {"name": "a"})
        client.patch("/api/v3/task/1", {"name": "b"})
        client.delete("/api/v3/task/1")

        methods = [p.method for p in sent_requests(client.http.session.send)]
        assert methods == ["PUT", "PATCH", "DELETE"]

    def test_set_token(self, client: MegaplanClient, json_response):
        """Should use the new token for later requests"""
        client.http.session.send = MagicMock(side_effect=[
            json_response(ok_envelope(None)),
            json_response(ok_envelope(None)),
        ])

        client.get("/api/v3/currentUser")
        client.set_token("rotated")
        client.get("/api/v3/currentUser")

        first, second = sent_requests(client.http.session.send)
        assert first.headers["Authorization"] == "Bearer test-token"
        assert second.headers["Authorization"] == "Bearer rotated"

    def test_set_empty_token(self, client: MegaplanClient):
        """Should reject an empty replacement token"""
        with pytest.raises(ValidationError):
            client.set_token("")

    def test_field_errors_raised(self, client: MegaplanClient, json_response):
        """Should raise ApiError for meta.errors"""
        client.http.session.send = MagicMock(return_value=json_response({
            "data": None,
            "meta": {"status": 400, "errors": [{"field": "name", "message": "required"}]},
        }, status=400))

        with pytest.raises(ApiError) as exc_info:
            client.post("/api/v3/task", {})

        assert str(exc_info.value) == "FIELD: name MESSAGE: required"

    def test_x_user_id_header(self, json_response):
        """Should act on behalf of the configured user"""
        config = ClientConfig(domain="example.megaplan.ru", token="t", x_user_id=1000005)
        with MegaplanClient(config) as client:
            client.http.session.send = MagicMock(return_value=json_response(ok_envelope(None)))
            client.get("/api/v3/task")
            prepared = sent_requests(client.http.session.send)[0]

        assert prepared.headers["X-User-Id"] == "1000005"

    def test_upload_file(self, client: MegaplanClient, json_response):
        """Should upload multipart files[] with the bearer token"""
        client.http.session.send = MagicMock(return_value=json_response(ok_envelope({
            "contentType": "File", "id": "42",
        })))

        envelope = client.upload_file("report.txt", io.BytesIO(b"hello"))

        prepared = sent_requests(client.http.session.send)[0]
        assert prepared.url == "https://example.megaplan.ru/api/file"
        assert prepared.headers["Authorization"] == "Bearer test-token"
        assert prepared.headers["Content-Type"].startswith("multipart/form-data")
        assert b'name="files[]"; filename="report.txt"' in prepared.body
        assert envelope.data["id"] == "42"

    def test_upload_file_injected_session(self, json_response):
        """Should send configured headers on uploads over a caller-supplied session"""
        config = ClientConfig(domain="example.megaplan.ru", token="t", user_agent="UA/1", x_user_id=7)
        session = requests.Session()
        session.send = MagicMock(return_value=json_response(ok_envelope({"id": "1"})))

        with MegaplanClient(config, http_client=HttpClient(config, session=session)) as client:
            client.upload_file("a.txt", io.BytesIO(b"x"))

        prepared = sent_requests(session.send)[0]
        assert prepared.headers["User-Agent"] == "UA/1"
        assert prepared.headers["X-User-Id"] == "7"
        assert prepared.headers["Authorization"] == "Bearer t"


class TestLegacyClient:
    """Tests for the signed legacy client"""

    @pytest.fixture
    def client(self, legacy_config: ClientConfig) -> LegacyClient:
        client = LegacyClient(legacy_config)
        yield client
        client.close()

    def test_requires_credentials(self):
        """Should refuse to build without credentials"""
        config = ClientConfig(domain="example.megaplan.ru", auth_scheme="legacy")
        with pytest.raises(ConfigError):
            LegacyClient(config)

    def test_signed_get(self, client: LegacyClient, json_response):
        """Should sign GET requests with params in the query"""
        client.http.session.send = MagicMock(return_value=json_response(legacy_ok({"tasks": []})))

        result = client.call("GET", "/BumsTaskApiV01/Task/list.api", {"Limit": 10, "Folder": "owner"})

        prepared = sent_requests(client.http.session.send)[0]
        assert prepared.url == "https://example.megaplan.ru/BumsTaskApiV01/Task/list.api?Folder=owner&Limit=10"
        assert prepared.headers["X-Authorization"].startswith("access-id:")
        assert prepared.headers["Date"]
        assert prepared.headers["Accept-Encoding"] == "gzip, deflate, br"
        assert result.ok is True

    def test_signed_post(self, client: LegacyClient, json_response):
        """Should send form params in the body"""
        client.http.session.send = MagicMock(return_value=json_response(legacy_ok({})))

        response = client.post("/BumsTaskApiV01/Task/create.api", {"Model[Name]": "Report"})

        prepared = sent_requests(client.http.session.send)[0]
        assert prepared.url == "https://example.megaplan.ru/BumsTaskApiV01/Task/create.api"
        assert prepared.body == "Model%5BName%5D=Report"
        assert prepared.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert response.status_code == 200

    def test_verify_user_sign(self, client: LegacyClient, json_response):
        """Should sign the check with the application credentials"""
        client.http.session.send = MagicMock(return_value=json_response(legacy_ok({"id": 1000005})))

        data = client.verify_user_sign("signed-user")

        prepared = sent_requests(client.http.session.send)[0]
        assert prepared.url.endswith("/BumsSettingsApiV01/Application/checkUserSign.json")
        assert prepared.headers["X-Authorization"].startswith("app-uuid:")
        assert prepared.body == "userSign=signed-user&uuid=app-uuid"
        assert data == {"id": 1000005}

    def test_verify_user_sign_rejected(self, client: LegacyClient, json_response):
        """Should raise AuthError when the signature is rejected"""
        client.http.session.send = MagicMock(return_value=json_response({
            "status": {"code": "error", "message": "Wrong sign"},
        }))

        with pytest.raises(AuthError) as exc_info:
            client.verify_user_sign("forged")

        assert str(exc_info.value) == "Invalid user data"
        assert exc_info.value.server_message == "Wrong sign"

    def test_verify_user_sign_needs_app(self, json_response):
        """Should require the application credentials"""
        config = ClientConfig(
            domain="example.megaplan.ru", auth_scheme="legacy", access_id="a", secret_key="b",
        )
        with LegacyClient(config) as client:
            with pytest.raises(ConfigError):
                client.verify_user_sign("x")


class TestCredentialExchange:
    """Tests for the login flow"""

    @pytest.fixture
    def http(self) -> HttpClient:
        http = HttpClient(ClientConfig(domain="example.megaplan.ru", auth_scheme="legacy"))
        yield http
        http.close()

    def test_hash_password(self):
        """Should hash passwords with MD5"""
        assert hash_password("hunter2") == "2ab96390c7dbe3439de74d0c9b0b1767"

    def test_obtain(self, http: HttpClient, json_response):
        """Should exchange login and password for credentials"""
        http.session.send = MagicMock(side_effect=[
            json_response(legacy_ok({"OneTimeKey": "otk"})),
            json_response(legacy_ok({"UserId": 1, "EmployeeId": 1000005, "AccessId": "acc", "SecretKey": "sec"})),
        ])

        credentials = CredentialExchange(http).obtain("user", "hunter2")

        assert credentials.access_id == "acc"
        assert credentials.secret_key == b"sec"

        key_request, auth_request = sent_requests(http.session.send)
        assert key_request.url.endswith("/BumsCommonApiV01/User/createOneTimeKeyAuth.api")
        assert key_request.body == "Login=user&Password=2ab96390c7dbe3439de74d0c9b0b1767"
        assert auth_request.url.endswith("/BumsCommonApiV01/User/authorize.api")
        assert "OneTimeKey=otk" in auth_request.body
        assert key_request.headers["Content-Type"] == "application/x-www-form-urlencoded"

    def test_bad_password(self, http: HttpClient, json_response):
        """Should report the server message when no key is issued"""
        http.session.send = MagicMock(return_value=json_response({
            "status": {"code": "error", "message": "Wrong login"},
        }))

        with pytest.raises(AuthError) as exc_info:
            CredentialExchange(http).obtain("user", "wrong")

        assert str(exc_info.value) == "Invalid login or password (Wrong login)"
        assert exc_info.value.code == "AUTH01"

    def test_no_secret(self, http: HttpClient, json_response):
        """Should fail when authorize returns no secret"""
        http.session.send = MagicMock(side_effect=[
            json_response(legacy_ok({"OneTimeKey": "otk"})),
            json_response({"status": {"code": "error", "message": "Blocked"}}),
        ])

        with pytest.raises(AuthError) as exc_info:
            CredentialExchange(http).obtain("user", "hunter2")

        assert exc_info.value.code == "AUTH02"
        assert "access token not received (Blocked)" in str(exc_info.value)

    def test_login_builds_client(self, monkeypatch, json_response):
        """Should return a signed client after logging in"""
        send = MagicMock(side_effect=[
            json_response(legacy_ok({"OneTimeKey": "otk"})),
            json_response(legacy_ok({"AccessId": "acc", "SecretKey": "sec"})),
            json_response(legacy_ok({"id": 1})),
        ])
        monkeypatch.setattr(requests.Session, "send", lambda self, request, **kwargs: send(request, **kwargs))

        config = ClientConfig(domain="example.megaplan.ru", auth_scheme="legacy")
        with LegacyClient.login(config, "user", "hunter2") as client:
            result = client.call("GET", "/BumsCommonApiV01/User/id.api")

        assert result.data == {"id": 1}
        last = send.call_args_list[-1].args[0]
        assert last.headers["X-Authorization"].startswith("acc:")
