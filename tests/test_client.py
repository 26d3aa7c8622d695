import json

import httpx
import pytest

from hcptf.client import PublicRegistryClient, TFEClient
from hcptf.config import Config
from hcptf.errors import (
    ApiError,
    AuthenticationError,
    ConfigError,
    NetworkError,
    ResourceNotFoundError,
)
from hcptf.settings import Settings


def make_client(api, token="tok"):
    return TFEClient("https://app.terraform.io", token, transport=api.transport)


def test_requests_are_rooted_at_api_v2_with_auth(api):
    api.add("GET", "/api/v2/organizations/acme", {"data": {"id": "acme"}})
    client = make_client(api)
    assert client.get("/organizations/acme") == {"data": {"id": "acme"}}
    request = api.last()
    assert request.headers["Authorization"] == "Bearer tok"
    assert request.headers["Content-Type"] == "application/vnd.api+json"
    assert request.headers["User-Agent"].startswith("hcptf/")


def test_api_v2_prefix_is_accepted(api):
    api.add("GET", "/api/v2/account/details", {"data": {}})
    make_client(api).get("/api/v2/account/details")
    assert api.last().url.path == "/api/v2/account/details"


def test_empty_token_sends_no_authorization(api):
    api.add("POST", "/api/v2/account/create", {"data": {}}, status=201)
    make_client(api, token="").post("/account/create", json={"data": {}})
    assert "Authorization" not in api.last().headers


def test_post_sends_json_body_and_params(api):
    api.add("POST", "/api/v2/workspaces/ws-1/actions/lock", {"data": {}})
    make_client(api).post("/workspaces/ws-1/actions/lock", json={"reason": "x"}, params={"a": "b"})
    assert api.last_json() == {"reason": "x"}
    assert api.last().url.params["a"] == "b"


def test_no_content_returns_none(api):
    api.add("DELETE", "/api/v2/workspaces/ws-1", None, status=204)
    assert make_client(api).delete("/workspaces/ws-1") is None


@pytest.mark.parametrize(
    "status,error",
    [(401, AuthenticationError), (403, AuthenticationError), (404, ResourceNotFoundError)],
)
def test_status_mapping(api, status, error):
    api.add("GET", "/api/v2/teams/t-1", {"errors": []}, status=status)
    with pytest.raises(error):
        make_client(api).get("/teams/t-1")


def test_api_error_flattens_json_api_errors(api):
    api.add(
        "POST",
        "/api/v2/organizations/acme/teams",
        {"errors": [{"title": "invalid attribute", "detail": "Name has already been taken"}]},
        status=422,
    )
    with pytest.raises(ApiError) as exc:
        make_client(api).post("/organizations/acme/teams", json={})
    assert exc.value.status == 422
    assert "invalid attribute: Name has already been taken" in exc.value.message


def test_transport_failure_is_network_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = TFEClient("https://app.terraform.io", "tok", transport=httpx.MockTransport(handler))
    with pytest.raises(NetworkError):
        client.get("/ping")


def test_invalid_json_is_api_error(api):
    api.add("GET", "/api/v2/plans/p-1", "not json")
    with pytest.raises(ApiError):
        make_client(api).get("/plans/p-1")


def test_text_follows_absolute_urls_without_token(api):
    api.add("GET", "/logs/abc", "line one\nline two\n")
    text = make_client(api).text("https://archivist.terraform.io/logs/abc")
    assert text == "line one\nline two\n"
    assert "Authorization" not in api.last().headers


def test_upload_puts_octet_stream(api):
    api.add("PUT", "/upload/xyz", None)
    make_client(api).upload("https://archivist.terraform.io/upload/xyz", b"data")
    request = api.last("PUT")
    assert request.content == b"data"
    assert request.headers["Content-Type"] == "application/octet-stream"


def test_from_config_requires_token():
    with pytest.raises(ConfigError):
        TFEClient.from_config(Settings(), Config())


def test_from_config_uses_stored_credential(api):
    client = TFEClient.from_config(
        Settings(), Config(credentials={"app.terraform.io": "stored"}), transport=api.transport
    )
    api.add("GET", "/api/v2/ping", {})
    client.get("/ping")
    assert api.last().headers["Authorization"] == "Bearer stored"


def test_public_registry_client(api):
    api.add("GET", "/v1/providers/hashicorp/aws", {"id": "hashicorp/aws/5.0.0"})
    client = PublicRegistryClient(transport=api.transport)
    assert client.get("/v1/providers/hashicorp/aws")["id"] == "hashicorp/aws/5.0.0"
    assert api.last().url.host == "registry.terraform.io"


def test_request_body_is_json_api(api):
    api.add("PATCH", "/api/v2/teams/t-1", {"data": {"id": "t-1"}})
    make_client(api).patch("/teams/t-1", json={"data": {"type": "teams"}})
    assert json.loads(api.last().content) == {"data": {"type": "teams"}}
