import io
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from hcptf.cli import main
from hcptf.commands import Meta, build_registry
from hcptf.settings import Settings

# ----------------------------------------------------------------------
# Environment isolation
# ----------------------------------------------------------------------
ENV_VARS = (
    "TFE_TOKEN",
    "TFE_ADDRESS",
    "HCPTF_TOKEN",
    "HCPTF_ADDRESS",
    "HCPTF_CONFIG",
    "HCPTF_LOG_LEVEL",
    "HCPTF_LOG_FORMAT",
)


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch, tmp_path):
    """Point HOME at a temp dir and clear every variable hcptf reads."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return tmp_path


# ----------------------------------------------------------------------
# Fake HCP Terraform API
# ----------------------------------------------------------------------
class FakeAPI:
    """Canned responses keyed by (method, path) served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Tuple[int, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, body: Any = None, status: int = 200) -> None:
        self.routes[(method.upper(), path)] = (status, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.path)
        if key not in self.routes:
            return httpx.Response(404, json={"errors": [{"status": "404", "title": "not found"}]})
        status, body = self.routes[key]
        if body is None:
            return httpx.Response(status)
        if isinstance(body, (bytes, str)):
            return httpx.Response(status, content=body)
        return httpx.Response(status, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def last(self, method: Optional[str] = None) -> httpx.Request:
        for request in reversed(self.requests):
            if method is None or request.method == method:
                return request
        raise AssertionError(f"no {method or ''} request was sent")

    def last_json(self, method: Optional[str] = None) -> Any:
        return json.loads(self.last(method).content)


@pytest.fixture
def api():
    return FakeAPI()


@dataclass
class Result:
    exit_code: int
    output: str
    error: str


@pytest.fixture
def cli(api, monkeypatch):
    """Run hcptf in-process against the fake API with a token configured."""
    monkeypatch.setenv("TFE_TOKEN", "test-token")

    def invoke(*args: str, input: str = "") -> Result:
        out, err = io.StringIO(), io.StringIO()
        code = main(list(args), out=out, err=err, stdin=io.StringIO(input), transport=api.transport)
        return Result(code, out.getvalue(), err.getvalue())

    return invoke


@pytest.fixture
def registry():
    meta = Meta(out=io.StringIO(), err=io.StringIO(), stdin=io.StringIO(), settings=Settings())
    return build_registry(meta)
