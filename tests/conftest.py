import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, List

import httpx
import pytest
from typer.testing import CliRunner

from stitchcli.infrastructure.config.settings import clear_test_config, reset_configuration
from stitchcli.infrastructure.http.transport import HttpTransport

@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()

@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path):
    """Keeps tests away from the user's config file, .env and STITCH_* variables."""
    for key in list(os.environ):
        if key.startswith("STITCH_") or key.startswith("LOGGING_") or key.startswith("HTTP_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(
        "stitchcli.infrastructure.config.settings.DEFAULT_CONFIG_FILE", tmp_path / "missing-config.yaml"
    )
    monkeypatch.chdir(tmp_path)
    reset_configuration()
    clear_test_config()
    yield
    reset_configuration()
    clear_test_config()

@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """An empty directory for cache artifacts."""
    path = tmp_path / "stitch-cache"
    path.mkdir()
    return path

class FakeStitchApi:
    """Records requests and answers them like the Stitch API would.

    `pages` maps page_num to the resource payload of that page; every
    response carries meta.last_page = len(pages).
    """

    def __init__(self, pages: Dict[int, Dict[str, Any]], resource: str = "Products"):
        self.pages = pages
        self.resource = resource
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = json.loads(request.content or b"{}")
        page_num = int(body.get("page_num", 1))
        payload = {self.resource: self.pages.get(page_num, {}), "meta": {"last_page": len(self.pages)}}
        return httpx.Response(200, json=payload)

    @property
    def bodies(self) -> List[Dict[str, Any]]:
        return [json.loads(r.content) for r in self.requests]

@pytest.fixture
def make_transport() -> Callable[[Callable[[httpx.Request], httpx.Response]], HttpTransport]:
    """Builds an HttpTransport whose AsyncClient answers through a handler."""
    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> HttpTransport:
        return HttpTransport(client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    return _make

@pytest.fixture
def product_pages() -> Dict[int, Dict[str, Any]]:
    """Three pages of two products each, keyed by product id."""
    return {
        page: {
            str(page * 10 + i): {"id": str(page * 10 + i), "name": f"Product {page}.{i}"}
            for i in (1, 2)
        }
        for page in (1, 2, 3)
    }

@pytest.fixture
def fake_api(product_pages) -> FakeStitchApi:
    return FakeStitchApi(product_pages)
