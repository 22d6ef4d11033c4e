"""Tests for the FastAPI service mode."""

from __future__ import annotations

import datetime as dt
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from mdxbundler.engine.api import BuildOptions, Location, Message
from mdxbundler.errors import BundleError, ConfigurationError
from mdxbundler.frontmatter import MatterOptions
from mdxbundler.markup import MarkupOptions
from mdxbundler.models import BundleResult
from mdxbundler.service import create_app


class _StubBundler:
    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.error: Exception | None = None

    async def __call__(self, source, **kwargs) -> BundleResult:
        self.calls.append({"source": source, **kwargs})
        if self.error is not None:
            raise self.error
        return BundleResult(
            code="var Component = 1;return Component;",
            frontmatter={"title": "Hello", "published": dt.date(2021, 2, 13)},
            matter={"excerpt": "Intro"},
            errors=[Message(text="careful")],
        )


@pytest.fixture
def stub() -> _StubBundler:
    return _StubBundler()


@pytest.fixture
def client(stub: _StubBundler) -> TestClient:
    return TestClient(create_app(stub))


def test_health_endpoint(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_bundle_endpoint_returns_code_and_frontmatter(client: TestClient, stub: _StubBundler) -> None:
    response = client.post(
        "/bundle",
        json={"source": "# Hello", "files": {"./demo.tsx": "export default 1"}, "globals": {"left-pad": "myLeftPad"}},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["code"].endswith(";return Component;")
    assert payload["frontmatter"] == {"title": "Hello", "published": "2021-02-13"}
    assert payload["excerpt"] == "Intro"
    assert payload["warnings"] == [{"text": "careful", "plugin": None, "location": None}]
    (call,) = stub.calls
    assert call["source"] == "# Hello"
    assert call["files"] == {"./demo.tsx": "export default 1"}
    assert call["globals"] == {"left-pad": "myLeftPad"}
    assert "build_options" not in call


def test_bundle_endpoint_translates_flags_into_hooks(client: TestClient, stub: _StubBundler) -> None:
    client.post(
        "/bundle",
        json={"source": "x", "excerpt": True, "image_imports": True, "loaders": {".ts": "tsx"}},
    )

    (call,) = stub.calls
    assert call["matter_options"](MatterOptions()).excerpt is True
    assert call["markup_options"](MarkupOptions(), {}).image_imports is True
    assert call["build_options"](BuildOptions(loader={".ts": "ts"}), {}).loader == {".ts": "tsx"}


def test_bundle_errors_map_to_422(client: TestClient, stub: _StubBundler) -> None:
    location = Location(file="/work/demo.tsx", line=1, column=7, line_text="import './blah-blah'")
    stub.error = BundleError(
        'Build failed with 1 error:\ndemo.tsx:1:7: ERROR: Could not resolve "./blah-blah"',
        [Message(text='Could not resolve "./blah-blah"', location=location)],
    )

    response = client.post("/bundle", json={"source": "x"})

    assert response.status_code == 422
    body = response.json()
    assert body["detail"].startswith("Build failed with 1 error:")
    assert body["errors"][0]["location"]["line"] == 1


def test_configuration_errors_map_to_400(client: TestClient, stub: _StubBundler) -> None:
    stub.error = ConfigurationError("When using `bundle_directory` or `bundle_path` the other must be set.")

    response = client.post("/bundle", json={"source": "x", "bundle_directory": "/out"})

    assert response.status_code == 400
    assert "the other must be set" in response.json()["detail"]


def test_missing_file_maps_to_404(client: TestClient, stub: _StubBundler, tmp_path: Path) -> None:
    stub.error = FileNotFoundError(str(tmp_path / "absent.mdx"))

    response = client.post("/bundle", json={"file": str(tmp_path / "absent.mdx")})

    assert response.status_code == 404


def test_real_bundler_end_to_end(tmp_path: Path) -> None:
    client = TestClient(create_app())

    response = client.post(
        "/bundle",
        json={
            "source": "---\ntitle: Real\n---\n\nimport Demo from './demo'\n\n<Demo />\n",
            "cwd": str(tmp_path),
            "files": {"./demo.jsx": "export default () => <p>demo</p>"},
        },
    )

    assert response.status_code == 200
    assert response.json()["frontmatter"] == {"title": "Real"}
    assert '_jsx("p", {children: "demo"})' in response.json()["code"]
