"""Web API 端点测试"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from nupack.core.config import Config
from nupack.core.exceptions import SourceUnavailableError
from nupack.services.container import ServiceContainer
from nupack.web.app import app


@pytest.fixture()
def container(tmp_path: Path) -> ServiceContainer:
    feed = tmp_path / "feed"
    sources = tmp_path / "sources.yml"
    sources.write_text(
        "active: local\n"
        "sources:\n"
        f"  local:\n    url: {feed}\n"
        "  nuget.org:\n    url: https://api.nuget.org/v3/index.json\n    enabled: false\n",
        encoding="utf-8",
    )
    cfg = Config(
        sources_file=str(sources),
        cache_dir=str(tmp_path / "cache"),
        packages_dir="",
    )
    return ServiceContainer(cfg)


@pytest.fixture()
def client(container: ServiceContainer):
    """Flask 测试客户端，绑定临时容器"""
    app.config["TESTING"] = True
    app.config["CONTAINER"] = container
    with app.test_client() as c:
        yield c
    app.config.pop("CONTAINER", None)


class TestGlobalErrorHandlers:
    def test_404_returns_json(self, client) -> None:
        resp = client.get("/api/nonexistent")
        assert resp.status_code == 404
        assert "error" in resp.get_json()

    def test_405_returns_json(self, client) -> None:
        resp = client.delete("/api/sources")
        assert resp.status_code == 405
        assert "error" in resp.get_json()

    def test_payload_too_large(self, client) -> None:
        resp = client.post("/api/manifest/validate", data=b"x" * (1024 * 1024 + 1))
        assert resp.status_code == 413


class TestApiResolve:
    def test_missing_id(self, client) -> None:
        resp = client.post("/api/resolve", json={})
        assert resp.status_code == 400
        assert "id" in resp.get_json()["error"]

    def test_invalid_frameworks(self, client) -> None:
        resp = client.post("/api/resolve", json={"id": "Pkg", "frameworks": 5})
        assert resp.status_code == 400

    def test_resolve_latest_from_local_feed(self, client, make_nupkg) -> None:
        make_nupkg("Sample.Lib", "1.0.0")
        make_nupkg("Sample.Lib", "2.0.0-beta")
        resp = client.post("/api/resolve", json={"id": "Sample.Lib"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["identities"] == [{"id": "Sample.Lib", "version": "1.0.0"}]
        assert data["warnings"] == []
        assert data["errors"] == []

    def test_resolve_prerelease(self, client, make_nupkg) -> None:
        make_nupkg("Sample.Lib", "1.0.0")
        make_nupkg("Sample.Lib", "2.0.0-beta")
        resp = client.post("/api/resolve", json={"id": "Sample.Lib", "prerelease": "true"})
        assert resp.get_json()["identities"][0]["version"] == "2.0.0-beta"

    def test_archive_switches_source(self, client, make_nupkg, tmp_path: Path) -> None:
        path = make_nupkg("Sample.Lib", "1.0.0", directory=tmp_path / "drop")
        resp = client.post("/api/resolve", json={"id": str(path)})
        assert resp.status_code == 200
        assert resp.get_json()["source"] == str((tmp_path / "drop").resolve())

    def test_remote_archive_not_supported(self, client) -> None:
        resp = client.post("/api/resolve", json={
            "id": "https://example.com/a.nupkg", "source": "/srv/feed",
        })
        assert resp.status_code == 501
        assert resp.get_json()["code"] == "NOT_SUPPORTED"

    def test_unknown_package(self, client, make_nupkg) -> None:
        make_nupkg("Sample.Lib", "1.0.0")
        resp = client.post("/api/resolve", json={"id": "Nope"})
        assert resp.status_code == 404
        assert resp.get_json()["code"] == "VERSION_RESOLUTION_ERROR"

    def test_invalid_version(self, client) -> None:
        resp = client.post("/api/resolve", json={"id": "Pkg", "version": "x.y", "source": "/srv"})
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "INVALID_VERSION"

    def test_source_unavailable(self, client, container) -> None:
        install = MagicMock()
        install.prepare.side_effect = SourceUnavailableError("包源均不可用")
        container._instances["install"] = install
        resp = client.post("/api/resolve", json={"id": "Pkg"})
        assert resp.status_code == 503
        assert resp.get_json()["code"] == "SOURCE_UNAVAILABLE"

    def test_lock_file_partial_success(self, client, make_nupkg, tmp_path: Path) -> None:
        make_nupkg("Alpha", "1.0.0")
        config = tmp_path / "packages.config"
        config.write_text(
            '<packages><package id="Alpha" version="1.0.0" />'
            '<package id="Beta" version="bad" /></packages>',
            encoding="utf-8",
        )
        resp = client.post("/api/resolve", json={"id": str(config)})
        data = resp.get_json()
        assert resp.status_code == 200
        assert data["identities"] == [{"id": "Alpha", "version": "1.0.0"}]
        assert len(data["errors"]) == 1


class TestApiManifest:
    def test_valid(self, client, nuspec) -> None:
        resp = client.post("/api/manifest/validate", data=nuspec(namespace=True))
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["valid"] is True
        assert data["id"] == "Sample.Lib"

    def test_all_violations_returned(self, client) -> None:
        resp = client.post(
            "/api/manifest/validate",
            data="<package><metadata><version>1.0</version></metadata></package>",
        )
        assert resp.status_code == 400
        data = resp.get_json()
        assert data["code"] == "VALIDATION_ERROR"
        assert len(data["details"]) == 3

    def test_malformed(self, client) -> None:
        resp = client.post("/api/manifest/validate", data="<package>")
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "PARSE_ERROR"

    def test_empty_body(self, client) -> None:
        resp = client.post("/api/manifest/validate", data=b"")
        assert resp.status_code == 400


class TestApiSources:
    def test_list(self, client) -> None:
        resp = client.get("/api/sources")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["active"] == "local"
        assert [s["name"] for s in data["sources"]] == ["local", "nuget.org"]
        assert data["sources"][1]["enabled"] is False
        assert data["sources"][1]["http"] is True
