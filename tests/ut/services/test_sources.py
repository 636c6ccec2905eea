"""包源注册表测试"""

from __future__ import annotations

import logging
from pathlib import Path

import pytest
import yaml

from nupack.core.exceptions import ConfigError
from nupack.services.sources import SourceRegistry

SOURCES_YML = """\
active: team
sources:
  nuget.org:
    url: https://api.nuget.org/v3/index.json
  team:
    url: //fileserver/packages
  old:
    url: /srv/old-feed
    enabled: false
"""


@pytest.fixture()
def registry_file(tmp_path: Path) -> Path:
    path = tmp_path / "sources.yml"
    path.write_text(SOURCES_YML, encoding="utf-8")
    return path


class TestSourceRegistry:
    def test_list_in_file_order(self, registry_file: Path) -> None:
        names = [s.name for s in SourceRegistry(registry_file).list_sources()]
        assert names == ["nuget.org", "team", "old"]

    def test_enabled_sources(self, registry_file: Path) -> None:
        enabled = SourceRegistry(registry_file).enabled_sources()
        assert [s.name for s in enabled] == ["nuget.org", "team"]
        assert enabled[0].is_http is True
        assert enabled[1].is_http is False

    def test_explicit_active(self, registry_file: Path) -> None:
        assert SourceRegistry(registry_file).active_source().name == "team"

    def test_disabled_active_falls_back(self, registry_file: Path, caplog) -> None:
        reg = SourceRegistry(registry_file)
        reg.set_active("old")
        with caplog.at_level(logging.WARNING):
            assert reg.active_source().name == "nuget.org"
        assert "old" in caplog.text

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        reg = SourceRegistry(tmp_path / "none.yml")
        assert reg.list_sources() == []
        assert reg.active_source() is None

    def test_missing_url(self, tmp_path: Path) -> None:
        path = tmp_path / "sources.yml"
        path.write_text("sources:\n  broken:\n    enabled: true\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="broken"):
            SourceRegistry(path).list_sources()

    def test_add_persists(self, tmp_path: Path) -> None:
        path = tmp_path / "sources.yml"
        SourceRegistry(path).add("local", " /srv/feed ")
        reloaded = SourceRegistry(path)
        assert reloaded.get("local").url == "/srv/feed"
        assert yaml.safe_load(path.read_text(encoding="utf-8"))["sources"]["local"]["enabled"] is True

    def test_add_requires_name_and_url(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            SourceRegistry(tmp_path / "s.yml").add("x", "  ")

    def test_remove_clears_active(self, registry_file: Path) -> None:
        reg = SourceRegistry(registry_file)
        assert reg.remove("team") is True
        assert reg.remove("team") is False
        reloaded = SourceRegistry(registry_file)
        assert reloaded.get("team") is None
        assert reloaded.active_source().name == "nuget.org"

    def test_set_enabled(self, registry_file: Path) -> None:
        reg = SourceRegistry(registry_file)
        assert reg.set_enabled("old", True) is True
        assert reg.set_enabled("ghost", True) is False
        assert len(SourceRegistry(registry_file).enabled_sources()) == 3

    def test_set_active_unknown(self, registry_file: Path) -> None:
        with pytest.raises(ConfigError, match="ghost"):
            SourceRegistry(registry_file).set_active("ghost")
