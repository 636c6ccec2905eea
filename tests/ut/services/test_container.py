"""ServiceContainer 单元测试"""

from __future__ import annotations

from pathlib import Path

import pytest

from nupack.core.config import Config
from nupack.core.models import ResolutionInput
from nupack.services.container import ServiceContainer
from nupack.services.identity_pipeline import IdentityResolutionPipeline
from nupack.services.install_service import InstallService
from nupack.services.repository import HttpFeedRepository, LocalFolderRepository


@pytest.fixture()
def config(tmp_path: Path) -> Config:
    sources = tmp_path / "sources.yml"
    sources.write_text(
        "sources:\n  local:\n    url: " + str(tmp_path / "feed") + "\n",
        encoding="utf-8",
    )
    return Config(
        sources_file=str(sources),
        cache_dir=str(tmp_path / "cache"),
        packages_dir=str(tmp_path / "packages"),
        http_timeout=7,
    )


class TestServiceContainer:
    def test_lazy_loading(self, config: Config) -> None:
        c = ServiceContainer(config)
        assert len(c._instances) == 0
        _ = c.sources
        assert "sources" in c._instances

    def test_shared_instances(self, config: Config) -> None:
        c = ServiceContainer(config)
        assert c.install is c.install
        assert c.install.controller is c.source_check
        assert c.source_check.provider is c.sources

    def test_install_wiring(self, config: Config) -> None:
        c = ServiceContainer(config)
        assert isinstance(c.install, InstallService)
        assert isinstance(c.pipeline, IdentityResolutionPipeline)
        assert c.pipeline.timeout == 7
        assert c.source_check.cache_source == config.cache_dir

    def test_repository_per_source(self, config: Config) -> None:
        c = ServiceContainer(config)
        http = c.repository("https://feed.example.com/v3/index.json")
        assert isinstance(http, HttpFeedRepository)
        assert http.timeout == 7
        assert c.repository("https://feed.example.com/v3/index.json") is http
        assert isinstance(c.repository("/srv/feed"), LocalFolderRepository)

    def test_local_repository_absent(self, config: Config) -> None:
        assert ServiceContainer(config).local_repository is None

    def test_local_repository_present(self, config: Config) -> None:
        Path(config.packages_dir).mkdir()
        repo = ServiceContainer(config).local_repository
        assert isinstance(repo, LocalFolderRepository)

    def test_local_repository_disabled(self, config: Config) -> None:
        config.packages_dir = ""
        assert ServiceContainer(config).local_repository is None

    def test_default_config(self) -> None:
        assert isinstance(ServiceContainer().config, Config)

    def test_end_to_end_from_local_feed(self, config: Config, make_nupkg) -> None:
        make_nupkg("Sample.Lib", "1.0.0")
        make_nupkg("Sample.Lib", "1.1.0")
        result = ServiceContainer(config).install.prepare(ResolutionInput("Sample.Lib"))
        assert [str(i) for i in result.identities] == ["Sample.Lib 1.1.0"]
        assert result.warnings == ()
