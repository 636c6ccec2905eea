"""包源可用性检查测试"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from nupack.core.models import PackageSource
from nupack.services.source_availability import (
    FALLBACK_TO_CACHE_MESSAGE,
    LOCAL_CACHE_FAILURE_MESSAGE,
    NO_SOURCE_LABEL,
    SourceAvailabilityController,
    SourceDecision,
    SourceSnapshot,
    decide_source,
    ensure_cache,
    local_source_accessible,
    local_source_path,
)

HTTP = SourceSnapshot("https://api.nuget.org/v3/index.json", is_http=True)
LOCAL_OK = SourceSnapshot("/srv/feed", is_http=False, accessible=True)
LOCAL_DOWN = SourceSnapshot("//fileserver/feed", is_http=False, accessible=False)


class TestDecideSource:
    @pytest.mark.parametrize("snapshots,network,cache,expected", [
        ([HTTP], True, False, SourceDecision.USE_CONFIGURED),
        ([HTTP], False, True, SourceDecision.FALLBACK_TO_CACHE),
        ([HTTP], False, False, SourceDecision.FAIL),
        ([LOCAL_OK], False, False, SourceDecision.USE_CONFIGURED),
        ([LOCAL_DOWN], True, True, SourceDecision.FALLBACK_TO_CACHE),
        ([LOCAL_DOWN, HTTP], True, False, SourceDecision.USE_CONFIGURED),
        ([LOCAL_DOWN, LOCAL_OK], False, False, SourceDecision.USE_CONFIGURED),
        ([], True, True, SourceDecision.FALLBACK_TO_CACHE),
        ([], True, False, SourceDecision.FAIL),
    ])
    def test_decision_table(self, snapshots, network, cache, expected) -> None:
        assert decide_source(snapshots, network, cache) is expected

    def test_accepts_generator(self) -> None:
        assert decide_source(iter([HTTP]), True, False) is SourceDecision.USE_CONFIGURED


class TestLocalPaths:
    def test_plain_path(self, tmp_path: Path) -> None:
        assert local_source_path(str(tmp_path)) == tmp_path
        assert local_source_accessible(str(tmp_path)) is True

    def test_file_uri(self, tmp_path: Path) -> None:
        assert local_source_path(tmp_path.as_uri()) == tmp_path

    def test_unc_file_uri(self) -> None:
        assert local_source_path("file://fileserver/share/feed") == Path("//fileserver/share/feed")

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert local_source_accessible(str(tmp_path / "missing")) is False

    def test_file_is_not_a_source(self, tmp_path: Path) -> None:
        path = tmp_path / "file.txt"
        path.write_text("x", encoding="utf-8")
        assert local_source_accessible(str(path)) is False

    def test_ensure_cache_creates_directory(self, tmp_path: Path) -> None:
        cache = tmp_path / "a" / "b"
        assert ensure_cache(str(cache)) is True
        assert cache.is_dir()

    def test_ensure_cache_blocked_by_file(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        assert ensure_cache(str(blocker / "cache")) is False

    def test_ensure_cache_empty(self) -> None:
        assert ensure_cache("") is False


def _provider(*sources: PackageSource, active: PackageSource | None = None) -> MagicMock:
    provider = MagicMock()
    provider.enabled_sources.return_value = list(sources)
    provider.active_source.return_value = active if active is not None else (
        sources[0] if sources else None
    )
    return provider


class TestController:
    CACHE = "/home/user/.nupack/cache"

    def _controller(self, provider, *, network=True, paths=(), cache=True):
        cache_check = MagicMock(return_value=cache)
        controller = SourceAvailabilityController(
            provider,
            self.CACHE,
            network_check=lambda: network,
            path_check=lambda p: p in paths,
            cache_check=cache_check,
        )
        return controller, cache_check

    def test_explicit_source_skips_checks(self) -> None:
        provider = _provider()
        network = MagicMock(return_value=False)
        controller = SourceAvailabilityController(
            provider, self.CACHE, network_check=network,
        )
        check = controller.check("  //offline/share  ")
        assert check.decision is SourceDecision.USE_CONFIGURED
        assert check.source == "//offline/share"
        assert check.warning == ""
        network.assert_not_called()
        provider.enabled_sources.assert_not_called()

    def test_http_source_with_network(self) -> None:
        src = PackageSource("nuget.org", "https://api.nuget.org/v3/index.json")
        controller, cache_check = self._controller(_provider(src))
        check = controller.check()
        assert check.decision is SourceDecision.USE_CONFIGURED
        assert check.source == src.url
        cache_check.assert_not_called()

    def test_http_source_skips_network_check(self) -> None:
        src = PackageSource("nuget.org", "https://api.nuget.org/v3/index.json")
        path_check = MagicMock(return_value=False)
        controller = SourceAvailabilityController(
            _provider(src), self.CACHE, network_check=lambda: True, path_check=path_check,
        )
        controller.check()
        path_check.assert_not_called()

    def test_local_source_accessible(self) -> None:
        src = PackageSource("share", "//fileserver/feed")
        controller, _ = self._controller(_provider(src), network=False, paths=(src.url,))
        assert controller.check().decision is SourceDecision.USE_CONFIGURED

    def test_fallback_to_cache(self, caplog) -> None:
        src = PackageSource("share", "//fileserver/feed")
        controller, cache_check = self._controller(_provider(src))
        with caplog.at_level(logging.WARNING):
            check = controller.check()
        assert check.decision is SourceDecision.FALLBACK_TO_CACHE
        assert check.source == self.CACHE
        assert check.warning == FALLBACK_TO_CACHE_MESSAGE.format(src.url, self.CACHE)
        assert check.warning in caplog.text
        cache_check.assert_called_once_with(self.CACHE)

    def test_cache_unavailable(self, caplog) -> None:
        src = PackageSource("nuget.org", "https://api.nuget.org/v3/index.json")
        controller, _ = self._controller(_provider(src), network=False, cache=False)
        with caplog.at_level(logging.WARNING):
            check = controller.check()
        assert check.decision is SourceDecision.FAIL
        assert check.source == src.url
        assert check.warning == LOCAL_CACHE_FAILURE_MESSAGE.format(src.url)
        assert check.warning != FALLBACK_TO_CACHE_MESSAGE.format(src.url, self.CACHE)
        assert check.warning in caplog.text

    def test_no_sources_configured(self) -> None:
        controller, _ = self._controller(_provider(), cache=True)
        check = controller.check()
        assert check.decision is SourceDecision.FALLBACK_TO_CACHE
        assert NO_SOURCE_LABEL in check.warning

    def test_any_usable_source_is_enough(self) -> None:
        down = PackageSource("share", "//fileserver/feed")
        up = PackageSource("nuget.org", "https://api.nuget.org/v3/index.json")
        controller, _ = self._controller(_provider(down, up, active=down))
        check = controller.check()
        assert check.decision is SourceDecision.USE_CONFIGURED
        assert check.source == down.url
