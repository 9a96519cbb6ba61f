"""Tests for the live coverage tree provider."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import pytest

from coverview.config.models import RootConfig
from coverview.config.store import ConfigStore
from coverview.core.errors import (
    CommandError,
    ConfigError,
    EmptyWorkspaceError,
    ErrorCode,
    InternalError,
    LoadError,
)
from coverview.coverage.models import CoverageRecord, CoverageRecordSet
from coverview.index.builder import TreeIndex
from coverview.index.tree import total_lines
from coverview.refresh.events import RefreshReason
from coverview.view.provider import CoverageTreeProvider, ProviderState
from coverview.workspace import MonitoredRoot


class GatedSource:
    """Coverage source whose loads can be held open."""

    def __init__(self) -> None:
        self.calls = 0
        self.lines = 10
        self.error: Exception | None = None
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()
        self.gate.set()

    async def load_coverage(self, root: MonitoredRoot) -> CoverageRecordSet:
        self.calls += 1
        self.entered.set()
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return CoverageRecordSet.of([CoverageRecord("a.ts", self.lines, self.lines // 2)])


class EmptyLister:
    async def list_files(self, root: MonitoredRoot) -> list[Path]:
        return []


class RecordingRunner:
    def __init__(self, fail_for: str | None = None, slow_for: str | None = None) -> None:
        self.calls: list[tuple[str, Path]] = []
        self.fail_for = fail_for
        self.slow_for = slow_for
        self.cancelled: list[str] = []

    async def run(self, command: str, cwd: Path) -> str:
        self.calls.append((command, cwd))
        if command == self.fail_for:
            raise CommandError.failed(command, 1, "boom")
        if command == self.slow_for:
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                self.cancelled.append(command)
                raise
        return f"ran {command}"


async def failing_index(*_args: object) -> TreeIndex:
    raise RuntimeError("disk gone")


async def wait_until(condition: Callable[[], bool], timeout: float = 2.0) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not condition():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.001)


@pytest.fixture
def root(tmp_path: Path) -> MonitoredRoot:
    return MonitoredRoot.from_path(tmp_path / "app")


@pytest.fixture
def source() -> GatedSource:
    return GatedSource()


def make_provider(
    roots: list[MonitoredRoot],
    source: GatedSource,
    *,
    configs: dict[MonitoredRoot, RootConfig] | None = None,
    runner: RecordingRunner | None = None,
) -> CoverageTreeProvider:
    store = ConfigStore(configs if configs is not None else {r: RootConfig() for r in roots})
    return CoverageTreeProvider(roots, store, source, EmptyLister(), command_runner=runner)


class TestGetChildren:
    """Top-level reads."""

    @pytest.mark.asyncio
    async def test_given_no_roots_when_get_children_then_empty(self, source: GatedSource) -> None:
        provider = make_provider([], source)

        assert await provider.get_children() == []
        assert source.calls == 0

    @pytest.mark.asyncio
    async def test_given_no_tree_when_get_children_then_built_lazily(
        self, root: MonitoredRoot, source: GatedSource
    ) -> None:
        # Given
        provider = make_provider([root], source)
        assert provider.current is None

        # When
        children = await provider.get_children()

        # Then
        assert [c.label for c in children] == ["app"]
        assert provider.status.builds == 1

        # And the same tree serves later reads
        (file,) = await provider.get_children(children[0])
        assert file.label == "a.ts"
        assert source.calls == 1
        await provider.close()


class TestRefresh:
    """Rebuilds, coalescing and atomic swaps."""

    @pytest.mark.asyncio
    async def test_given_build_in_flight_when_read_then_old_tree_served(
        self, root: MonitoredRoot, source: GatedSource
    ) -> None:
        """Readers see either the whole old tree or the whole new one."""
        # Given
        provider = make_provider([root], source)
        old = await provider.refresh()
        source.lines = 20
        source.gate.clear()
        source.entered.clear()

        # When
        provider.request_refresh(RefreshReason.COVERAGE_UPDATED)
        await source.entered.wait()

        # Then
        assert provider.current is old
        assert provider.status.state is ProviderState.BUILDING

        # When the build completes
        source.gate.set()
        await wait_until(lambda: provider.current is not old)

        # Then
        assert total_lines(provider.current.root) == 20  # type: ignore[union-attr]
        assert provider.status.state is ProviderState.IDLE
        await provider.close()

    @pytest.mark.asyncio
    async def test_given_build_in_flight_when_many_requests_then_one_more_build(
        self, root: MonitoredRoot, source: GatedSource
    ) -> None:
        """Requests during a build collapse into a single follow-up build."""
        # Given
        provider = make_provider([root], source)
        notified: list[int] = []
        provider.add_listener(lambda: notified.append(provider.status.builds))
        source.gate.clear()
        provider.request_refresh()
        await source.entered.wait()

        # When
        for _ in range(5):
            provider.request_refresh(RefreshReason.COVERAGE_UPDATED)
        assert provider.status.pending is True
        source.gate.set()
        await wait_until(lambda: provider.status.builds == 2 and not provider.status.pending)
        await asyncio.sleep(0.01)

        # Then
        assert source.calls == 2
        assert notified == [1, 2]
        assert provider.status.last_reason is RefreshReason.COVERAGE_UPDATED
        await provider.close()

    @pytest.mark.asyncio
    async def test_given_build_fails_when_refreshing_then_previous_tree_kept(
        self, root: MonitoredRoot, source: GatedSource, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # Given
        provider = make_provider([root], source)
        old = await provider.refresh()
        monkeypatch.setattr("coverview.view.provider.index_workspace", failing_index)

        # When
        tree = await provider.refresh()

        # Then
        assert tree is old
        assert provider.status.last_error == "disk gone"
        assert provider.status.builds == 1
        await provider.close()

    @pytest.mark.asyncio
    async def test_given_first_build_fails_when_refresh_then_internal_error(
        self, root: MonitoredRoot, source: GatedSource, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        provider = make_provider([root], source)
        monkeypatch.setattr("coverview.view.provider.index_workspace", failing_index)

        with pytest.raises(InternalError):
            await provider.refresh()
        await provider.close()

    @pytest.mark.asyncio
    async def test_given_root_load_error_when_refresh_then_diagnostic_not_failure(
        self, root: MonitoredRoot, source: GatedSource
    ) -> None:
        """Per-root load errors do not fail the build."""
        provider = make_provider([root], source)
        source.error = LoadError.for_root(str(root.path), "bad document")

        tree = await provider.refresh()

        assert [d.kind.value for d in tree.diagnostics] == ["load_failed"]
        assert provider.status.last_error is None
        await provider.close()

    @pytest.mark.asyncio
    async def test_given_closed_when_refresh_requested_then_ignored(
        self, root: MonitoredRoot, source: GatedSource
    ) -> None:
        provider = make_provider([root], source)
        await provider.close()

        provider.request_refresh()
        await asyncio.sleep(0.01)

        assert source.calls == 0
        assert provider.status.state is ProviderState.STOPPED


class TestGenerateCoverage:
    """Running each root's coverage command."""

    @pytest.mark.asyncio
    async def test_given_no_roots_when_generate_then_empty_workspace_error(
        self, source: GatedSource
    ) -> None:
        provider = make_provider([], source, runner=RecordingRunner())

        with pytest.raises(EmptyWorkspaceError):
            await provider.generate_coverage()

    @pytest.mark.asyncio
    async def test_given_root_without_command_when_generate_then_config_error(
        self, root: MonitoredRoot, source: GatedSource
    ) -> None:
        # Given
        runner = RecordingRunner()
        provider = make_provider([root], source, runner=runner)

        # When
        with pytest.raises(ConfigError) as exc_info:
            await provider.generate_coverage()

        # Then
        assert exc_info.value.code == ErrorCode.CONFIG_MISSING_REQUIRED
        assert exc_info.value.details["root"] == str(root.path)
        assert runner.calls == []

    @pytest.mark.asyncio
    async def test_given_commands_when_generate_then_each_runs_in_its_root(
        self, tmp_path: Path, source: GatedSource
    ) -> None:
        # Given
        web = MonitoredRoot.from_path(tmp_path / "web")
        api = MonitoredRoot.from_path(tmp_path / "api")
        runner = RecordingRunner()
        provider = make_provider(
            [web, api],
            source,
            configs={
                web: RootConfig(coverage_command="npm run cov"),
                api: RootConfig(coverage_command="pytest --cov"),
            },
            runner=runner,
        )

        # When
        output = await provider.generate_coverage()

        # Then
        assert output == "ran npm run cov\nran pytest --cov"
        assert sorted(runner.calls) == sorted(
            [("npm run cov", web.path), ("pytest --cov", api.path)]
        )

    @pytest.mark.asyncio
    async def test_given_failing_command_when_generate_then_command_error(
        self, root: MonitoredRoot, source: GatedSource
    ) -> None:
        runner = RecordingRunner(fail_for="make cov")
        provider = make_provider(
            [root], source, configs={root: RootConfig(coverage_command="make cov")}, runner=runner
        )

        with pytest.raises(CommandError) as exc_info:
            await provider.generate_coverage()

        assert exc_info.value.stderr == "boom"

    @pytest.mark.asyncio
    async def test_given_one_command_fails_when_generate_then_others_cancelled(
        self, tmp_path: Path, source: GatedSource
    ) -> None:
        # Given
        web = MonitoredRoot.from_path(tmp_path / "web")
        api = MonitoredRoot.from_path(tmp_path / "api")
        runner = RecordingRunner(fail_for="make cov", slow_for="npm run cov")
        provider = make_provider(
            [web, api],
            source,
            configs={
                web: RootConfig(coverage_command="npm run cov"),
                api: RootConfig(coverage_command="make cov"),
            },
            runner=runner,
        )

        # When
        with pytest.raises(CommandError) as exc_info:
            await asyncio.wait_for(provider.generate_coverage(), timeout=2.0)

        # Then
        assert exc_info.value.stderr == "boom"
        assert runner.cancelled == ["npm run cov"]
