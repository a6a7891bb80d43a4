"""Tests for the CliHarness entry point."""

import os
from pathlib import Path

import pytest

from clirig import CliHarness, CommandRegistry, HarnessConfig
from clirig.exceptions import UnexpectedSuccessError
from clirig.testing import FakeAccessor


class TestEnvironmentBinding:
    def test_repo_path_is_bound_on_construction(self, harness: CliHarness, repo_path: Path) -> None:
        assert os.environ["IPFS_PATH"] == str(repo_path)
        assert harness.repo_path == repo_path

    def test_custom_env_var(
        self, registry: CommandRegistry, accessor: FakeAccessor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("NODE_REPO", "unset")
        CliHarness(tmp_path, registry, accessor, HarnessConfig(repo_env_var="NODE_REPO"))
        assert os.environ["NODE_REPO"] == str(tmp_path)

    def test_last_harness_wins(
        self, registry: CommandRegistry, accessor: FakeAccessor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("IPFS_PATH", "unset")
        CliHarness(tmp_path / "a", registry, accessor)
        CliHarness(tmp_path / "b", registry, accessor)
        assert os.environ["IPFS_PATH"] == str(tmp_path / "b")


@pytest.mark.asyncio
class TestHarnessCalls:
    async def test_call_is_run(self, harness: CliHarness, registry: CommandRegistry) -> None:
        registry.register("id", lambda ctx: (ctx.stdout.write("QmPeer"), ctx.on_complete()))
        assert await harness("id") == "QmPeer"

    async def test_custom_aliases_from_config(
        self, registry: CommandRegistry, accessor: FakeAccessor, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("IPFS_PATH", "unset")
        registry.register("files", lambda ctx: (ctx.stdout.write(" ".join(ctx.argv)), ctx.on_complete()))
        harness = CliHarness(tmp_path, registry, accessor, HarnessConfig(aliases={"ls": "files"}))

        assert await harness.run("ls /") == "files ls /"


@pytest.mark.asyncio
class TestFail:
    async def test_returns_handler_error_text(self, harness: CliHarness, registry: CommandRegistry) -> None:
        def files(ctx):
            raise FileNotFoundError("no such file: ./missing")

        registry.register("files", files)
        assert await harness.fail("add ./missing") == "no such file: ./missing"

    async def test_returns_text_of_other_failures(self, harness: CliHarness) -> None:
        assert "bogus" in await harness.fail("bogus")

    async def test_raises_when_command_succeeds(self, harness: CliHarness, registry: CommandRegistry) -> None:
        registry.register("version", lambda ctx: (ctx.stdout.write("0.1.0"), ctx.on_complete()))

        with pytest.raises(UnexpectedSuccessError) as exc_info:
            await harness.fail("version")

        assert isinstance(exc_info.value, AssertionError)
        assert "0.1.0" in str(exc_info.value)
