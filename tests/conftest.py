from pathlib import Path

import pytest

from clirig import CliHarness, CommandRegistry, HarnessConfig
from clirig.testing import FakeAccessor


@pytest.fixture
def harness_config() -> HarnessConfig:
    # A short grace keeps the `shutdown` tests fast while still measurable.
    return HarnessConfig(shutdown_grace=0.2)


@pytest.fixture
def registry() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def accessor() -> FakeAccessor:
    return FakeAccessor()


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    path = tmp_path / "repo"
    path.mkdir()
    return path


@pytest.fixture
def harness(
    repo_path: Path,
    registry: CommandRegistry,
    accessor: FakeAccessor,
    harness_config: HarnessConfig,
    monkeypatch: pytest.MonkeyPatch,
) -> CliHarness:
    # Registers the variable with monkeypatch so the harness's binding is undone after the test.
    monkeypatch.setenv(harness_config.repo_env_var, "unset")
    return CliHarness(repo_path, registry, accessor, harness_config)
