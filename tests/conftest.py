from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
for entry in (SRC_ROOT, ROOT):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

import pytest  # noqa: E402

from codesign_batch import cli  # noqa: E402
from codesign_batch.tools import config as tool_config  # noqa: E402
from codesign_batch.tools import java as java_tools  # noqa: E402
from tests.utils import FakeJava, write_fake_java  # noqa: E402


def pytest_collection_modifyitems(config, items) -> None:
    """Skip integration tests unless explicitly selected via -m integration."""
    markexpr = config.option.markexpr or ""
    if "integration" in markexpr:
        return
    skip_integration = pytest.mark.skip(reason="integration tests run only with -m integration")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


@pytest.fixture(autouse=True)
def _isolate_environment(monkeypatch, tmp_path) -> None:
    """Prevent local tool configs and credentials from bleeding into tests."""
    monkeypatch.setenv(tool_config.ENV_TOOL_PATHS, str(tmp_path / "missing_tool_paths.json"))
    for name in (
        tool_config.ENV_CODESIGNTOOL_HOME,
        java_tools.JAVA_HOME_ENV,
        *cli.ENV_DEFAULTS.values(),
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_java(tmp_path) -> FakeJava:
    if sys.platform.startswith("win"):
        pytest.skip("fake java relies on a shebang line")
    return write_fake_java(tmp_path / "fake")
