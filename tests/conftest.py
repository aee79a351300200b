from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--replays",
        action="store",
        default=None,
        metavar="DIR",
        help="directory of real .slp files to smoke-parse",
    )


def pytest_configure(config: pytest.Config) -> None:
    # Ensure the local `src/` tree wins over any other editable install that may exist
    # (e.g. a different git worktree pointing at the same project).
    src_dir = Path(__file__).resolve().parents[1] / "src"
    src_str = str(src_dir)
    if src_str not in sys.path:
        sys.path.insert(0, src_str)
    config.addinivalue_line("markers", "replays: parse real replay files (opt-in via --replays)")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if config.getoption("--replays"):
        return
    skip_replays = pytest.mark.skip(reason="use --replays DIR to parse real replay files")
    for item in items:
        if "replays" in item.keywords:
            item.add_marker(skip_replays)


@pytest.fixture
def replay_dir(request: pytest.FixtureRequest) -> Path:
    return Path(request.config.getoption("--replays"))
